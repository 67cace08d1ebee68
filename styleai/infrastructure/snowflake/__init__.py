"""
Snowflake persistence for wardrobe rows, profiles and usage counters.
"""
