"""
Core business logic for wardrobe management and outfit styling.

This module is framework-agnostic - it doesn't import FastAPI, Snowflake,
or any infrastructure concerns. This separation means we can test the
styling logic in isolation and swap frameworks if needed.
"""
