#!/usr/bin/env python3
"""
Create the StyleAI tables in Snowflake.

Creates clothing_items, user_profiles and usage_limits if they don't
exist. Safe to run repeatedly.

Usage:
    python scripts/create_tables.py
    python scripts/create_tables.py --dry-run

Requires:
    - .env file with Snowflake credentials (see styleai/config/settings.py)
"""

import sys
from pathlib import Path

# Add project root to path so we can import our modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv

# Load environment variables
load_dotenv()


TABLE_DDL = {
    "clothing_items": """
        CREATE TABLE IF NOT EXISTS clothing_items (
            item_id VARCHAR(36) PRIMARY KEY,
            user_id VARCHAR(36) NOT NULL,
            photo_url VARCHAR(512) NOT NULL,
            item_type VARCHAR(100) NOT NULL,
            color VARCHAR(100),
            style_tags ARRAY,
            season VARCHAR(50),
            created_at TIMESTAMP_TZ NOT NULL DEFAULT CURRENT_TIMESTAMP()
        )
    """,
    "user_profiles": """
        CREATE TABLE IF NOT EXISTS user_profiles (
            user_id VARCHAR(36) PRIMARY KEY,
            style_preference VARCHAR(50),
            gender VARCHAR(50),
            body_type VARCHAR(100),
            size_top VARCHAR(20),
            size_bottom VARCHAR(20),
            size_shoes VARCHAR(20),
            budget_range VARCHAR(10),
            updated_at TIMESTAMP_TZ NOT NULL DEFAULT CURRENT_TIMESTAMP()
        )
    """,
    "usage_limits": """
        CREATE TABLE IF NOT EXISTS usage_limits (
            limit_id VARCHAR(36) PRIMARY KEY,
            identifier VARCHAR(255) NOT NULL,
            identifier_type VARCHAR(20) NOT NULL,
            resource_type VARCHAR(50) NOT NULL,
            usage_count INTEGER NOT NULL DEFAULT 0,
            limit_max INTEGER NOT NULL,
            period_start TIMESTAMP_TZ NOT NULL,
            period_end TIMESTAMP_TZ NOT NULL,
            updated_at TIMESTAMP_TZ DEFAULT CURRENT_TIMESTAMP()
        )
    """,
}


def create_tables(dry_run: bool = False) -> int:
    """Run the DDL. Returns a process exit code."""
    from styleai.config.settings import get_settings
    from styleai.infrastructure.snowflake.client import (
        SnowflakeConfig,
        SnowflakeConnectionError,
        get_snowflake_connection,
    )

    if dry_run:
        print("\n=== DRY RUN - No tables will be created ===\n")
        for name, ddl in TABLE_DDL.items():
            print(f"-- {name}")
            print(ddl.strip())
            print()
        return 0

    settings = get_settings()

    if not settings.snowflake_account or not settings.snowflake_user:
        print("ERROR: Missing SNOWFLAKE_ACCOUNT or SNOWFLAKE_USER")
        return 1

    config = SnowflakeConfig(
        account=settings.snowflake_account,
        user=settings.snowflake_user,
        password=settings.snowflake_password or None,
        private_key_path=settings.snowflake_private_key_path,
        private_key_base64=settings.snowflake_private_key_base64,
        database=settings.snowflake_database,
        schema=settings.snowflake_schema,
        warehouse=settings.snowflake_warehouse,
        role=settings.snowflake_role,
    )

    print(f"Connecting to Snowflake account: {config.account}")
    print(f"Using database {config.database}, schema {config.schema}")

    try:
        with get_snowflake_connection(config) as conn:
            cursor = conn.cursor()
            try:
                for name, ddl in TABLE_DDL.items():
                    cursor.execute(ddl)
                    print(f"[OK] {name}")
                conn.commit()
            finally:
                cursor.close()
    except SnowflakeConnectionError as e:
        print(f"ERROR connecting to Snowflake: {e}")
        return 1

    print(f"\n=== Created {len(TABLE_DDL)} tables ===")
    return 0


def main():
    import argparse

    parser = argparse.ArgumentParser(description='Create StyleAI tables in Snowflake')
    parser.add_argument('--dry-run', action='store_true', help='Print the DDL without running it')

    args = parser.parse_args()

    sys.exit(create_tables(dry_run=args.dry_run))


if __name__ == '__main__':
    main()
