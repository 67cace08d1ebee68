"""
In-memory stand-in for a Snowflake connection.

Implements just enough of the DB-API cursor interface to serve the queries
the repositories issue, by matching on the table and statement type.
Rows are returned in the same column order the repositories select, so
repository code runs unchanged against it.

Not suitable for production, but perfect for:
- Local development
- Unit and API tests
- CI environments
"""

import logging
from typing import Any, Optional

from .repositories.clothing import CLOTHING_COLUMNS
from .repositories.profiles import PROFILE_COLUMNS

logger = logging.getLogger(__name__)

USAGE_COLUMNS = (
    "limit_id",
    "identifier",
    "resource_type",
    "usage_count",
    "limit_max",
    "period_start",
    "period_end",
)


class MockSnowflakeCursor:
    """Mock cursor backed by the connection's table dictionaries."""

    def __init__(self, storage: dict[str, dict[str, dict[str, Any]]]) -> None:
        self._storage = storage
        self._results: list[tuple] = []
        self._rowcount: int = 0

    def execute(self, query: str, params: Optional[tuple] = None) -> "MockSnowflakeCursor":
        normalized = " ".join(query.upper().split())
        params = tuple(params or ())

        logger.debug(
            "Mock cursor execute",
            extra={"query": normalized[:100]}
        )

        self._results = []
        self._rowcount = 0

        if normalized == "SELECT 1":
            self._results = [(1,)]
        elif "CLOTHING_ITEMS" in normalized:
            self._handle_clothing(normalized, params)
        elif "USER_PROFILES" in normalized:
            self._handle_profiles(normalized, params)
        elif "USAGE_LIMITS" in normalized:
            self._handle_usage(normalized, params)
        else:
            raise ValueError(f"Mock cursor can't handle query: {normalized[:80]}")

        return self

    # -----------------------------------------------------------------------
    # clothing_items
    # -----------------------------------------------------------------------

    def _handle_clothing(self, query: str, params: tuple) -> None:
        table = self._storage["clothing_items"]

        if query.startswith("INSERT INTO"):
            row = dict(zip(CLOTHING_COLUMNS, params))
            if row["item_id"] in table:
                raise ValueError(f"Duplicate item_id: {row['item_id']}")
            table[row["item_id"]] = row
            self._rowcount = 1

        elif query.startswith("SELECT") and "WHERE ITEM_ID" in query:
            item_id, user_id = params
            row = table.get(item_id)
            if row and row["user_id"] == user_id:
                self._results = [self._as_tuple(row, CLOTHING_COLUMNS)]

        elif query.startswith("SELECT"):
            (user_id,) = params
            rows = [row for row in table.values() if row["user_id"] == user_id]
            rows.sort(key=lambda row: row["created_at"], reverse=True)
            self._results = [self._as_tuple(row, CLOTHING_COLUMNS) for row in rows]

        elif query.startswith("DELETE"):
            item_id, user_id = params
            row = table.get(item_id)
            if row and row["user_id"] == user_id:
                del table[item_id]
                self._rowcount = 1

    # -----------------------------------------------------------------------
    # user_profiles
    # -----------------------------------------------------------------------

    def _handle_profiles(self, query: str, params: tuple) -> None:
        table = self._storage["user_profiles"]

        if query.startswith("MERGE INTO"):
            user_id = params[0]
            values = params[1:len(PROFILE_COLUMNS)]
            table[user_id] = dict(zip(PROFILE_COLUMNS, (user_id, *values)))
            self._rowcount = 1

        elif query.startswith("SELECT"):
            (user_id,) = params
            row = table.get(user_id)
            if row:
                self._results = [self._as_tuple(row, PROFILE_COLUMNS)]

    # -----------------------------------------------------------------------
    # usage_limits
    # -----------------------------------------------------------------------

    def _handle_usage(self, query: str, params: tuple) -> None:
        table = self._storage["usage_limits"]

        if query.startswith("SELECT LIMIT_ID"):
            identifier, resource_type, period_start, period_end = params
            for row in table.values():
                if (
                    row["identifier"] == identifier
                    and row["resource_type"] == resource_type
                    and row["period_start"] == period_start
                    and row["period_end"] == period_end
                ):
                    self._results = [(row["limit_id"], row["usage_count"], row["limit_max"])]
                    break

        elif query.startswith("SELECT USAGE_COUNT"):
            identifier, resource_type, now = params
            rows = [
                row for row in table.values()
                if row["identifier"] == identifier
                and row["resource_type"] == resource_type
                and row["period_end"] > now
            ]
            rows.sort(key=lambda row: row["period_start"], reverse=True)
            self._results = [
                (row["usage_count"], row["limit_max"], row["period_end"])
                for row in rows[:1]
            ]

        elif query.startswith("UPDATE"):
            usage_count, limit_max, limit_id = params
            row = table.get(limit_id)
            if row:
                row["usage_count"] = usage_count
                row["limit_max"] = limit_max
                self._rowcount = 1

        elif query.startswith("INSERT INTO"):
            row = dict(zip(USAGE_COLUMNS, params))
            table[row["limit_id"]] = row
            self._rowcount = 1

    # -----------------------------------------------------------------------
    # DB-API surface
    # -----------------------------------------------------------------------

    def _as_tuple(self, row: dict[str, Any], columns: tuple[str, ...]) -> tuple:
        return tuple(row.get(column) for column in columns)

    def fetchone(self):
        if not self._results:
            return None
        return self._results[0]

    def fetchall(self) -> list:
        return list(self._results)

    def close(self) -> None:
        pass

    @property
    def rowcount(self) -> int:
        return self._rowcount


class MockSnowflakeConnection:
    """
    Mock Snowflake connection for local development.

    Stores data in memory: {table_name: {primary_key: row_dict}}.
    Writes are visible immediately; commit and rollback are no-ops.
    """

    def __init__(self) -> None:
        self._storage: dict[str, dict[str, dict[str, Any]]] = {
            "clothing_items": {},
            "user_profiles": {},
            "usage_limits": {},
        }

        logger.info("Initialized mock Snowflake connection (in-memory)")

    def cursor(self) -> MockSnowflakeCursor:
        return MockSnowflakeCursor(self._storage)

    def commit(self) -> None:
        logger.debug("Mock connection commit")

    def rollback(self) -> None:
        logger.debug("Mock connection rollback")

    def close(self) -> None:
        logger.debug("Mock connection close")
