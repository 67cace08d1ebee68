"""
Snowflake repository for clothing items.

The repository:
1. Translates between ClothingItem and clothing_items rows
2. Encapsulates all SQL for the table
3. Scopes every query to the owning user

The application code never writes SQL directly. Ownership is enforced
here because Snowflake has no per-request row-level security for our
service account.
"""

import json
import logging
from typing import Any, Optional

from styleai.core.wardrobe.models import ClothingItem

from ..client import SnowflakeConnection


logger = logging.getLogger(__name__)


# Column order shared by every SELECT in this module (and the mock cursor)
CLOTHING_COLUMNS = (
    "item_id",
    "user_id",
    "photo_url",
    "item_type",
    "color",
    "style_tags",
    "season",
    "created_at",
)

_SELECT_COLUMNS = ", ".join(CLOTHING_COLUMNS)


class ClothingItemNotFoundError(Exception):
    """Raised when an item doesn't exist or belongs to another user."""
    pass


class ClothingItemRepository:
    """
    Repository for wardrobe persistence.

    Each method corresponds to a use case the application needs:
    - add_item: Persist a newly uploaded item
    - list_for_user: The user's wardrobe, newest first
    - get_item: One item, if the user owns it
    - delete_item: Remove an item the user owns
    """

    def __init__(self, connection: SnowflakeConnection) -> None:
        self._conn = connection

    def add_item(self, item: ClothingItem) -> ClothingItem:
        """Insert a new clothing item and return it as stored."""
        cursor = self._conn.cursor()

        try:
            # PARSE_JSON isn't allowed in a VALUES clause, hence INSERT ... SELECT
            cursor.execute(f"""
                INSERT INTO clothing_items ({_SELECT_COLUMNS})
                SELECT %s, %s, %s, %s, %s, PARSE_JSON(%s), %s, %s
            """, (
                item.id,
                item.user_id,
                item.photo_url,
                item.item_type,
                item.color,
                json.dumps(item.style_tags),
                item.season,
                item.created_at,
            ))

            self._conn.commit()

            logger.debug(
                "Inserted clothing item",
                extra={"item_id": item.id, "user_id": item.user_id}
            )

            return item

        except Exception as e:
            logger.error(
                "Failed to insert clothing item",
                extra={"item_id": item.id, "user_id": item.user_id, "error": str(e)}
            )
            raise
        finally:
            cursor.close()

    def list_for_user(self, user_id: str) -> list[ClothingItem]:
        """Return the user's items, newest first."""
        cursor = self._conn.cursor()

        try:
            cursor.execute(f"""
                SELECT {_SELECT_COLUMNS}
                FROM clothing_items
                WHERE user_id = %s
                ORDER BY created_at DESC
            """, (user_id,))

            return [self._build_item(row) for row in cursor.fetchall()]

        finally:
            cursor.close()

    def get_item(self, item_id: str, user_id: str) -> ClothingItem:
        """
        Load one item owned by user_id.

        Raises ClothingItemNotFoundError for missing items and for items
        owned by someone else; callers can't tell the two apart.
        """
        cursor = self._conn.cursor()

        try:
            cursor.execute(f"""
                SELECT {_SELECT_COLUMNS}
                FROM clothing_items
                WHERE item_id = %s AND user_id = %s
            """, (item_id, user_id))

            row = cursor.fetchone()
            if not row:
                raise ClothingItemNotFoundError(f"Clothing item {item_id} not found")

            return self._build_item(row)

        finally:
            cursor.close()

    def delete_item(self, item_id: str, user_id: str) -> int:
        """Delete an item owned by user_id. Returns rows deleted."""
        cursor = self._conn.cursor()

        try:
            cursor.execute("""
                DELETE FROM clothing_items
                WHERE item_id = %s AND user_id = %s
            """, (item_id, user_id))

            self._conn.commit()

            return cursor.rowcount or 0

        except Exception as e:
            logger.error(
                "Failed to delete clothing item",
                extra={"item_id": item_id, "user_id": user_id, "error": str(e)}
            )
            raise
        finally:
            cursor.close()

    # -----------------------------------------------------------------------
    # Private Methods
    # -----------------------------------------------------------------------

    def _build_item(self, row) -> ClothingItem:
        """Construct a ClothingItem from a row in CLOTHING_COLUMNS order."""
        return ClothingItem(
            id=str(row[0]),
            user_id=str(row[1]),
            photo_url=row[2] or "",
            item_type=row[3],
            color=row[4],
            style_tags=self._parse_tags(row[5]),
            season=row[6],
            created_at=row[7],
        )

    def _parse_tags(self, variant_data: Any) -> list[str]:
        """
        Parse an ARRAY column.

        snowflake-connector-python returns ARRAY/VARIANT values as JSON
        text; other drivers may hand back a list already.
        """
        if not variant_data:
            return []

        parsed: Optional[Any] = variant_data
        if isinstance(variant_data, str):
            try:
                parsed = json.loads(variant_data)
            except json.JSONDecodeError as e:
                logger.error(
                    "Failed to parse style_tags JSON",
                    extra={"variant_data": variant_data[:100], "error": str(e)}
                )
                return []

        if not isinstance(parsed, list):
            return []

        return [str(tag) for tag in parsed]
