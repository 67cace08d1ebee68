"""
Snowflake repository for user profiles.

One row per user, keyed on user_id. Saving is an upsert so the first
PUT from onboarding and later edits from settings go through the same path.
"""

import logging
from typing import Optional

from styleai.core.wardrobe.models import UserProfile

from ..client import SnowflakeConnection


logger = logging.getLogger(__name__)


PROFILE_COLUMNS = (
    "user_id",
    "style_preference",
    "gender",
    "body_type",
    "size_top",
    "size_bottom",
    "size_shoes",
    "budget_range",
    "updated_at",
)


class UserProfileRepository:
    """Repository for styling preferences and sizes."""

    def __init__(self, connection: SnowflakeConnection) -> None:
        self._conn = connection

    def get_profile(self, user_id: str) -> Optional[UserProfile]:
        """Return the user's profile, or None if they haven't saved one."""
        cursor = self._conn.cursor()

        try:
            cursor.execute(f"""
                SELECT {", ".join(PROFILE_COLUMNS)}
                FROM user_profiles
                WHERE user_id = %s
            """, (user_id,))

            row = cursor.fetchone()
            if not row:
                return None

            return UserProfile(
                user_id=str(row[0]),
                style_preference=row[1],
                gender=row[2],
                body_type=row[3],
                size_top=row[4],
                size_bottom=row[5],
                size_shoes=row[6],
                budget_range=row[7],
                updated_at=row[8],
            )

        finally:
            cursor.close()

    def save_profile(self, profile: UserProfile) -> UserProfile:
        """
        Insert or update a profile.

        Idempotent: saving the same profile twice leaves one row.
        """
        cursor = self._conn.cursor()

        values = (
            profile.style_preference,
            profile.gender,
            profile.body_type,
            profile.size_top,
            profile.size_bottom,
            profile.size_shoes,
            profile.budget_range,
            profile.updated_at,
        )

        try:
            cursor.execute("""
                MERGE INTO user_profiles AS target
                USING (SELECT %s AS user_id) AS source
                ON target.user_id = source.user_id
                WHEN MATCHED THEN UPDATE SET
                    style_preference = %s,
                    gender = %s,
                    body_type = %s,
                    size_top = %s,
                    size_bottom = %s,
                    size_shoes = %s,
                    budget_range = %s,
                    updated_at = %s
                WHEN NOT MATCHED THEN INSERT (
                    user_id, style_preference, gender, body_type,
                    size_top, size_bottom, size_shoes, budget_range, updated_at
                ) VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s)
            """, (profile.user_id, *values, profile.user_id, *values))

            self._conn.commit()

            logger.debug("Saved user profile", extra={"user_id": profile.user_id})

            return profile

        except Exception as e:
            logger.error(
                "Failed to save profile",
                extra={"user_id": profile.user_id, "error": str(e)}
            )
            raise
        finally:
            cursor.close()
