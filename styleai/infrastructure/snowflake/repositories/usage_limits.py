"""
Usage limit repository for rate limiting.

Tracks how many times each user has hit a metered resource (today that's
outfit generation, which costs an LLM call) within a daily window.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import uuid4

from ..client import SnowflakeConnection

logger = logging.getLogger(__name__)


def current_period(
    now: Optional[datetime] = None,
    period_hours: int = 24,
) -> tuple[datetime, datetime]:
    """Return (start, end) of the window containing now. Windows start at UTC midnight."""
    now = now or datetime.now(timezone.utc)
    period_start = now.replace(hour=0, minute=0, second=0, microsecond=0)
    return period_start, period_start + timedelta(hours=period_hours)


class UsageLimitRepository:
    """
    Repository for managing usage limits.

    Enforces limits like "20 outfit generations per day per user".
    Uses Snowflake for storage, so counts survive restarts and leave
    an audit trail of usage.
    """

    def __init__(self, connection: SnowflakeConnection) -> None:
        self._conn = connection

    def check_and_increment(
        self,
        user_id: str,
        resource_type: str,
        limit_max: int,
        period_hours: int = 24,
    ) -> tuple[bool, int, int]:
        """
        Check if the user is within limits, and increment usage if so.

        Returns:
            Tuple of (allowed, current_count, limit_max)
            - allowed: True if within limits and incremented
            - current_count: Number of uses in current period
            - limit_max: The maximum allowed
        """
        cursor = self._conn.cursor()

        try:
            period_start, period_end = current_period(period_hours=period_hours)

            cursor.execute("""
                SELECT limit_id, usage_count, limit_max
                FROM usage_limits
                WHERE identifier = %s
                  AND identifier_type = 'user_id'
                  AND resource_type = %s
                  AND period_start = %s
                  AND period_end = %s
            """, (user_id, resource_type, period_start, period_end))

            result = cursor.fetchone()

            if result:
                limit_id, current_count, _ = result

                if current_count >= limit_max:
                    logger.warning(
                        "Rate limit exceeded",
                        extra={
                            "user_id": user_id,
                            "resource_type": resource_type,
                            "current_count": current_count,
                            "limit_max": limit_max
                        }
                    )
                    return False, current_count, limit_max

                new_count = current_count + 1
                cursor.execute("""
                    UPDATE usage_limits
                    SET usage_count = %s,
                        limit_max = %s,
                        updated_at = CURRENT_TIMESTAMP()
                    WHERE limit_id = %s
                """, (new_count, limit_max, limit_id))

                self._conn.commit()

                logger.info(
                    "Usage incremented",
                    extra={
                        "user_id": user_id,
                        "resource_type": resource_type,
                        "count": new_count,
                        "limit": limit_max
                    }
                )

                return True, new_count, limit_max

            cursor.execute("""
                INSERT INTO usage_limits (
                    limit_id,
                    identifier,
                    identifier_type,
                    resource_type,
                    usage_count,
                    limit_max,
                    period_start,
                    period_end
                ) VALUES (%s, %s, 'user_id', %s, %s, %s, %s, %s)
            """, (
                str(uuid4()),
                user_id,
                resource_type,
                1,
                limit_max,
                period_start,
                period_end
            ))

            self._conn.commit()

            logger.info(
                "Usage limit record created",
                extra={
                    "user_id": user_id,
                    "resource_type": resource_type,
                    "limit": limit_max
                }
            )

            return True, 1, limit_max

        except Exception as e:
            logger.error(
                "Failed to check/increment usage limit",
                extra={"user_id": user_id, "error": str(e)}
            )
            # Fail open: an outage in limit tracking shouldn't block outfits
            return True, 0, limit_max

        finally:
            cursor.close()

    def get_current_usage(
        self,
        user_id: str,
        resource_type: str,
    ) -> Optional[tuple[int, int, datetime]]:
        """
        Get current usage without incrementing.

        Returns:
            Tuple of (current_count, limit_max, period_end) or None if no usage
        """
        cursor = self._conn.cursor()

        try:
            now = datetime.now(timezone.utc)

            cursor.execute("""
                SELECT usage_count, limit_max, period_end
                FROM usage_limits
                WHERE identifier = %s
                  AND identifier_type = 'user_id'
                  AND resource_type = %s
                  AND period_end > %s
                ORDER BY period_start DESC
                LIMIT 1
            """, (user_id, resource_type, now))

            result = cursor.fetchone()

            if result:
                return result[0], result[1], result[2]

            return None

        finally:
            cursor.close()
