"""
Achievement Service - append-only milestone records.

An achievement is written once and never edited. Awarding one also adds
its XP to the student's profile in the same transaction.
"""

from typing import List, Optional

import structlog
from sqlalchemy import text
from sqlalchemy.orm import Session

from app.core.errors import NotFound
from app.db.postgres import fetch_all, fetch_one, get_db_session, new_id, utcnow

logger = structlog.get_logger(__name__)

ONBOARDING_COMPLETE = {
    "name": "Onboarding Complete",
    "type": "onboarding",
    "description": "Completed your profile setup",
    "xp_awarded": 50,
}


class AchievementService:

    def list_for_user(self, user_id: str) -> List[dict]:
        """All achievements of a user, most recent first."""
        with get_db_session() as db:
            return fetch_all(
                db,
                """
                SELECT * FROM achievements
                WHERE user_id = :user_id
                ORDER BY earned_at DESC
                """,
                {"user_id": user_id}
            )

    def get(self, user_id: str, achievement_id: str) -> dict:
        with get_db_session() as db:
            row = fetch_one(
                db,
                "SELECT * FROM achievements WHERE id = :id AND user_id = :user_id",
                {"id": achievement_id, "user_id": user_id}
            )
        if not row:
            raise NotFound("Achievement not found")
        return row

    def award_once(
        self,
        db: Session,
        user_id: str,
        name: str,
        type: str,
        description: Optional[str] = None,
        xp_awarded: int = 0,
        badge_image_url: Optional[str] = None
    ) -> Optional[dict]:
        """
        Insert an achievement unless the user already has one with the
        same name and type, and credit its XP.

        Runs inside the caller's session. Returns the new row, or None
        when it was already earned.
        """
        existing = fetch_one(
            db,
            "SELECT id FROM achievements WHERE user_id = :user_id AND name = :name AND type = :type",
            {"user_id": user_id, "name": name, "type": type}
        )
        if existing:
            return None

        row = fetch_one(
            db,
            """
            INSERT INTO achievements
                (id, user_id, name, type, description, badge_image_url, xp_awarded, earned_at)
            VALUES
                (:id, :user_id, :name, :type, :description, :badge_image_url, :xp_awarded, :earned_at)
            RETURNING *
            """,
            {
                "id": new_id(),
                "user_id": user_id,
                "name": name,
                "type": type,
                "description": description,
                "badge_image_url": badge_image_url,
                "xp_awarded": xp_awarded,
                "earned_at": utcnow(),
            }
        )
        if xp_awarded:
            db.execute(
                text("""
                    UPDATE student_profiles
                    SET xp_points = xp_points + :xp, updated_at = :now
                    WHERE id = :user_id
                """),
                {"xp": xp_awarded, "now": utcnow(), "user_id": user_id}
            )
        logger.info("achievement_awarded", user_id=user_id, name=name, xp=xp_awarded)
        return row


# Singleton
_achievement_service = None


def get_achievement_service() -> AchievementService:
    global _achievement_service
    if _achievement_service is None:
        _achievement_service = AchievementService()
    return _achievement_service
