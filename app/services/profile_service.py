"""
Profile Service - accounts, student profiles and employer profiles.

Student and employer rows are created lazily: the first read of a
missing row inserts an empty one (first-time setup, not an error).

Student profile writes are guarded by a `version` counter. A caller that
passes the version it read gets VersionConflict if someone else wrote in
between; every write bumps the counter.
"""

from typing import Any, Dict, List, Optional

import structlog
from sqlalchemy import text
from sqlalchemy.orm import Session

from app.core.errors import DuplicateEntry, NotFound, ValidationError, VersionConflict
from app.db.postgres import fetch_one, from_json, get_db_session, to_json, utcnow

logger = structlog.get_logger(__name__)


# ============================================================
# SKILL LISTS
# ============================================================

def ensure_unique(values: List[str], label: str = "skills") -> List[str]:
    """Strip entries, drop blanks, reject exact duplicates."""
    cleaned = [v.strip() for v in values if v and v.strip()]
    seen = set()
    for value in cleaned:
        if value in seen:
            raise DuplicateEntry(f"Duplicate entry in {label}: {value}")
        seen.add(value)
    return cleaned


def add_skill(skills: List[str], skill: str) -> List[str]:
    """
    Return a new list with `skill` appended.

    The comparison is exact and case-sensitive ("Python" and "python" are
    different skills). The input list is never modified.
    """
    value = (skill or "").strip()
    if not value:
        raise ValidationError("Skill cannot be empty")
    if value in skills:
        raise DuplicateEntry(f"Skill already added: {value}")
    return list(skills) + [value]


def remove_skill(skills: List[str], skill: str) -> List[str]:
    if skill not in skills:
        raise NotFound(f"Skill not found: {skill}")
    return [s for s in skills if s != skill]


# ============================================================
# ACCOUNT PROFILES
# ============================================================

def get_profile(user_id: str) -> dict:
    with get_db_session() as db:
        row = fetch_one(
            db,
            """
            SELECT id, email, role, account_type, onboarding_completed, created_at, updated_at
            FROM profiles WHERE id = :id
            """,
            {"id": user_id}
        )
    if not row:
        raise NotFound("Profile not found")
    row["onboarding_completed"] = bool(row["onboarding_completed"])
    return row


def mark_onboarding_completed(db: Session, user_id: str) -> None:
    db.execute(
        text("UPDATE profiles SET onboarding_completed = :done, updated_at = :now WHERE id = :id"),
        {"done": True, "now": utcnow(), "id": user_id}
    )


# ============================================================
# STUDENT PROFILES
# ============================================================

STUDENT_FIELDS = [
    "first_name", "last_name", "bio", "education", "skills", "career_goals",
    "github_username", "github_projects", "linkedin_url", "profile_image_url", "resume_url",
]
STUDENT_JSON_FIELDS = {"skills", "career_goals", "github_projects"}


def _decode_student(row: dict) -> dict:
    row["skills"] = from_json(row["skills"], [])
    row["career_goals"] = from_json(row["career_goals"], [])
    row["github_projects"] = from_json(row["github_projects"], [])
    return row


class StudentProfileService:

    def _select(self, db: Session, user_id: str) -> Optional[dict]:
        return fetch_one(db, "SELECT * FROM student_profiles WHERE id = :id", {"id": user_id})

    def get_or_create(self, user_id: str) -> dict:
        with get_db_session() as db:
            row = self._select(db, user_id)
            if not row:
                db.execute(
                    text("INSERT INTO student_profiles (id, updated_at) VALUES (:id, :now)"),
                    {"id": user_id, "now": utcnow()}
                )
                logger.info("student_profile_created", user_id=user_id)
                row = self._select(db, user_id)
        return _decode_student(row)

    def update(self, user_id: str, fields: Dict[str, Any], version: Optional[int] = None) -> dict:
        """
        Update the given columns. Unknown keys are ignored.

        Raises:
            ValidationError: nothing to update
            DuplicateEntry: repeated skill / career goal
            VersionConflict: `version` given and stale
        """
        self.get_or_create(user_id)

        updates = []
        params = {"id": user_id, "now": utcnow()}
        for field in STUDENT_FIELDS:
            if field not in fields:
                continue
            value = fields[field]
            if field in ("skills", "career_goals"):
                value = ensure_unique(value or [], field)
            if field in STUDENT_JSON_FIELDS:
                value = to_json(value or [])
            updates.append(f"{field} = :{field}")
            params[field] = value

        if not updates:
            raise ValidationError("No fields to update")

        sql = f"UPDATE student_profiles SET {', '.join(updates)}, version = version + 1, updated_at = :now WHERE id = :id"
        if version is not None:
            sql += " AND version = :version"
            params["version"] = version

        with get_db_session() as db:
            result = db.execute(text(sql), params)
            if result.rowcount == 0:
                raise VersionConflict("Profile was modified by another request. Reload and try again.")
            row = self._select(db, user_id)
        return _decode_student(row)

    def add_skill(self, user_id: str, skill: str) -> List[str]:
        profile = self.get_or_create(user_id)
        skills = add_skill(profile["skills"], skill)
        self.update(user_id, {"skills": skills}, version=profile["version"])
        return skills

    def remove_skill(self, user_id: str, skill: str) -> List[str]:
        profile = self.get_or_create(user_id)
        skills = remove_skill(profile["skills"], skill)
        self.update(user_id, {"skills": skills}, version=profile["version"])
        return skills


# ============================================================
# EMPLOYER PROFILES
# ============================================================

EMPLOYER_FIELDS = [
    "company_name", "company_description", "industry", "company_size", "logo_url",
    "website_url", "company_location", "company_culture", "company_benefits",
    "company_values", "contact_email", "contact_phone", "social_links",
]


def _decode_employer(row: dict) -> dict:
    row["company_benefits"] = from_json(row["company_benefits"], [])
    row["company_values"] = from_json(row["company_values"], [])
    row["social_links"] = from_json(row["social_links"], {})
    row["verified"] = bool(row["verified"])
    return row


class EmployerProfileService:

    def _select(self, db: Session, user_id: str) -> Optional[dict]:
        return fetch_one(db, "SELECT * FROM employer_profiles WHERE id = :id", {"id": user_id})

    def get_or_create(self, user_id: str) -> dict:
        with get_db_session() as db:
            row = self._select(db, user_id)
            if not row:
                db.execute(
                    text("INSERT INTO employer_profiles (id, updated_at) VALUES (:id, :now)"),
                    {"id": user_id, "now": utcnow()}
                )
                logger.info("employer_profile_created", user_id=user_id)
                row = self._select(db, user_id)
        return _decode_employer(row)

    def update(self, user_id: str, fields: Dict[str, Any]) -> dict:
        self.get_or_create(user_id)

        updates = []
        params = {"id": user_id, "now": utcnow()}
        for field in EMPLOYER_FIELDS:
            if field not in fields:
                continue
            value = fields[field]
            if field in ("company_benefits", "company_values"):
                value = to_json(ensure_unique(value or [], field.replace("company_", "")))
            elif field == "social_links":
                value = to_json({k: v for k, v in (value or {}).items() if v})
            updates.append(f"{field} = :{field}")
            params[field] = value

        if not updates:
            raise ValidationError("No fields to update")

        with get_db_session() as db:
            db.execute(
                text(f"UPDATE employer_profiles SET {', '.join(updates)}, updated_at = :now WHERE id = :id"),
                params
            )
            row = self._select(db, user_id)
        return _decode_employer(row)


# Singletons
_student_service = None
_employer_service = None


def get_student_profile_service() -> StudentProfileService:
    global _student_service
    if _student_service is None:
        _student_service = StudentProfileService()
    return _student_service


def get_employer_profile_service() -> EmployerProfileService:
    global _employer_service
    if _employer_service is None:
        _employer_service = EmployerProfileService()
    return _employer_service
