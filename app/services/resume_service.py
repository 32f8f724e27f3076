"""
Resume Service - structured resume documents.

A resume row keeps its sections (basic info, education, experience,
skills, projects) as one JSON document in `resumes.data`. The API calls
the row's `name` column "title".

Primary resume: at most one per user. Setting one clears the others in
the same transaction, and a partial unique index backs it up.

Writes bump `version`; an update that passes a stale version is
rejected with VersionConflict.
"""

from typing import Any, Dict, List, Optional

import structlog
from sqlalchemy import text
from sqlalchemy.orm import Session

from app.core.errors import NotFound, ValidationError, VersionConflict
from app.db.postgres import fetch_all, fetch_one, from_json, get_db_session, new_id, to_json, utcnow

logger = structlog.get_logger(__name__)

SECTIONS = ["basic_info", "education", "experience", "skills", "projects"]
EMPTY_SECTIONS = {
    "basic_info": {"name": "", "email": "", "phone": "", "location": ""},
    "education": [],
    "experience": [],
    "skills": {"technical": [], "soft": [], "languages": [], "certifications": []},
    "projects": [],
}


def decode_resume(row: dict) -> dict:
    data = from_json(row.pop("data"), {})
    resume = {
        "id": row["id"],
        "user_id": row["user_id"],
        "title": row["name"],
        "is_primary": bool(row["is_primary"]),
        "version": row["version"],
        "created_at": row["created_at"],
        "updated_at": row["updated_at"],
    }
    for section in SECTIONS:
        resume[section] = data.get(section, EMPTY_SECTIONS[section])
    return resume


# ============================================================
# AI FORMATTING
# ============================================================

def format_resume_for_ai(resume: Dict[str, Any]) -> str:
    """Render resume sections as readable text for a language model."""
    lines: List[str] = []
    missing = "Not provided"

    basic = resume.get("basic_info")
    if basic:
        lines.append("# BASIC INFORMATION")
        lines.append(f"Name: {basic.get('name') or missing}")
        lines.append(f"Email: {basic.get('email') or missing}")
        lines.append(f"Phone: {basic.get('phone') or missing}")
        lines.append(f"Location: {basic.get('location') or missing}")
        lines.append("")

    if resume.get("education"):
        lines.append("# EDUCATION")
        for i, edu in enumerate(resume["education"], 1):
            lines.append(f"{i}. {edu.get('institution')} - {edu.get('degree')} in {edu.get('field') or 'Not specified'}")
            lines.append(f"   {edu.get('start_date') or 'Start date not provided'} to "
                         f"{edu.get('end_date') or 'End date not provided'}")
            lines.append(f"   Location: {edu.get('location') or missing}")
            lines.append("")

    if resume.get("experience"):
        lines.append("# EXPERIENCE")
        for i, exp in enumerate(resume["experience"], 1):
            lines.append(f"{i}. {exp.get('position')} at {exp.get('company')}")
            lines.append(f"   {exp.get('start_date') or 'Start date not provided'} to "
                         f"{exp.get('end_date') or 'End date not provided'}")
            lines.append(f"   Location: {exp.get('location') or missing}")
            lines.append(f"   Description: {exp.get('description') or missing}")
            lines.append("")

    skills = resume.get("skills")
    if skills:
        lines.append("# SKILLS")
        for key, label in (("technical", "Technical Skills"), ("soft", "Soft Skills"),
                           ("languages", "Languages"), ("certifications", "Certifications")):
            if skills.get(key):
                lines.append(f"{label}: {', '.join(skills[key])}")
        lines.append("")

    if resume.get("projects"):
        lines.append("# PROJECTS")
        for i, project in enumerate(resume["projects"], 1):
            lines.append(f"{i}. {project.get('title')}")
            lines.append(f"   Description: {project.get('description') or missing}")
            if project.get("technologies"):
                lines.append(f"   Technologies: {', '.join(project['technologies'])}")
            lines.append("")

    return "\n".join(lines) + "\n" if lines else ""


def build_resume_prompt(resume: Dict[str, Any], prompt: str) -> str:
    return f"Based on the following resume data:\n\n{format_resume_for_ai(resume)}\n\n{prompt}"


# ============================================================
# DATA ACCESS
# ============================================================

class ResumeService:

    def _select(self, db: Session, user_id: str, resume_id: str) -> Optional[dict]:
        return fetch_one(
            db,
            "SELECT * FROM resumes WHERE id = :id AND user_id = :user_id",
            {"id": resume_id, "user_id": user_id}
        )

    def _clear_primary(self, db: Session, user_id: str, keep_id: str) -> None:
        db.execute(
            text("""
                UPDATE resumes SET is_primary = :off
                WHERE user_id = :user_id AND id <> :keep_id AND is_primary = :on
            """),
            {"off": False, "on": True, "user_id": user_id, "keep_id": keep_id}
        )

    def list_for_user(self, user_id: str) -> List[dict]:
        """All resumes of a user, newest first."""
        with get_db_session() as db:
            rows = fetch_all(
                db,
                "SELECT * FROM resumes WHERE user_id = :user_id ORDER BY created_at DESC",
                {"user_id": user_id}
            )
        return [decode_resume(r) for r in rows]

    def get(self, user_id: str, resume_id: str) -> dict:
        with get_db_session() as db:
            row = self._select(db, user_id, resume_id)
        if not row:
            raise NotFound("Resume not found")
        return decode_resume(row)

    def get_primary(self, user_id: str) -> Optional[dict]:
        with get_db_session() as db:
            row = fetch_one(
                db,
                "SELECT * FROM resumes WHERE user_id = :user_id AND is_primary = :on",
                {"user_id": user_id, "on": True}
            )
        return decode_resume(row) if row else None

    def create(self, user_id: str, title: str, sections: Dict[str, Any], is_primary: bool = False) -> dict:
        if not (title or "").strip():
            raise ValidationError("Resume title is required")

        resume_id = new_id()
        now = utcnow()
        data = {s: sections.get(s, EMPTY_SECTIONS[s]) for s in SECTIONS}
        with get_db_session() as db:
            if is_primary:
                self._clear_primary(db, user_id, resume_id)
            db.execute(
                text("""
                    INSERT INTO resumes (id, user_id, name, data, is_primary, version, created_at, updated_at)
                    VALUES (:id, :user_id, :name, :data, :is_primary, 1, :now, :now)
                """),
                {
                    "id": resume_id, "user_id": user_id, "name": title.strip(),
                    "data": to_json(data), "is_primary": bool(is_primary), "now": now,
                }
            )
            row = self._select(db, user_id, resume_id)
        logger.info("resume_created", resume_id=resume_id, is_primary=bool(is_primary))
        return decode_resume(row)

    def update(self, user_id: str, resume_id: str, fields: Dict[str, Any], version: Optional[int] = None) -> dict:
        """
        Replace the given sections / title / primary flag.

        Raises:
            NotFound: resume missing or owned by someone else
            VersionConflict: `version` given and stale
        """
        with get_db_session() as db:
            row = self._select(db, user_id, resume_id)
            if not row:
                raise NotFound("Resume not found")
            if version is not None and version != row["version"]:
                raise VersionConflict("Resume was modified by another request. Reload and try again.")

            data = from_json(row["data"], {})
            for section in SECTIONS:
                if fields.get(section) is not None:
                    data[section] = fields[section]

            updates = ["data = :data"]
            params = {
                "id": resume_id, "user_id": user_id, "data": to_json(data),
                "now": utcnow(), "version": row["version"],
            }
            if fields.get("title") is not None:
                if not fields["title"].strip():
                    raise ValidationError("Resume title is required")
                updates.append("name = :name")
                params["name"] = fields["title"].strip()
            if fields.get("is_primary") is not None:
                if fields["is_primary"]:
                    self._clear_primary(db, user_id, resume_id)
                updates.append("is_primary = :is_primary")
                params["is_primary"] = bool(fields["is_primary"])

            # compare-and-swap on the version read above
            result = db.execute(
                text(f"""
                    UPDATE resumes SET {', '.join(updates)}, version = version + 1, updated_at = :now
                    WHERE id = :id AND user_id = :user_id AND version = :version
                """),
                params
            )
            if result.rowcount == 0:
                raise VersionConflict("Resume was modified by another request. Reload and try again.")
            row = self._select(db, user_id, resume_id)
        return decode_resume(row)

    def delete(self, user_id: str, resume_id: str) -> None:
        with get_db_session() as db:
            db.execute(
                text("UPDATE job_applications SET resume_id = NULL WHERE resume_id = :id AND student_id = :user_id"),
                {"id": resume_id, "user_id": user_id}
            )
            result = db.execute(
                text("DELETE FROM resumes WHERE id = :id AND user_id = :user_id"),
                {"id": resume_id, "user_id": user_id}
            )
            if result.rowcount == 0:
                raise NotFound("Resume not found")

    def set_primary(self, user_id: str, resume_id: str) -> dict:
        """Make one resume the primary. Others are cleared in the same transaction."""
        with get_db_session() as db:
            if not self._select(db, user_id, resume_id):
                raise NotFound("Resume not found")
            self._clear_primary(db, user_id, resume_id)
            db.execute(
                text("""
                    UPDATE resumes SET is_primary = :on, version = version + 1, updated_at = :now
                    WHERE id = :id AND user_id = :user_id
                """),
                {"on": True, "now": utcnow(), "id": resume_id, "user_id": user_id}
            )
            row = self._select(db, user_id, resume_id)
        logger.info("primary_resume_set", user_id=user_id, resume_id=resume_id)
        return decode_resume(row)


_resume_service = None


def get_resume_service() -> ResumeService:
    global _resume_service
    if _resume_service is None:
        _resume_service = ResumeService()
    return _resume_service
