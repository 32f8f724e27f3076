"""
Application Service - job applications and their status workflow.

Status moves forward only:

    applied -> in_review -> interview -> offer

`rejected` and `withdrawn` can be reached from any non-terminal status
and are terminal themselves. Asking for the status an application
already has is a no-op. Everything else is InvalidStatusTransition.
"""

from typing import Any, Dict, List, Optional

import structlog
from sqlalchemy import text
from sqlalchemy.orm import Session

from app.core.errors import Conflict, Forbidden, InvalidStatusTransition, NotFound, ValidationError
from app.db.postgres import fetch_all, fetch_one, get_db_session, new_id, utcnow

logger = structlog.get_logger(__name__)


# ============================================================
# STATUS WORKFLOW
# ============================================================

FORWARD_ORDER = ["applied", "in_review", "interview", "offer"]
TERMINAL = {"rejected", "withdrawn"}
ALL_STATUSES = set(FORWARD_ORDER) | TERMINAL


def can_transition(current: str, new: str) -> bool:
    if new not in ALL_STATUSES:
        return False
    if current == new:
        return True
    if current in TERMINAL:
        return False
    if new in TERMINAL:
        return True
    return FORWARD_ORDER.index(new) > FORWARD_ORDER.index(current)


def next_status(current: str, new: str) -> str:
    """Validate a status change and return the resulting status."""
    if not can_transition(current, new):
        raise InvalidStatusTransition(f"Cannot move application from '{current}' to '{new}'")
    return new


# ============================================================
# DATA ACCESS
# ============================================================

APPLICATION_WITH_JOB = """
    SELECT a.*, j.title AS job_title, j.company AS job_company, j.location AS job_location,
           j.job_type AS job_job_type, j.status AS job_status
    FROM job_applications a
    JOIN jobs j ON a.job_id = j.id
"""


def _with_job(row: dict) -> dict:
    row["job"] = {
        "id": row["job_id"],
        "title": row.pop("job_title"),
        "company": row.pop("job_company"),
        "location": row.pop("job_location"),
        "job_type": row.pop("job_job_type"),
        "status": row.pop("job_status"),
    }
    return row


class ApplicationService:

    def _select(self, db: Session, application_id: str) -> Optional[dict]:
        row = fetch_one(db, APPLICATION_WITH_JOB + " WHERE a.id = :id", {"id": application_id})
        return _with_job(row) if row else None

    def _primary_resume_id(self, db: Session, student_id: str) -> Optional[str]:
        row = fetch_one(
            db,
            "SELECT id FROM resumes WHERE user_id = :user_id AND is_primary = :flag",
            {"user_id": student_id, "flag": True}
        )
        return row["id"] if row else None

    def _check_resume(self, db: Session, student_id: str, resume_id: str) -> None:
        owned = fetch_one(
            db,
            "SELECT id FROM resumes WHERE id = :id AND user_id = :user_id",
            {"id": resume_id, "user_id": student_id}
        )
        if not owned:
            raise NotFound("Resume not found")

    def apply(
        self,
        student_id: str,
        job_id: str,
        resume_id: Optional[str] = None,
        cover_letter: Optional[str] = None
    ) -> dict:
        """
        Apply to an active job.

        Uses the student's primary resume when no resume_id is given.

        Raises:
            NotFound: job or resume missing
            ValidationError: job is not accepting applications
            Conflict: already applied
        """
        with get_db_session() as db:
            job = fetch_one(db, "SELECT id, status FROM jobs WHERE id = :id", {"id": job_id})
            if not job:
                raise NotFound("Job not found")
            if job["status"] != "active":
                raise ValidationError("Job is not accepting applications")

            existing = fetch_one(
                db,
                "SELECT id FROM job_applications WHERE job_id = :job_id AND student_id = :student_id",
                {"job_id": job_id, "student_id": student_id}
            )
            if existing:
                raise Conflict("Already applied to this job")

            if resume_id:
                self._check_resume(db, student_id, resume_id)
            else:
                resume_id = self._primary_resume_id(db, student_id)

            application_id = new_id()
            now = utcnow()
            db.execute(
                text("""
                    INSERT INTO job_applications
                        (id, job_id, student_id, resume_id, cover_letter, status, applied_at, updated_at)
                    VALUES
                        (:id, :job_id, :student_id, :resume_id, :cover_letter, 'applied', :now, :now)
                """),
                {
                    "id": application_id, "job_id": job_id, "student_id": student_id,
                    "resume_id": resume_id, "cover_letter": cover_letter, "now": now,
                }
            )
            row = self._select(db, application_id)
        logger.info("application_submitted", application_id=application_id, job_id=job_id)
        return row

    def status_for_job(self, student_id: str, job_id: str) -> Optional[str]:
        with get_db_session() as db:
            row = fetch_one(
                db,
                "SELECT status FROM job_applications WHERE job_id = :job_id AND student_id = :student_id",
                {"job_id": job_id, "student_id": student_id}
            )
        return row["status"] if row else None

    def list_for_student(self, student_id: str, status: Optional[str] = None) -> List[dict]:
        """The student's applications, newest first, with a job summary."""
        sql = APPLICATION_WITH_JOB + " WHERE a.student_id = :student_id"
        params = {"student_id": student_id}
        if status:
            sql += " AND a.status = :status"
            params["status"] = status
        sql += " ORDER BY a.applied_at DESC"
        with get_db_session() as db:
            rows = fetch_all(db, sql, params)
        return [_with_job(r) for r in rows]

    def list_for_employer(self, employer_id: str, job_id: Optional[str] = None) -> List[dict]:
        """Applications to the employer's own jobs, newest first."""
        sql = APPLICATION_WITH_JOB + " WHERE j.employer_id = :employer_id"
        params = {"employer_id": employer_id}
        if job_id:
            sql += " AND a.job_id = :job_id"
            params["job_id"] = job_id
        sql += " ORDER BY a.applied_at DESC"
        with get_db_session() as db:
            rows = fetch_all(db, sql, params)
        return [_with_job(r) for r in rows]

    def update(self, student_id: str, application_id: str, fields: Dict[str, Any]) -> dict:
        """Change cover letter / resume of an open application."""
        with get_db_session() as db:
            row = fetch_one(
                db,
                "SELECT status FROM job_applications WHERE id = :id AND student_id = :student_id",
                {"id": application_id, "student_id": student_id}
            )
            if not row:
                raise NotFound("Application not found")
            if row["status"] in TERMINAL:
                raise Conflict(f"Application is {row['status']} and can no longer be edited")

            updates = []
            params = {"id": application_id, "now": utcnow()}
            if fields.get("resume_id"):
                self._check_resume(db, student_id, fields["resume_id"])
                updates.append("resume_id = :resume_id")
                params["resume_id"] = fields["resume_id"]
            if "cover_letter" in fields:
                updates.append("cover_letter = :cover_letter")
                params["cover_letter"] = fields["cover_letter"]
            if not updates:
                raise ValidationError("No fields to update")

            db.execute(
                text(f"UPDATE job_applications SET {', '.join(updates)}, updated_at = :now WHERE id = :id"),
                params
            )
            return self._select(db, application_id)

    def _set_status(self, db: Session, row: dict, new: str) -> dict:
        status = next_status(row["status"], new)
        if status != row["status"]:
            db.execute(
                text("UPDATE job_applications SET status = :status, updated_at = :now WHERE id = :id"),
                {"status": status, "now": utcnow(), "id": row["id"]}
            )
            logger.info("application_status_changed", application_id=row["id"],
                        old=row["status"], new=status)
        return self._select(db, row["id"])

    def withdraw(self, student_id: str, application_id: str) -> dict:
        with get_db_session() as db:
            row = fetch_one(
                db,
                "SELECT id, status FROM job_applications WHERE id = :id AND student_id = :student_id",
                {"id": application_id, "student_id": student_id}
            )
            if not row:
                raise NotFound("Application not found")
            return self._set_status(db, row, "withdrawn")

    def set_status_as_employer(self, employer_id: str, application_id: str, new: str) -> dict:
        if new == "withdrawn":
            raise Forbidden("Only the applicant can withdraw an application")
        with get_db_session() as db:
            row = fetch_one(
                db,
                """
                SELECT a.id, a.status FROM job_applications a
                JOIN jobs j ON a.job_id = j.id
                WHERE a.id = :id AND j.employer_id = :employer_id
                """,
                {"id": application_id, "employer_id": employer_id}
            )
            if not row:
                raise NotFound("Application not found")
            return self._set_status(db, row, new)


_application_service = None


def get_application_service() -> ApplicationService:
    global _application_service
    if _application_service is None:
        _application_service = ApplicationService()
    return _application_service
