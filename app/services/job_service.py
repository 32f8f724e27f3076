"""
Job Service - read/write access to job postings.

Listing and reading are open to every signed-in user; writes are scoped
to the owning employer in the SQL itself, so another employer's job
looks exactly like a missing one (NotFound).
"""

import json
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import text
from sqlalchemy.orm import Session

from app.core.errors import NotFound, ValidationError
from app.db.postgres import fetch_all, fetch_one, from_json, get_db_session, new_id, to_json, utcnow

JOB_FIELDS = [
    "title", "company", "location", "description", "requirements", "responsibilities",
    "skills_required", "salary_range", "job_type", "experience_level", "education_level",
    "status", "expires_at",
]
JOB_JSON_FIELDS = {"requirements", "responsibilities", "skills_required"}


def decode_job(row: dict) -> dict:
    for field in JOB_JSON_FIELDS:
        row[field] = from_json(row[field], [])
    return row


def _encode(field: str, value: Any) -> Any:
    if field in JOB_JSON_FIELDS:
        return to_json(value or [])
    if hasattr(value, "value"):  # enums
        return value.value
    return value


class JobService:

    def _select(self, db: Session, job_id: str) -> Optional[dict]:
        return fetch_one(db, "SELECT * FROM jobs WHERE id = :id", {"id": job_id})

    def list_active(
        self,
        search: Optional[str] = None,
        location: Optional[str] = None,
        job_type: Optional[str] = None,
        skill: Optional[str] = None,
        page: int = 1,
        page_size: int = 10
    ) -> Tuple[List[dict], int]:
        """Active jobs, newest first, with optional filters. Returns (jobs, total)."""
        where = " WHERE status = 'active'"
        params: Dict[str, Any] = {}

        if search:
            where += " AND LOWER(title) LIKE LOWER(:search)"
            params["search"] = f"%{search}%"
        if location:
            where += " AND LOWER(location) LIKE LOWER(:location)"
            params["location"] = f"%{location}%"
        if job_type:
            where += " AND job_type = :job_type"
            params["job_type"] = job_type
        if skill:
            # Match the JSON-encoded element inside the skills_required array
            where += " AND LOWER(skills_required) LIKE LOWER(:skill)"
            params["skill"] = f"%{json.dumps(skill)}%"

        offset = (page - 1) * page_size
        with get_db_session() as db:
            total = fetch_one(db, "SELECT COUNT(*) AS total FROM jobs" + where, params)["total"]
            rows = fetch_all(
                db,
                f"SELECT * FROM jobs{where} ORDER BY posted_at DESC LIMIT {int(page_size)} OFFSET {int(offset)}",
                params
            )
        return [decode_job(r) for r in rows], total

    def recent_active(self, limit: int = 3) -> List[dict]:
        with get_db_session() as db:
            rows = fetch_all(
                db,
                f"SELECT * FROM jobs WHERE status = 'active' ORDER BY posted_at DESC LIMIT {int(limit)}"
            )
        return [decode_job(r) for r in rows]

    def get(self, job_id: str) -> dict:
        with get_db_session() as db:
            row = self._select(db, job_id)
        if not row:
            raise NotFound("Job not found")
        return decode_job(row)

    def list_for_employer(self, employer_id: str) -> List[dict]:
        with get_db_session() as db:
            rows = fetch_all(
                db,
                "SELECT * FROM jobs WHERE employer_id = :employer_id ORDER BY posted_at DESC",
                {"employer_id": employer_id}
            )
        return [decode_job(r) for r in rows]

    def create(self, employer_id: str, fields: Dict[str, Any]) -> dict:
        if not fields.get("company"):
            raise ValidationError("Company name is required")

        job_id = new_id()
        columns = [f for f in JOB_FIELDS if f in fields]
        params = {f: _encode(f, fields[f]) for f in columns}
        params.update({"id": job_id, "employer_id": employer_id, "posted_at": utcnow()})

        names = ["id", "employer_id", "posted_at"] + columns
        with get_db_session() as db:
            db.execute(
                text(f"INSERT INTO jobs ({', '.join(names)}) VALUES ({', '.join(':' + n for n in names)})"),
                params
            )
            row = self._select(db, job_id)
        return decode_job(row)

    def update(self, employer_id: str, job_id: str, fields: Dict[str, Any]) -> dict:
        updates = []
        params = {"id": job_id, "employer_id": employer_id}
        for field in JOB_FIELDS:
            if field in fields and fields[field] is not None:
                updates.append(f"{field} = :{field}")
                params[field] = _encode(field, fields[field])

        with get_db_session() as db:
            owned = fetch_one(
                db,
                "SELECT id FROM jobs WHERE id = :id AND employer_id = :employer_id",
                {"id": job_id, "employer_id": employer_id}
            )
            if not owned:
                raise NotFound("Job not found")
            if updates:
                db.execute(
                    text(f"UPDATE jobs SET {', '.join(updates)} WHERE id = :id AND employer_id = :employer_id"),
                    params
                )
            row = self._select(db, job_id)
        return decode_job(row)

    def delete(self, employer_id: str, job_id: str) -> None:
        """Delete a job. Cascades to its applications."""
        with get_db_session() as db:
            db.execute(
                text("DELETE FROM job_applications WHERE job_id IN (SELECT id FROM jobs WHERE id = :id AND employer_id = :employer_id)"),
                {"id": job_id, "employer_id": employer_id}
            )
            result = db.execute(
                text("DELETE FROM jobs WHERE id = :id AND employer_id = :employer_id"),
                {"id": job_id, "employer_id": employer_id}
            )
            if result.rowcount == 0:
                raise NotFound("Job not found")


_job_service = None


def get_job_service() -> JobService:
    global _job_service
    if _job_service is None:
        _job_service = JobService()
    return _job_service
