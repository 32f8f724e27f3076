"""
Peer Squad Service - small student study groups.

A squad has a skill focus and a member cap. Its creator joins as
`admin`; everyone who joins later is a `member`. Only admins can edit the
squad or change roles. Closed squads take no new members.

Listings carry each member with a short student card (name and picture)
read from student_profiles; a student without a profile row shows blanks.
"""

from collections import defaultdict
from typing import Any, Dict, List, Optional

import structlog
from sqlalchemy import text
from sqlalchemy.orm import Session

from app.core.errors import Conflict, Forbidden, NotFound, ValidationError
from app.db.postgres import fetch_all, fetch_one, from_json, get_db_session, new_id, to_json, utcnow
from app.services.profile_service import ensure_unique

logger = structlog.get_logger(__name__)

ROLES = {"admin", "member"}
STATUSES = {"active", "closed"}

MEMBERS_WITH_STUDENT = """
    SELECT m.id, m.peer_squad_id, m.student_id, m.role, m.joined_at,
           sp.first_name, sp.last_name, sp.profile_image_url
    FROM peer_squad_members m
    LEFT JOIN student_profiles sp ON sp.id = m.student_id
"""


def _member(row: dict) -> dict:
    return {
        "id": row["id"],
        "peer_squad_id": row["peer_squad_id"],
        "student_id": row["student_id"],
        "role": row["role"],
        "joined_at": row["joined_at"],
        "student": {
            "first_name": row["first_name"] or "",
            "last_name": row["last_name"] or "",
            "profile_image_url": row["profile_image_url"] or "",
        },
    }


def _with_members(squads: List[dict], member_rows: List[dict]) -> List[dict]:
    by_squad = defaultdict(list)
    for row in member_rows:
        by_squad[row["peer_squad_id"]].append(_member(row))
    for squad in squads:
        squad["skill_focus"] = from_json(squad["skill_focus"], [])
        squad["members"] = by_squad.get(squad["id"], [])
    return squads


class PeerSquadService:

    def _squad(self, db: Session, squad_id: str) -> dict:
        squad = fetch_one(db, "SELECT * FROM peer_squads WHERE id = :id", {"id": squad_id})
        if not squad:
            raise NotFound("Squad not found")
        return squad

    def _membership(self, db: Session, squad_id: str, student_id: str) -> Optional[dict]:
        return fetch_one(
            db,
            "SELECT id, role FROM peer_squad_members WHERE peer_squad_id = :squad_id AND student_id = :student_id",
            {"squad_id": squad_id, "student_id": student_id}
        )

    def _require_admin(self, db: Session, squad_id: str, student_id: str) -> None:
        membership = self._membership(db, squad_id, student_id)
        if not membership or membership["role"] != "admin":
            raise Forbidden("Only squad admins can do this")

    def _member_count(self, db: Session, squad_id: str) -> int:
        row = fetch_one(
            db,
            "SELECT COUNT(*) AS total FROM peer_squad_members WHERE peer_squad_id = :squad_id",
            {"squad_id": squad_id}
        )
        return row["total"]

    def _load(self, db: Session, squad_id: str) -> dict:
        squad = self._squad(db, squad_id)
        members = fetch_all(
            db,
            MEMBERS_WITH_STUDENT + " WHERE m.peer_squad_id = :squad_id ORDER BY m.joined_at",
            {"squad_id": squad_id}
        )
        return _with_members([squad], members)[0]

    # ============================================================
    # READS
    # ============================================================

    def list_squads(self) -> List[dict]:
        """All squads, newest first, with their members."""
        with get_db_session() as db:
            squads = fetch_all(db, "SELECT * FROM peer_squads ORDER BY created_at DESC")
            members = fetch_all(db, MEMBERS_WITH_STUDENT + " ORDER BY m.joined_at")
        return _with_members(squads, members)

    def list_for_student(self, student_id: str) -> List[dict]:
        """Squads the student belongs to, newest first."""
        mine = "SELECT peer_squad_id FROM peer_squad_members WHERE student_id = :student_id"
        params = {"student_id": student_id}
        with get_db_session() as db:
            squads = fetch_all(
                db, f"SELECT * FROM peer_squads WHERE id IN ({mine}) ORDER BY created_at DESC", params
            )
            members = fetch_all(
                db, MEMBERS_WITH_STUDENT + f" WHERE m.peer_squad_id IN ({mine}) ORDER BY m.joined_at", params
            )
        return _with_members(squads, members)

    def get(self, squad_id: str) -> dict:
        with get_db_session() as db:
            return self._load(db, squad_id)

    # ============================================================
    # WRITES
    # ============================================================

    def create(
        self,
        student_id: str,
        name: str,
        description: Optional[str] = None,
        skill_focus: Optional[List[str]] = None,
        max_members: int = 5
    ) -> dict:
        """Create a squad with the creator as its first (admin) member."""
        if not (name or "").strip():
            raise ValidationError("Squad name is required")

        squad_id = new_id()
        now = utcnow()
        with get_db_session() as db:
            db.execute(
                text("""
                    INSERT INTO peer_squads
                        (id, name, description, skill_focus, created_by, max_members, status, created_at)
                    VALUES
                        (:id, :name, :description, :skill_focus, :created_by, :max_members, 'active', :now)
                """),
                {
                    "id": squad_id,
                    "name": name.strip(),
                    "description": description,
                    "skill_focus": to_json(ensure_unique(skill_focus or [], "skill focus")),
                    "created_by": student_id,
                    "max_members": max_members,
                    "now": now,
                }
            )
            db.execute(
                text("""
                    INSERT INTO peer_squad_members (id, peer_squad_id, student_id, role, joined_at)
                    VALUES (:id, :squad_id, :student_id, 'admin', :now)
                """),
                {"id": new_id(), "squad_id": squad_id, "student_id": student_id, "now": now}
            )
            squad = self._load(db, squad_id)
        logger.info("squad_created", squad_id=squad_id, student_id=student_id)
        return squad

    def join(self, squad_id: str, student_id: str) -> dict:
        """
        Raises:
            NotFound: squad missing
            ValidationError: squad is closed
            Conflict: already a member, or the squad is full
        """
        with get_db_session() as db:
            squad = self._squad(db, squad_id)
            if squad["status"] != "active":
                raise ValidationError("Squad is not accepting new members")
            if self._membership(db, squad_id, student_id):
                raise Conflict("Already a member of this squad")
            if self._member_count(db, squad_id) >= squad["max_members"]:
                raise Conflict("Squad is full")

            db.execute(
                text("""
                    INSERT INTO peer_squad_members (id, peer_squad_id, student_id, role, joined_at)
                    VALUES (:id, :squad_id, :student_id, 'member', :now)
                """),
                {"id": new_id(), "squad_id": squad_id, "student_id": student_id, "now": utcnow()}
            )
            squad = self._load(db, squad_id)
        logger.info("squad_joined", squad_id=squad_id, student_id=student_id)
        return squad

    def leave(self, squad_id: str, student_id: str) -> None:
        with get_db_session() as db:
            self._squad(db, squad_id)
            result = db.execute(
                text("DELETE FROM peer_squad_members WHERE peer_squad_id = :squad_id AND student_id = :student_id"),
                {"squad_id": squad_id, "student_id": student_id}
            )
            if result.rowcount == 0:
                raise NotFound("Not a member of this squad")
        logger.info("squad_left", squad_id=squad_id, student_id=student_id)

    def update(self, squad_id: str, student_id: str, fields: Dict[str, Any]) -> dict:
        """Edit name, description, skill focus, member cap or status (admins only)."""
        updates = []
        params: Dict[str, Any] = {"id": squad_id}
        for field in ("name", "description", "skill_focus", "max_members", "status"):
            if field not in fields or fields[field] is None:
                continue
            value = fields[field]
            if field == "name":
                value = value.strip()
                if not value:
                    raise ValidationError("Squad name is required")
            elif field == "skill_focus":
                value = to_json(ensure_unique(value, "skill focus"))
            elif field == "status":
                value = getattr(value, "value", value)
                if value not in STATUSES:
                    raise ValidationError(f"Unknown squad status: {value}")
            updates.append(f"{field} = :{field}")
            params[field] = value

        with get_db_session() as db:
            self._squad(db, squad_id)
            self._require_admin(db, squad_id, student_id)
            if "max_members" in params and params["max_members"] < self._member_count(db, squad_id):
                raise ValidationError("Member cap cannot be below the current member count")
            if updates:
                db.execute(text(f"UPDATE peer_squads SET {', '.join(updates)} WHERE id = :id"), params)
            return self._load(db, squad_id)

    def update_member_role(self, squad_id: str, student_id: str, member_id: str, role: str) -> dict:
        """Promote or demote a member (admins only). The last admin cannot step down."""
        role = getattr(role, "value", role)
        if role not in ROLES:
            raise ValidationError(f"Unknown squad role: {role}")

        with get_db_session() as db:
            self._squad(db, squad_id)
            self._require_admin(db, squad_id, student_id)
            member = fetch_one(
                db,
                "SELECT id, role FROM peer_squad_members WHERE id = :id AND peer_squad_id = :squad_id",
                {"id": member_id, "squad_id": squad_id}
            )
            if not member:
                raise NotFound("Squad member not found")
            if member["role"] == "admin" and role != "admin":
                admins = fetch_one(
                    db,
                    "SELECT COUNT(*) AS total FROM peer_squad_members WHERE peer_squad_id = :squad_id AND role = 'admin'",
                    {"squad_id": squad_id}
                )["total"]
                if admins <= 1:
                    raise Conflict("A squad needs at least one admin")

            db.execute(
                text("UPDATE peer_squad_members SET role = :role WHERE id = :id"),
                {"role": role, "id": member_id}
            )
            squad = self._load(db, squad_id)
        logger.info("squad_role_changed", squad_id=squad_id, member_id=member_id, role=role)
        return squad


_peer_squad_service = None


def get_peer_squad_service() -> PeerSquadService:
    global _peer_squad_service
    if _peer_squad_service is None:
        _peer_squad_service = PeerSquadService()
    return _peer_squad_service
