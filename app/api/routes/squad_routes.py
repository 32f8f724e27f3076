"""
Peer Squad Routes (students)

GET /squads - All squads, newest first
GET /squads/mine - Squads I belong to
GET /squads/{id} - One squad with members
POST /squads - Create a squad (creator becomes admin)
PUT /squads/{id} - Edit squad (admins)
POST /squads/{id}/join - Join
POST /squads/{id}/leave - Leave
PUT /squads/{id}/members/{member_id}/role - Change a member's role (admins)
"""

from fastapi import APIRouter, Depends
from typing import List

from app.core.auth import get_current_student
from app.services.peer_squad_service import get_peer_squad_service
from app.schemas.schemas import (
    SquadCreate, SquadUpdate, SquadResponse, MemberRoleUpdate, MessageResponse
)

router = APIRouter(prefix="/squads", tags=["Peer Squads"])


@router.get("", response_model=List[SquadResponse])
async def list_squads(student: dict = Depends(get_current_student)):
    return get_peer_squad_service().list_squads()


# Declared before /{squad_id} so "mine" is not read as an id
@router.get("/mine", response_model=List[SquadResponse])
async def my_squads(student: dict = Depends(get_current_student)):
    return get_peer_squad_service().list_for_student(student["id"])


@router.get("/{squad_id}", response_model=SquadResponse)
async def get_squad(squad_id: str, student: dict = Depends(get_current_student)):
    return get_peer_squad_service().get(squad_id)


@router.post("", response_model=SquadResponse, status_code=201)
async def create_squad(squad: SquadCreate, student: dict = Depends(get_current_student)):
    return get_peer_squad_service().create(
        student["id"], squad.name,
        description=squad.description,
        skill_focus=squad.skill_focus,
        max_members=squad.max_members
    )


@router.put("/{squad_id}", response_model=SquadResponse)
async def update_squad(squad_id: str, update: SquadUpdate, student: dict = Depends(get_current_student)):
    fields = {k: v for k, v in update.model_dump().items() if k in update.model_fields_set}
    return get_peer_squad_service().update(squad_id, student["id"], fields)


@router.post("/{squad_id}/join", response_model=SquadResponse)
async def join_squad(squad_id: str, student: dict = Depends(get_current_student)):
    """Join an active squad that still has room."""
    return get_peer_squad_service().join(squad_id, student["id"])


@router.post("/{squad_id}/leave", response_model=MessageResponse)
async def leave_squad(squad_id: str, student: dict = Depends(get_current_student)):
    get_peer_squad_service().leave(squad_id, student["id"])
    return MessageResponse(message="Left squad")


@router.put("/{squad_id}/members/{member_id}/role", response_model=SquadResponse)
async def update_member_role(
    squad_id: str,
    member_id: str,
    update: MemberRoleUpdate,
    student: dict = Depends(get_current_student)
):
    return get_peer_squad_service().update_member_role(
        squad_id, student["id"], member_id, update.role.value
    )
