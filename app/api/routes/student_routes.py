"""
Student Routes

GET /students/profile - Get own profile (created on first read)
PUT /students/profile - Update profile
GET /students/skills - Get skills
POST /students/skills - Add skill
DELETE /students/skills/{skill} - Remove skill
GET /students/achievements - Earned achievements, newest first
GET /students/achievements/{achievement_id} - One achievement
"""

from fastapi import APIRouter, Depends
from typing import List

from app.core.auth import get_current_student
from app.services.achievement_service import get_achievement_service
from app.services.profile_service import get_student_profile_service
from app.schemas.schemas import (
    StudentProfileUpdate, StudentProfileResponse, SkillAdd, SkillsResponse, AchievementResponse
)

router = APIRouter(prefix="/students", tags=["Students"])


@router.get("/profile", response_model=StudentProfileResponse)
async def get_profile(student: dict = Depends(get_current_student)):
    """Get own profile. A missing profile is created empty."""
    return get_student_profile_service().get_or_create(student["id"])


@router.put("/profile", response_model=StudentProfileResponse)
async def update_profile(data: StudentProfileUpdate, student: dict = Depends(get_current_student)):
    """
    Update student profile. Only provided fields are updated.

    Send the `version` you last read to be told (409) when another tab
    saved in between.
    """
    fields = {k: v for k, v in data.model_dump().items() if k in data.model_fields_set}
    version = fields.pop("version", None)
    return get_student_profile_service().update(student["id"], fields, version=version)


@router.get("/skills", response_model=SkillsResponse)
async def get_skills(student: dict = Depends(get_current_student)):
    """Get all skills for current student."""
    profile = get_student_profile_service().get_or_create(student["id"])
    return SkillsResponse(skills=profile["skills"])


@router.post("/skills", response_model=SkillsResponse, status_code=201)
async def add_skill(skill: SkillAdd, student: dict = Depends(get_current_student)):
    """Add a skill to profile. An exact duplicate is rejected."""
    skills = get_student_profile_service().add_skill(student["id"], skill.skill)
    return SkillsResponse(skills=skills)


@router.delete("/skills/{skill}", response_model=SkillsResponse)
async def remove_skill(skill: str, student: dict = Depends(get_current_student)):
    """Remove a skill from profile."""
    skills = get_student_profile_service().remove_skill(student["id"], skill)
    return SkillsResponse(skills=skills)


@router.get("/achievements", response_model=List[AchievementResponse])
async def list_achievements(student: dict = Depends(get_current_student)):
    return get_achievement_service().list_for_user(student["id"])


@router.get("/achievements/{achievement_id}", response_model=AchievementResponse)
async def get_achievement(achievement_id: str, student: dict = Depends(get_current_student)):
    return get_achievement_service().get(student["id"], achievement_id)
