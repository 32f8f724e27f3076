"""
Application Routes (student side)

GET /applications - My applications, newest first
PUT /applications/{id} - Change cover letter / resume
POST /applications/{id}/withdraw - Withdraw an application
"""

from fastapi import APIRouter, Depends, Query
from typing import List, Optional

from app.core.auth import get_current_student
from app.services.application_service import get_application_service
from app.schemas.schemas import ApplicationResponse, ApplicationStatus, ApplicationUpdate

router = APIRouter(prefix="/applications", tags=["Applications"])


@router.get("", response_model=List[ApplicationResponse])
async def get_my_applications(
    status: Optional[ApplicationStatus] = Query(None),
    student: dict = Depends(get_current_student)
):
    """Get all job applications for current student."""
    return get_application_service().list_for_student(
        student["id"], status=status.value if status else None
    )


@router.put("/{application_id}", response_model=ApplicationResponse)
async def update_application(
    application_id: str,
    update: ApplicationUpdate,
    student: dict = Depends(get_current_student)
):
    return get_application_service().update(
        student["id"], application_id, update.model_dump(exclude_unset=True)
    )


@router.post("/{application_id}/withdraw", response_model=ApplicationResponse)
async def withdraw_application(application_id: str, student: dict = Depends(get_current_student)):
    """Withdraw. Already-withdrawn applications stay withdrawn."""
    return get_application_service().withdraw(student["id"], application_id)
