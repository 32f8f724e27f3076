"""
Employer Routes

GET /employers/profile - Get own company profile (created on first read)
PUT /employers/profile - Update company profile
GET /employers/jobs - Get the employer's jobs
GET /employers/applications - Get applications received
PUT /employers/applications/{id}/status - Update application status
"""

from fastapi import APIRouter, Depends, Query
from typing import List, Optional

from app.core.auth import get_current_employer
from app.services.application_service import get_application_service
from app.services.job_service import get_job_service
from app.services.profile_service import get_employer_profile_service
from app.schemas.schemas import (
    EmployerProfileUpdate, EmployerProfileResponse, JobResponse,
    ApplicationResponse, ApplicationStatusUpdate
)

router = APIRouter(prefix="/employers", tags=["Employers"])


@router.get("/profile", response_model=EmployerProfileResponse)
async def get_profile(employer: dict = Depends(get_current_employer)):
    return get_employer_profile_service().get_or_create(employer["id"])


@router.put("/profile", response_model=EmployerProfileResponse)
async def update_profile(data: EmployerProfileUpdate, employer: dict = Depends(get_current_employer)):
    """Update company profile. Only provided fields are updated."""
    fields = data.model_dump(exclude_unset=True)
    return get_employer_profile_service().update(employer["id"], fields)


@router.get("/jobs", response_model=List[JobResponse])
async def get_my_jobs(employer: dict = Depends(get_current_employer)):
    """All jobs posted by this employer, any status."""
    return get_job_service().list_for_employer(employer["id"])


@router.get("/applications", response_model=List[ApplicationResponse])
async def get_applications(
    job_id: Optional[str] = Query(None, description="Only applications to this job"),
    employer: dict = Depends(get_current_employer)
):
    """Get applications received for the employer's jobs."""
    return get_application_service().list_for_employer(employer["id"], job_id=job_id)


@router.put("/applications/{application_id}/status", response_model=ApplicationResponse)
async def update_application_status(
    application_id: str,
    update: ApplicationStatusUpdate,
    employer: dict = Depends(get_current_employer)
):
    """
    Move an application along applied -> in_review -> interview -> offer,
    or reject it. Withdrawing is left to the applicant.
    """
    return get_application_service().set_status_as_employer(
        employer["id"], application_id, update.status.value
    )
