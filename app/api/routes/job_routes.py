"""
Job Routes

GET /jobs - List active jobs with filters
GET /jobs/recommended - Top matches for the current student
GET /jobs/{job_id} - Get job details
POST /jobs - Create job posting (employer only)
PUT /jobs/{job_id} - Update job (owner only)
DELETE /jobs/{job_id} - Delete job (owner only)
POST /jobs/{job_id}/apply - Apply to job (student only)
GET /jobs/{job_id}/application-status - Has the student applied?
"""

from fastapi import APIRouter, Depends, Query
from typing import List, Optional

from app.core.auth import get_current_user, get_current_student, get_current_employer
from app.services.application_service import get_application_service
from app.services.job_service import get_job_service
from app.services.matching_service import get_recommendation_service
from app.services.profile_service import get_employer_profile_service
from app.schemas.schemas import (
    JobCreate, JobUpdate, JobResponse, JobListResponse,
    ApplyRequest, ApplicationResponse, ApplicationStatusCheck, MessageResponse
)

router = APIRouter(prefix="/jobs", tags=["Jobs"])


@router.get("", response_model=JobListResponse)
async def list_jobs(
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=50),
    search: Optional[str] = Query(None, description="Search in title"),
    location: Optional[str] = Query(None),
    job_type: Optional[str] = Query(None),
    skill: Optional[str] = Query(None, description="Filter by required skill"),
    user: dict = Depends(get_current_user)
):
    """List active job postings, newest first, with filters and pagination."""
    jobs, total = get_job_service().list_active(
        search=search, location=location, job_type=job_type, skill=skill,
        page=page, page_size=page_size
    )
    return JobListResponse(jobs=jobs, total=total, page=page, page_size=page_size)


# Declared before /{job_id} so "recommended" is not read as an id
@router.get("/recommended", response_model=List[JobResponse])
async def recommended_jobs(student: dict = Depends(get_current_student)):
    """The three newest active jobs, best skill match first."""
    return get_recommendation_service().recommended_jobs(student["id"])


@router.get("/{job_id}", response_model=JobResponse)
async def get_job(job_id: str, user: dict = Depends(get_current_user)):
    return get_job_service().get(job_id)


@router.post("", response_model=JobResponse, status_code=201)
async def create_job(job: JobCreate, employer: dict = Depends(get_current_employer)):
    """
    Create a new job posting. `company` defaults to the employer's
    company name.
    """
    fields = job.model_dump()
    if not fields.get("company"):
        fields["company"] = get_employer_profile_service().get_or_create(employer["id"])["company_name"]
    return get_job_service().create(employer["id"], fields)


@router.put("/{job_id}", response_model=JobResponse)
async def update_job(job_id: str, update: JobUpdate, employer: dict = Depends(get_current_employer)):
    """Update a job posting. Only the owning employer can update."""
    return get_job_service().update(employer["id"], job_id, update.model_dump(exclude_unset=True))


@router.delete("/{job_id}", response_model=MessageResponse)
async def delete_job(job_id: str, employer: dict = Depends(get_current_employer)):
    """Delete a job posting. Cascades to applications."""
    get_job_service().delete(employer["id"], job_id)
    return MessageResponse(message="Job deleted successfully")


@router.post("/{job_id}/apply", response_model=ApplicationResponse, status_code=201)
async def apply_to_job(job_id: str, application: ApplyRequest, student: dict = Depends(get_current_student)):
    """Apply to a job. Students only. Cannot apply twice to same job."""
    return get_application_service().apply(
        student["id"], job_id,
        resume_id=application.resume_id,
        cover_letter=application.cover_letter
    )


@router.get("/{job_id}/application-status", response_model=ApplicationStatusCheck)
async def application_status(job_id: str, student: dict = Depends(get_current_student)):
    status = get_application_service().status_for_job(student["id"], job_id)
    return ApplicationStatusCheck(applied=status is not None, status=status)
