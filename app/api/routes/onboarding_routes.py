"""
Onboarding Routes

Wizard state:
GET /onboarding - Current step and progress
PUT /onboarding/step - Jump to any step of the caller's track
POST /onboarding/advance - Next step (also used to skip one)
POST /onboarding/retreat - Previous step

Student steps (each saves, then moves the wizard on):
PUT /onboarding/student/basic-info
POST /onboarding/student/profile-picture
PUT /onboarding/student/github
PUT /onboarding/student/linkedin
POST /onboarding/student/resume (does not move the wizard)
PUT /onboarding/student/skills (completes onboarding)

Employer steps:
PUT /onboarding/employer/company-info
POST /onboarding/employer/company-logo
PUT /onboarding/employer/company-details
PUT /onboarding/employer/contact-info (completes onboarding)
"""

import re
from typing import Optional

import structlog
from fastapi import APIRouter, Depends, File, UploadFile

from app.core.auth import get_current_user, get_current_student, get_current_employer
from app.core.errors import ValidationError
from app.db.postgres import get_db_session
from app.services.achievement_service import ONBOARDING_COMPLETE, get_achievement_service
from app.services.onboarding import EmployerStep, OnboardingService, StudentStep
from app.services.profile_service import (
    get_employer_profile_service, get_student_profile_service, mark_onboarding_completed
)
from app.services.storage_service import get_storage
from app.utils.file_upload import BUCKET_RULES, upload_file
from app.schemas.schemas import (
    OnboardingStateResponse, OnboardingStepResponse, StepUpdate,
    BasicInfoStep, GitHubStep, LinkedInStep, SkillsStep,
    CompanyInfoStep, CompanyDetailsStep, ContactInfoStep
)

router = APIRouter(prefix="/onboarding", tags=["Onboarding"])
logger = structlog.get_logger(__name__)

LINKEDIN_URL = re.compile(r"^(https?://)?(www\.)?linkedin\.com/in/[\w-]+/?$")


def _moved_to(user: dict, step, url: Optional[str] = None) -> OnboardingStepResponse:
    wizard = OnboardingService(user["id"], user["role"])
    current = wizard.set_step(step)
    return OnboardingStepResponse(onboarding=wizard.state(current), url=url)


def _complete(user: dict) -> None:
    """Flag the account as onboarded; students also earn the onboarding badge."""
    with get_db_session() as db:
        mark_onboarding_completed(db, user["id"])
        if user["role"] == "student":
            get_achievement_service().award_once(db, user["id"], **ONBOARDING_COMPLETE)
    logger.info("onboarding_completed", user_id=user["id"], role=user["role"])


# ============================================================
# WIZARD STATE
# ============================================================

@router.get("", response_model=OnboardingStateResponse)
async def get_state(user: dict = Depends(get_current_user)):
    return OnboardingService(user["id"], user["role"]).state()


@router.put("/step", response_model=OnboardingStateResponse)
async def set_step(update: StepUpdate, user: dict = Depends(get_current_user)):
    """Jump straight to a step. Earlier steps need not be complete."""
    wizard = OnboardingService(user["id"], user["role"])
    return wizard.state(wizard.set_step(update.step))


@router.post("/advance", response_model=OnboardingStateResponse)
async def advance(user: dict = Depends(get_current_user)):
    wizard = OnboardingService(user["id"], user["role"])
    return wizard.state(wizard.advance())


@router.post("/retreat", response_model=OnboardingStateResponse)
async def retreat(user: dict = Depends(get_current_user)):
    wizard = OnboardingService(user["id"], user["role"])
    return wizard.state(wizard.retreat())


# ============================================================
# STUDENT STEPS
# ============================================================

@router.put("/student/basic-info", response_model=OnboardingStepResponse)
async def save_basic_info(data: BasicInfoStep, student: dict = Depends(get_current_student)):
    if not data.first_name.strip() or not data.last_name.strip():
        raise ValidationError("First name and last name are required")
    get_student_profile_service().update(student["id"], {
        "first_name": data.first_name.strip(),
        "last_name": data.last_name.strip(),
        "bio": data.bio,
        "education": data.education,
    })
    return _moved_to(student, StudentStep.PROFILE_PICTURE)


@router.post("/student/profile-picture", response_model=OnboardingStepResponse)
async def upload_profile_picture(
    file: UploadFile = File(..., description="JPEG, PNG or WebP, max 5MB"),
    student: dict = Depends(get_current_student),
    storage=Depends(get_storage)
):
    url = await upload_file(file, BUCKET_RULES["avatars"], storage)
    get_student_profile_service().update(student["id"], {"profile_image_url": url})
    return _moved_to(student, StudentStep.GITHUB, url=url)


@router.put("/student/github", response_model=OnboardingStepResponse)
async def save_github(data: GitHubStep, student: dict = Depends(get_current_student)):
    """Save the username and up to 5 selected repositories."""
    if not data.github_username.strip():
        raise ValidationError("GitHub username is required")
    get_student_profile_service().update(student["id"], {
        "github_username": data.github_username.strip(),
        "github_projects": [p.model_dump() for p in data.projects],
    })
    return _moved_to(student, StudentStep.LINKEDIN)


@router.put("/student/linkedin", response_model=OnboardingStepResponse)
async def save_linkedin(data: LinkedInStep, student: dict = Depends(get_current_student)):
    """An empty URL is allowed; a non-empty one must be a linkedin.com/in/ profile."""
    url = (data.linkedin_url or "").strip()
    if url and not LINKEDIN_URL.match(url):
        raise ValidationError(
            "Please enter a valid LinkedIn profile URL (e.g., https://linkedin.com/in/username)"
        )
    get_student_profile_service().update(student["id"], {"linkedin_url": url or None})
    return _moved_to(student, StudentStep.RESUME)


@router.post("/student/resume", response_model=OnboardingStepResponse)
async def upload_resume(
    file: UploadFile = File(..., description="PDF, max 10MB"),
    student: dict = Depends(get_current_student),
    storage=Depends(get_storage)
):
    """Store the PDF. The wizard stays on this step until the client moves on."""
    url = await upload_file(file, BUCKET_RULES["resumes"], storage)
    get_student_profile_service().update(student["id"], {"resume_url": url})
    wizard = OnboardingService(student["id"], student["role"])
    return OnboardingStepResponse(onboarding=wizard.state(), url=url)


@router.put("/student/skills", response_model=OnboardingStepResponse)
async def save_skills(data: SkillsStep, student: dict = Depends(get_current_student)):
    """Save skills and finish onboarding (+50 XP, once)."""
    get_student_profile_service().update(student["id"], {"skills": data.skills})
    _complete(student)
    return _moved_to(student, StudentStep.COMPLETED)


# ============================================================
# EMPLOYER STEPS
# ============================================================

@router.put("/employer/company-info", response_model=OnboardingStepResponse)
async def save_company_info(data: CompanyInfoStep, employer: dict = Depends(get_current_employer)):
    if not data.company_name.strip():
        raise ValidationError("Company name is required")
    fields = data.model_dump()
    fields["company_name"] = data.company_name.strip()
    get_employer_profile_service().update(employer["id"], fields)
    return _moved_to(employer, EmployerStep.COMPANY_LOGO)


@router.post("/employer/company-logo", response_model=OnboardingStepResponse)
async def upload_company_logo(
    file: UploadFile = File(..., description="JPEG, PNG, WebP or SVG, max 5MB"),
    employer: dict = Depends(get_current_employer),
    storage=Depends(get_storage)
):
    url = await upload_file(file, BUCKET_RULES["company_logos"], storage)
    get_employer_profile_service().update(employer["id"], {"logo_url": url})
    return _moved_to(employer, EmployerStep.COMPANY_DETAILS, url=url)


@router.put("/employer/company-details", response_model=OnboardingStepResponse)
async def save_company_details(data: CompanyDetailsStep, employer: dict = Depends(get_current_employer)):
    get_employer_profile_service().update(employer["id"], data.model_dump())
    return _moved_to(employer, EmployerStep.CONTACT_INFO)


@router.put("/employer/contact-info", response_model=OnboardingStepResponse)
async def save_contact_info(data: ContactInfoStep, employer: dict = Depends(get_current_employer)):
    """Save contact details and finish onboarding."""
    if not data.contact_email.strip():
        raise ValidationError("Contact email is required")
    get_employer_profile_service().update(employer["id"], {
        "contact_email": data.contact_email.strip(),
        "contact_phone": data.contact_phone,
        "social_links": data.social_links.model_dump(),
    })
    _complete(employer)
    return _moved_to(employer, EmployerStep.COMPLETED)
