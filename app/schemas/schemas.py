"""
Pydantic Schemas - Request/Response Validation

All API request and response schemas in one file for simplicity.
"""

from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator
from typing import Optional, List, Any, Dict
from datetime import datetime
from enum import Enum
import uuid


def _new_entry_id() -> str:
    return str(uuid.uuid4())


def _no_duplicates(values: List[str], label: str) -> List[str]:
    cleaned = [v.strip() for v in values if v and v.strip()]
    if len(set(cleaned)) != len(cleaned):
        raise ValueError(f"{label} must not contain duplicates")
    return cleaned


# ============================================================
# ENUMS
# ============================================================

class UserRole(str, Enum):
    student = "student"
    employer = "employer"


class AccountType(str, Enum):
    free = "free"
    premium = "premium"


class JobStatus(str, Enum):
    active = "active"
    closed = "closed"
    draft = "draft"


class ApplicationStatus(str, Enum):
    applied = "applied"
    in_review = "in_review"
    interview = "interview"
    offer = "offer"
    rejected = "rejected"
    withdrawn = "withdrawn"


# ============================================================
# AUTH SCHEMAS
# ============================================================

class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=8)
    role: UserRole

class LoginRequest(BaseModel):
    email: EmailStr
    password: str

class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: str
    role: str

class UserResponse(BaseModel):
    id: str
    email: str
    role: str
    account_type: AccountType
    onboarding_completed: bool
    created_at: datetime


# ============================================================
# STUDENT SCHEMAS
# ============================================================

class GitHubProject(BaseModel):
    """A repository the student chose to show on their profile."""
    id: int
    name: str
    description: Optional[str] = None
    url: str
    language: Optional[str] = None
    stars: int = 0

class StudentProfileUpdate(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    bio: Optional[str] = None
    education: Optional[str] = None
    skills: Optional[List[str]] = None
    career_goals: Optional[List[str]] = None
    github_username: Optional[str] = None
    github_projects: Optional[List[GitHubProject]] = Field(None, max_length=5)
    linkedin_url: Optional[str] = None
    profile_image_url: Optional[str] = None
    resume_url: Optional[str] = None
    version: Optional[int] = None

class StudentProfileResponse(BaseModel):
    id: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    bio: Optional[str] = None
    education: Optional[str] = None
    skills: List[str] = []
    career_goals: List[str] = []
    github_username: Optional[str] = None
    github_projects: List[GitHubProject] = []
    linkedin_url: Optional[str] = None
    profile_image_url: Optional[str] = None
    resume_url: Optional[str] = None
    level: int = 1
    xp_points: int = 0
    version: int
    updated_at: datetime

class SkillAdd(BaseModel):
    skill: str

class SkillsResponse(BaseModel):
    skills: List[str]

class AchievementResponse(BaseModel):
    id: str
    name: str
    type: str
    description: Optional[str] = None
    badge_image_url: Optional[str] = None
    xp_awarded: int
    earned_at: datetime


# ============================================================
# EMPLOYER SCHEMAS
# ============================================================

class SocialLinks(BaseModel):
    linkedin: Optional[str] = None
    twitter: Optional[str] = None
    facebook: Optional[str] = None

class EmployerProfileUpdate(BaseModel):
    company_name: Optional[str] = None
    company_description: Optional[str] = None
    industry: Optional[str] = None
    company_size: Optional[str] = None
    logo_url: Optional[str] = None
    website_url: Optional[str] = None
    company_location: Optional[str] = None
    company_culture: Optional[str] = None
    company_benefits: Optional[List[str]] = None
    company_values: Optional[List[str]] = None
    contact_email: Optional[EmailStr] = None
    contact_phone: Optional[str] = None
    social_links: Optional[SocialLinks] = None

class EmployerProfileResponse(BaseModel):
    id: str
    company_name: str = ""
    company_description: Optional[str] = None
    industry: Optional[str] = None
    company_size: Optional[str] = None
    logo_url: Optional[str] = None
    website_url: Optional[str] = None
    company_location: Optional[str] = None
    company_culture: Optional[str] = None
    company_benefits: List[str] = []
    company_values: List[str] = []
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    social_links: SocialLinks = SocialLinks()
    verified: bool = False
    updated_at: datetime


# ============================================================
# ONBOARDING SCHEMAS
# Required fields are plain strings so the routes can report a
# missing value with the same 400 the rest of the API uses.
# ============================================================

class OnboardingStateResponse(BaseModel):
    track: str
    step: str
    progress: int
    steps: List[str]
    completed: bool

class StepUpdate(BaseModel):
    step: str

class BasicInfoStep(BaseModel):
    first_name: str = ""
    last_name: str = ""
    bio: Optional[str] = None
    education: Optional[str] = None

class GitHubStep(BaseModel):
    github_username: str = ""
    projects: List[GitHubProject] = Field([], max_length=5)

class LinkedInStep(BaseModel):
    linkedin_url: Optional[str] = None

class SkillsStep(BaseModel):
    skills: List[str] = []

class CompanyInfoStep(BaseModel):
    company_name: str = ""
    company_description: Optional[str] = None
    industry: Optional[str] = None
    company_size: Optional[str] = None

class CompanyDetailsStep(BaseModel):
    company_location: Optional[str] = None
    company_culture: Optional[str] = None
    company_benefits: List[str] = []
    company_values: List[str] = []
    website_url: Optional[str] = None

class ContactInfoStep(BaseModel):
    contact_email: str = ""
    contact_phone: Optional[str] = None
    social_links: SocialLinks = SocialLinks()

class OnboardingStepResponse(BaseModel):
    onboarding: OnboardingStateResponse
    url: Optional[str] = None

class UploadResponse(BaseModel):
    url: str


# ============================================================
# JOB SCHEMAS
# ============================================================

class JobCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    company: Optional[str] = None
    location: str
    description: str
    requirements: List[str] = []
    responsibilities: List[str] = []
    skills_required: List[str] = []
    salary_range: Optional[str] = None
    job_type: str = "Full-time"
    experience_level: Optional[str] = None
    education_level: Optional[str] = None
    status: JobStatus = JobStatus.active
    expires_at: Optional[datetime] = None

class JobUpdate(BaseModel):
    title: Optional[str] = None
    company: Optional[str] = None
    location: Optional[str] = None
    description: Optional[str] = None
    requirements: Optional[List[str]] = None
    responsibilities: Optional[List[str]] = None
    skills_required: Optional[List[str]] = None
    salary_range: Optional[str] = None
    job_type: Optional[str] = None
    experience_level: Optional[str] = None
    education_level: Optional[str] = None
    status: Optional[JobStatus] = None
    expires_at: Optional[datetime] = None

class JobResponse(BaseModel):
    id: str
    employer_id: Optional[str] = None
    title: str
    company: str
    location: str
    description: str
    requirements: List[str] = []
    responsibilities: List[str] = []
    skills_required: List[str] = []
    salary_range: Optional[str] = None
    job_type: str
    experience_level: Optional[str] = None
    education_level: Optional[str] = None
    status: str
    posted_at: datetime
    expires_at: Optional[datetime] = None
    match_score: Optional[int] = None

class JobListResponse(BaseModel):
    jobs: List[JobResponse]
    total: int
    page: int
    page_size: int


# ============================================================
# APPLICATION SCHEMAS
# ============================================================

class ApplyRequest(BaseModel):
    resume_id: Optional[str] = None
    cover_letter: Optional[str] = None

class ApplicationUpdate(BaseModel):
    resume_id: Optional[str] = None
    cover_letter: Optional[str] = None

class ApplicationStatusUpdate(BaseModel):
    status: ApplicationStatus

class JobSummary(BaseModel):
    id: str
    title: str
    company: str
    location: str
    job_type: str
    status: str

class ApplicationResponse(BaseModel):
    id: str
    job_id: str
    student_id: str
    resume_id: Optional[str] = None
    cover_letter: Optional[str] = None
    status: ApplicationStatus
    applied_at: datetime
    updated_at: datetime
    job: Optional[JobSummary] = None

class ApplicationStatusCheck(BaseModel):
    applied: bool
    status: Optional[ApplicationStatus] = None


# ============================================================
# RESUME SCHEMAS
# ============================================================

class ResumeBasicInfo(BaseModel):
    name: str = ""
    email: str = ""
    phone: str = ""
    location: str = ""
    website: Optional[str] = None
    linkedin: Optional[str] = None
    github: Optional[str] = None
    summary: Optional[str] = None

class ResumeEducation(BaseModel):
    id: str = Field(default_factory=_new_entry_id)
    institution: str
    degree: str
    field: str
    start_date: str
    end_date: Optional[str] = None
    current: bool = False
    location: Optional[str] = None
    gpa: Optional[str] = None
    achievements: List[str] = []

    @model_validator(mode="after")
    def check_current(self):
        if self.current and self.end_date:
            raise ValueError("A current entry cannot have an end date")
        return self

class ResumeExperience(BaseModel):
    id: str = Field(default_factory=_new_entry_id)
    company: str
    position: str
    start_date: str
    end_date: Optional[str] = None
    current: bool = False
    location: Optional[str] = None
    description: str = ""
    achievements: List[str] = []

    @model_validator(mode="after")
    def check_current(self):
        if self.current and self.end_date:
            raise ValueError("A current entry cannot have an end date")
        return self

class ResumeSkills(BaseModel):
    technical: List[str] = []
    soft: List[str] = []
    languages: List[str] = []
    certifications: List[str] = []

    @field_validator("technical", "soft", "languages", "certifications")
    @classmethod
    def unique_entries(cls, v: List[str], info) -> List[str]:
        return _no_duplicates(v, info.field_name)

class ResumeProject(BaseModel):
    id: str = Field(default_factory=_new_entry_id)
    title: str
    description: str = ""
    technologies: List[str] = []
    link: Optional[str] = None
    github_link: Optional[str] = None

class ResumeSections(BaseModel):
    """The document stored in resumes.data."""
    basic_info: ResumeBasicInfo = ResumeBasicInfo()
    education: List[ResumeEducation] = []
    experience: List[ResumeExperience] = []
    skills: ResumeSkills = ResumeSkills()
    projects: List[ResumeProject] = []

    @model_validator(mode="after")
    def unique_entry_ids(self):
        for label, entries in (("education", self.education),
                               ("experience", self.experience),
                               ("projects", self.projects)):
            ids = [e.id for e in entries]
            if len(set(ids)) != len(ids):
                raise ValueError(f"Duplicate entry id in {label}")
        return self

class ResumeCreate(ResumeSections):
    title: str = "Untitled Resume"
    is_primary: bool = False

class ResumeUpdate(BaseModel):
    title: Optional[str] = None
    basic_info: Optional[ResumeBasicInfo] = None
    education: Optional[List[ResumeEducation]] = None
    experience: Optional[List[ResumeExperience]] = None
    skills: Optional[ResumeSkills] = None
    projects: Optional[List[ResumeProject]] = None
    is_primary: Optional[bool] = None
    version: Optional[int] = None

class ResumeResponse(ResumeSections):
    id: str
    user_id: str
    title: str
    is_primary: bool
    version: int
    created_at: datetime
    updated_at: datetime


# ============================================================
# PEER SQUAD SCHEMAS
# ============================================================

class SquadStatus(str, Enum):
    active = "active"
    closed = "closed"

class SquadRole(str, Enum):
    admin = "admin"
    member = "member"

class SquadCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    skill_focus: List[str] = []
    max_members: int = Field(5, ge=2, le=50)

class SquadUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    skill_focus: Optional[List[str]] = None
    max_members: Optional[int] = Field(None, ge=2, le=50)
    status: Optional[SquadStatus] = None

class MemberRoleUpdate(BaseModel):
    role: SquadRole

class SquadMemberStudent(BaseModel):
    first_name: str = ""
    last_name: str = ""
    profile_image_url: str = ""

class SquadMember(BaseModel):
    id: str
    peer_squad_id: str
    student_id: str
    role: SquadRole
    joined_at: datetime
    student: SquadMemberStudent

class SquadResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    skill_focus: List[str] = []
    created_by: str
    max_members: int
    status: SquadStatus
    created_at: datetime
    members: List[SquadMember] = []


# ============================================================
# GITHUB SCHEMAS
# Public API records, validated at the boundary.
# ============================================================

class GitHubUser(BaseModel):
    login: str
    avatar_url: str
    html_url: str
    name: Optional[str] = None
    bio: Optional[str] = None
    public_repos: int = 0
    followers: int = 0

class GitHubRepo(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    html_url: str
    stargazers_count: int = 0
    forks_count: int = 0
    language: Optional[str] = None
    created_at: datetime
    updated_at: datetime

class GitHubProfileResponse(BaseModel):
    profile: GitHubUser
    repositories: List[GitHubRepo]


# ============================================================
# AI ASSIST SCHEMAS
# ============================================================

class ResumeAssistRequest(BaseModel):
    prompt: str = ""
    resume: Optional[Dict[str, Any]] = None
    action: Optional[str] = None

class StoredResumeAssistRequest(BaseModel):
    prompt: str
    action: Optional[str] = None

class ResumeAssistResponse(BaseModel):
    result: str


# ============================================================
# GENERIC SCHEMAS
# ============================================================

class MessageResponse(BaseModel):
    message: str
    success: bool = True
