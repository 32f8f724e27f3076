"""
Resume Routes

GET /resumes - My resumes, newest first
POST /resumes - Create resume
GET /resumes/{id} - Get resume
PUT /resumes/{id} - Update resume (optional `version` check)
DELETE /resumes/{id} - Delete resume
POST /resumes/{id}/primary - Make this the primary resume
POST /resumes/{id}/assist - Ask the AI assistant about this resume
"""

from fastapi import APIRouter, Depends
from typing import List

from app.api.routes.ai_routes import assist_error_response
from app.core.auth import get_current_student
from app.core.errors import AppError
from app.services.gemini_client import GeminiClient, get_gemini_client
from app.services.resume_service import build_resume_prompt, get_resume_service, SECTIONS
from app.schemas.schemas import (
    ResumeCreate, ResumeUpdate, ResumeResponse, StoredResumeAssistRequest,
    ResumeAssistResponse, MessageResponse
)

router = APIRouter(prefix="/resumes", tags=["Resumes"])


@router.get("", response_model=List[ResumeResponse])
async def list_resumes(student: dict = Depends(get_current_student)):
    return get_resume_service().list_for_user(student["id"])


@router.post("", response_model=ResumeResponse, status_code=201)
async def create_resume(resume: ResumeCreate, student: dict = Depends(get_current_student)):
    """Create a resume. `is_primary: true` clears the flag on the others."""
    sections = resume.model_dump(include=set(SECTIONS))
    return get_resume_service().create(
        student["id"], resume.title, sections, is_primary=resume.is_primary
    )


@router.get("/{resume_id}", response_model=ResumeResponse)
async def get_resume(resume_id: str, student: dict = Depends(get_current_student)):
    return get_resume_service().get(student["id"], resume_id)


@router.put("/{resume_id}", response_model=ResumeResponse)
async def update_resume(resume_id: str, update: ResumeUpdate, student: dict = Depends(get_current_student)):
    """
    Replace the sent sections. Send the `version` you loaded to get a 409
    instead of overwriting a newer save.
    """
    # Only top-level keys are filtered; nested entries keep their generated ids
    fields = {k: v for k, v in update.model_dump().items() if k in update.model_fields_set}
    version = fields.pop("version", None)
    return get_resume_service().update(student["id"], resume_id, fields, version=version)


@router.delete("/{resume_id}", response_model=MessageResponse)
async def delete_resume(resume_id: str, student: dict = Depends(get_current_student)):
    get_resume_service().delete(student["id"], resume_id)
    return MessageResponse(message="Resume deleted")


@router.post("/{resume_id}/primary", response_model=ResumeResponse)
async def set_primary_resume(resume_id: str, student: dict = Depends(get_current_student)):
    """Exactly this resume is primary afterwards."""
    return get_resume_service().set_primary(student["id"], resume_id)


@router.post("/{resume_id}/assist", response_model=ResumeAssistResponse)
async def assist_with_resume(
    resume_id: str,
    request: StoredResumeAssistRequest,
    student: dict = Depends(get_current_student),
    gemini: GeminiClient = Depends(get_gemini_client)
):
    """Send the stored resume, as readable text, along with the prompt."""
    resume = get_resume_service().get(student["id"], resume_id)
    document = {"title": resume["title"], **{s: resume[s] for s in SECTIONS}}
    prompt = build_resume_prompt(document, request.prompt)
    try:
        text = await gemini.assist(prompt, action=request.action, resume=document)
    except AppError as e:
        return assist_error_response(e)
    return ResumeAssistResponse(result=text)
