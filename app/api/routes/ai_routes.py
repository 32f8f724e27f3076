"""
AI Assist Routes

POST /ai/resume-assist - Proxy a prompt to the Gemini resume assistant

Success:  {"result": "..."}
Failure:  500 {"error": "...", "details": "..."}
"""

import structlog
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from app.core.auth import get_current_user
from app.core.errors import AppError, GenerationFailed, MissingCredential
from app.services.gemini_client import GeminiClient, get_gemini_client
from app.schemas.schemas import ResumeAssistRequest, ResumeAssistResponse

router = APIRouter(prefix="/ai", tags=["AI Assistant"])
logger = structlog.get_logger(__name__)


def assist_error_response(exc: AppError) -> JSONResponse:
    """Shape an assistant failure as {error, details} with status 500."""
    if isinstance(exc, MissingCredential):
        body = {"error": exc.detail, "details": None}
    elif isinstance(exc, GenerationFailed):
        body = {"error": "Failed to generate content", "details": exc.detail}
    else:
        body = {"error": "Internal server error", "details": exc.detail}
    logger.warning("resume_assist_failed", error=body["error"], details=body["details"])
    return JSONResponse(status_code=500, content=body)


@router.post("/resume-assist", response_model=ResumeAssistResponse)
async def resume_assist(
    request: ResumeAssistRequest,
    user: dict = Depends(get_current_user),
    gemini: GeminiClient = Depends(get_gemini_client)
):
    """
    Generate resume text.

    action: improve | generate | analyze (uses `resume`) | anything else
    sends the prompt unchanged.
    """
    try:
        text = await gemini.assist(request.prompt, action=request.action, resume=request.resume)
    except AppError as e:
        return assist_error_response(e)
    return ResumeAssistResponse(result=text)
