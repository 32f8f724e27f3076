"""
API Routes - Combines all route modules into single router.
"""

from fastapi import APIRouter

from app.api.routes.auth_routes import router as auth_router
from app.api.routes.student_routes import router as student_router
from app.api.routes.employer_routes import router as employer_router
from app.api.routes.job_routes import router as job_router
from app.api.routes.application_routes import router as application_router
from app.api.routes.resume_routes import router as resume_router
from app.api.routes.onboarding_routes import router as onboarding_router
from app.api.routes.storage_routes import router as storage_router
from app.api.routes.github_routes import router as github_router
from app.api.routes.ai_routes import router as ai_router
from app.api.routes.squad_routes import router as squad_router

# Main API router
api_router = APIRouter()

# Include all sub-routers
api_router.include_router(auth_router)
api_router.include_router(student_router)
api_router.include_router(employer_router)
api_router.include_router(job_router)
api_router.include_router(application_router)
api_router.include_router(resume_router)
api_router.include_router(onboarding_router)
api_router.include_router(storage_router)
api_router.include_router(github_router)
api_router.include_router(ai_router)
api_router.include_router(squad_router)
