"""
CareerHub - Main Application

FastAPI backend with:
- PostgreSQL for profiles, jobs, applications, resumes, achievements
- MongoDB GridFS for uploaded files (avatars, logos, resume PDFs)
- Gemini for the resume writing assistant
- JWT authentication

Run: uvicorn app.main:app --reload
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.middleware.cors import CORSMiddleware

from app.api.routes import api_router
from app.core.config import get_settings
from app.core.errors import AppError
from app.core.logging import configure_logging
from app.db.schema import init_schema

settings = get_settings()
configure_logging(debug=settings.debug, log_level=settings.log_level)
logger = structlog.get_logger(__name__)

# Create FastAPI app
app = FastAPI(
    title="CareerHub",
    description="""
    Career platform backend for students and employers.

    ## Features
    - **Authentication**: JWT-based auth for students and employers
    - **Onboarding**: Step-by-step profile wizard with progress tracking
    - **Students**: Profile, skills, GitHub/LinkedIn, achievements
    - **Employers**: Company profile, job postings, applicant pipeline
    - **Jobs**: Search, filter, apply, skill-match recommendations
    - **Resumes**: Structured resume builder with a primary resume
    - **Peer Squads**: Small student study groups around a skill focus
    - **AI Assistant**: Gemini-powered resume feedback and writing

    ## Storage
    - PostgreSQL: Structured data
    - MongoDB GridFS: Uploaded files
    """,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

# CORS middleware (allow all origins, as the browser client is served elsewhere)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routes
app.include_router(api_router, prefix="/api")


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    """Log every domain error, then answer with the usual {"detail": ...} body."""
    log = logger.error if exc.status_code >= 500 else logger.info
    log("request_failed", method=request.method, path=request.url.path,
        status=exc.status_code, error=type(exc).__name__, detail=exc.detail)
    return await http_exception_handler(request, exc)


# Startup event
@app.on_event("startup")
async def startup_event():
    """Create SQL tables on startup. MongoDB is only touched on first upload."""
    init_schema()
    logger.info("startup_complete", app="CareerHub")


@app.get("/", tags=["Health"])
async def root():
    return {"status": "healthy", "app": "CareerHub"}


@app.get("/health", tags=["Health"])
async def health_check():
    """Detailed health check."""
    from app.db.postgres import test_postgres_connection
    from app.db.mongodb import test_mongo_connection

    return {
        "status": "healthy",
        "postgres": "connected" if test_postgres_connection() else "disconnected",
        "mongodb": "connected" if test_mongo_connection() else "disconnected"
    }
