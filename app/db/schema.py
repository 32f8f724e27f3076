"""
SQL schema - created idempotently at startup.

Tables:
- profiles            one row per account (role, account tier, onboarding flag)
- student_profiles    student details, skills, GitHub/LinkedIn, XP
- employer_profiles   company details
- jobs                postings (owned by an employer)
- job_applications    one per (job, student)
- resumes             structured resume documents (sections as JSON)
- achievements        append-only milestone records
- onboarding_state    current wizard step per user and track
- peer_squads         student study groups (skill focus, member cap)
- peer_squad_members  squad membership with an admin/member role

The DDL sticks to types and syntax that PostgreSQL and SQLite both accept.
List and document columns are JSON text (see app.db.postgres.to_json).
"""

from typing import List

import structlog
from sqlalchemy import text

from app.db.postgres import get_db_session

logger = structlog.get_logger(__name__)

TABLES: List[str] = [
    """
    CREATE TABLE IF NOT EXISTS profiles (
        id TEXT PRIMARY KEY,
        email TEXT NOT NULL UNIQUE,
        password_hash TEXT NOT NULL,
        role TEXT NOT NULL,
        account_type TEXT NOT NULL DEFAULT 'free',
        onboarding_completed BOOLEAN NOT NULL DEFAULT FALSE,
        created_at TIMESTAMP WITH TIME ZONE NOT NULL,
        updated_at TIMESTAMP WITH TIME ZONE NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS student_profiles (
        id TEXT PRIMARY KEY REFERENCES profiles(id) ON DELETE CASCADE,
        first_name TEXT,
        last_name TEXT,
        bio TEXT,
        education TEXT,
        skills TEXT NOT NULL DEFAULT '[]',
        career_goals TEXT NOT NULL DEFAULT '[]',
        github_username TEXT,
        github_projects TEXT NOT NULL DEFAULT '[]',
        linkedin_url TEXT,
        profile_image_url TEXT,
        resume_url TEXT,
        level INTEGER NOT NULL DEFAULT 1,
        xp_points INTEGER NOT NULL DEFAULT 0,
        version INTEGER NOT NULL DEFAULT 1,
        updated_at TIMESTAMP WITH TIME ZONE NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS employer_profiles (
        id TEXT PRIMARY KEY REFERENCES profiles(id) ON DELETE CASCADE,
        company_name TEXT NOT NULL DEFAULT '',
        company_description TEXT,
        industry TEXT,
        company_size TEXT,
        logo_url TEXT,
        website_url TEXT,
        company_location TEXT,
        company_culture TEXT,
        company_benefits TEXT NOT NULL DEFAULT '[]',
        company_values TEXT NOT NULL DEFAULT '[]',
        contact_email TEXT,
        contact_phone TEXT,
        social_links TEXT NOT NULL DEFAULT '{}',
        verified BOOLEAN NOT NULL DEFAULT FALSE,
        updated_at TIMESTAMP WITH TIME ZONE NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS jobs (
        id TEXT PRIMARY KEY,
        employer_id TEXT REFERENCES profiles(id) ON DELETE CASCADE,
        title TEXT NOT NULL,
        company TEXT NOT NULL,
        location TEXT NOT NULL,
        description TEXT NOT NULL,
        requirements TEXT NOT NULL DEFAULT '[]',
        responsibilities TEXT NOT NULL DEFAULT '[]',
        skills_required TEXT NOT NULL DEFAULT '[]',
        salary_range TEXT,
        job_type TEXT NOT NULL,
        experience_level TEXT,
        education_level TEXT,
        status TEXT NOT NULL DEFAULT 'active',
        posted_at TIMESTAMP WITH TIME ZONE NOT NULL,
        expires_at TIMESTAMP WITH TIME ZONE
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS resumes (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL REFERENCES profiles(id) ON DELETE CASCADE,
        name TEXT NOT NULL,
        data TEXT NOT NULL,
        is_primary BOOLEAN NOT NULL DEFAULT FALSE,
        version INTEGER NOT NULL DEFAULT 1,
        created_at TIMESTAMP WITH TIME ZONE NOT NULL,
        updated_at TIMESTAMP WITH TIME ZONE NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS job_applications (
        id TEXT PRIMARY KEY,
        job_id TEXT NOT NULL REFERENCES jobs(id) ON DELETE CASCADE,
        student_id TEXT NOT NULL REFERENCES profiles(id) ON DELETE CASCADE,
        resume_id TEXT REFERENCES resumes(id) ON DELETE SET NULL,
        cover_letter TEXT,
        status TEXT NOT NULL DEFAULT 'applied',
        applied_at TIMESTAMP WITH TIME ZONE NOT NULL,
        updated_at TIMESTAMP WITH TIME ZONE NOT NULL,
        UNIQUE (job_id, student_id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS achievements (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL REFERENCES profiles(id) ON DELETE CASCADE,
        name TEXT NOT NULL,
        type TEXT NOT NULL,
        description TEXT,
        badge_image_url TEXT,
        xp_awarded INTEGER NOT NULL DEFAULT 0,
        earned_at TIMESTAMP WITH TIME ZONE NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS peer_squads (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        description TEXT,
        skill_focus TEXT NOT NULL DEFAULT '[]',
        created_by TEXT NOT NULL REFERENCES profiles(id) ON DELETE CASCADE,
        max_members INTEGER NOT NULL DEFAULT 5,
        status TEXT NOT NULL DEFAULT 'active',
        created_at TIMESTAMP WITH TIME ZONE NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS peer_squad_members (
        id TEXT PRIMARY KEY,
        peer_squad_id TEXT NOT NULL REFERENCES peer_squads(id) ON DELETE CASCADE,
        student_id TEXT NOT NULL REFERENCES profiles(id) ON DELETE CASCADE,
        role TEXT NOT NULL DEFAULT 'member',
        joined_at TIMESTAMP WITH TIME ZONE NOT NULL,
        UNIQUE (peer_squad_id, student_id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS onboarding_state (
        user_id TEXT NOT NULL REFERENCES profiles(id) ON DELETE CASCADE,
        track TEXT NOT NULL,
        step TEXT NOT NULL,
        updated_at TIMESTAMP WITH TIME ZONE NOT NULL,
        PRIMARY KEY (user_id, track)
    )
    """,
]

INDEXES: List[str] = [
    # At most one primary resume per user
    "CREATE UNIQUE INDEX IF NOT EXISTS uq_resumes_one_primary ON resumes (user_id) WHERE is_primary",
    "CREATE INDEX IF NOT EXISTS ix_resumes_user ON resumes (user_id)",
    "CREATE INDEX IF NOT EXISTS ix_jobs_status_posted ON jobs (status, posted_at)",
    "CREATE INDEX IF NOT EXISTS ix_applications_student ON job_applications (student_id)",
    "CREATE INDEX IF NOT EXISTS ix_achievements_user ON achievements (user_id)",
    "CREATE INDEX IF NOT EXISTS ix_squad_members_student ON peer_squad_members (student_id)",
]

# Child tables first so deletes never trip a foreign key
ALL_TABLES: List[str] = [
    "onboarding_state",
    "peer_squad_members",
    "peer_squads",
    "achievements",
    "job_applications",
    "resumes",
    "jobs",
    "employer_profiles",
    "student_profiles",
    "profiles",
]


def init_schema() -> None:
    """Create tables and indexes if they do not exist."""
    with get_db_session() as db:
        for ddl in TABLES + INDEXES:
            db.execute(text(ddl))
    logger.info("schema_ready", tables=len(TABLES), indexes=len(INDEXES))
