import json
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, List, Optional

import structlog
from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker, Session

from app.core.config import get_settings

settings = get_settings()
logger = structlog.get_logger(__name__)


def _engine_kwargs(url: str) -> dict:
    # SQLite (tests, local runs) has no connection pool sizing
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    # pool_size=5: maintain 5 connections ready
    # max_overflow=10: allow 10 extra connections under load
    return {"pool_size": 5, "max_overflow": 10, "pool_pre_ping": True}


engine = create_engine(
    settings.sqlalchemy_url,
    echo=False,
    **_engine_kwargs(settings.sqlalchemy_url)
)

# Session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@contextmanager
def get_db_session():
    """
    Context manager for database sessions.
    Everything inside the block is one transaction.
    Usage:
        with get_db_session() as db:
            db.execute(text("SELECT * FROM profiles"))
    """
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def test_postgres_connection() -> bool:
    """
    Test if the SQL database is reachable.
    Returns True if connection successful, False otherwise.
    """
    try:
        with get_db_session() as db:
            result = db.execute(text("SELECT 1 as test"))
            row = result.fetchone()
            return row[0] == 1
    except Exception as e:
        logger.warning("database_unreachable", error=str(e))
        return False


def fetch_all(db: Session, sql: str, params: dict = None) -> List[dict]:
    """Run a query inside an open session and return rows as dicts."""
    result = db.execute(text(sql), params or {})
    return [dict(row) for row in result.mappings().all()]


def fetch_one(db: Session, sql: str, params: dict = None) -> Optional[dict]:
    """Run a query inside an open session and return the first row as a dict."""
    row = db.execute(text(sql), params or {}).mappings().first()
    return dict(row) if row else None


# ============================================================
# COLUMN HELPERS
# Ids are UUID strings, timestamps are UTC, and list/document
# columns are stored as JSON text so the same SQL runs on
# PostgreSQL and SQLite.
# ============================================================

def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


def to_json(value: Any) -> str:
    return json.dumps(value)


def from_json(value: Any, default: Any = None) -> Any:
    if value is None or value == "":
        return default
    if isinstance(value, (list, dict)):
        return value
    return json.loads(value)
