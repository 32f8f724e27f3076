"""
Shared fixtures.

The app runs against a throwaway SQLite file; MongoDB is replaced by an
in-memory bucket store and outbound HTTP by httpx.MockTransport.
"""

import os
import tempfile
import uuid

# Must be set before anything imports app.core.config
_TMP_DIR = tempfile.mkdtemp(prefix="careerhub-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP_DIR, 'test.db')}"
os.environ["JWT_SECRET_KEY"] = "test-secret-key"
os.environ["DEBUG"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["GEMINI_API_KEY"] = ""
os.environ["PUBLIC_BASE_URL"] = "http://testserver"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import text

from app.core.errors import NotFound
from app.db.postgres import get_db_session
from app.db.schema import ALL_TABLES, init_schema
from app.main import app
from app.services.storage_service import get_storage

init_schema()

PASSWORD = "password123"


class MemoryStorage:
    """Bucket store with the same put/get surface as GridFSStorage."""

    def __init__(self):
        self.objects = {}

    def put(self, bucket, key, data, content_type):
        self.objects[(bucket, key)] = (data, content_type)

    def get(self, bucket, key):
        if (bucket, key) not in self.objects:
            raise NotFound("File not found")
        return self.objects[(bucket, key)]


@pytest.fixture(autouse=True)
def clean_db():
    yield
    with get_db_session() as db:
        for table in ALL_TABLES:
            db.execute(text(f"DELETE FROM {table}"))


@pytest.fixture
def storage():
    store = MemoryStorage()
    app.dependency_overrides[get_storage] = lambda: store
    yield store
    app.dependency_overrides.pop(get_storage, None)


@pytest.fixture
def client(storage):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def signup(client):
    """Register + login; returns auth headers."""
    def _signup(role: str = "student", email: str = None) -> dict:
        email = email or f"{role}-{uuid.uuid4().hex[:8]}@example.com"
        resp = client.post("/api/auth/register", json={"email": email, "password": PASSWORD, "role": role})
        assert resp.status_code == 201, resp.text
        resp = client.post("/api/auth/login", json={"email": email, "password": PASSWORD})
        assert resp.status_code == 200, resp.text
        return {"Authorization": f"Bearer {resp.json()['access_token']}"}
    return _signup


@pytest.fixture
def student(signup):
    return signup("student")


@pytest.fixture
def employer(signup):
    return signup("employer")


@pytest.fixture
def make_job(client, employer):
    def _make_job(**overrides) -> dict:
        payload = {
            "title": "Backend Engineer",
            "company": "Acme",
            "location": "Remote",
            "description": "Build APIs",
            "skills_required": ["Python", "SQL"],
            "job_type": "Full-time",
        }
        payload.update(overrides)
        resp = client.post("/api/jobs", json=payload, headers=employer)
        assert resp.status_code == 201, resp.text
        return resp.json()
    return _make_job
