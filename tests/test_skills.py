import pytest

from app.core.errors import DuplicateEntry, NotFound, ValidationError, VersionConflict
from app.services.profile_service import add_skill, ensure_unique, get_student_profile_service, remove_skill


class TestSkillList:

    def test_add_returns_new_list(self):
        skills = ["Python"]
        result = add_skill(skills, " SQL ")
        assert result == ["Python", "SQL"]
        assert skills == ["Python"]

    def test_exact_duplicate_rejected(self):
        with pytest.raises(DuplicateEntry):
            add_skill(["Python"], "Python")

    def test_case_differs_is_not_duplicate(self):
        assert add_skill(["Python"], "python") == ["Python", "python"]

    def test_blank_rejected(self):
        with pytest.raises(ValidationError):
            add_skill([], "   ")

    def test_remove_missing(self):
        with pytest.raises(NotFound):
            remove_skill(["Python"], "Go")

    def test_ensure_unique_drops_blanks(self):
        assert ensure_unique([" Go", "", "Rust "]) == ["Go", "Rust"]


def test_skill_endpoints(client, student):
    resp = client.post("/api/students/skills", json={"skill": "Python"}, headers=student)
    assert resp.status_code == 201
    assert resp.json()["skills"] == ["Python"]

    resp = client.post("/api/students/skills", json={"skill": "Python"}, headers=student)
    assert resp.status_code == 400

    client.post("/api/students/skills", json={"skill": "SQL"}, headers=student)
    resp = client.delete("/api/students/skills/Python", headers=student)
    assert resp.json()["skills"] == ["SQL"]
    assert client.get("/api/students/skills", headers=student).json()["skills"] == ["SQL"]

    assert client.delete("/api/students/skills/Python", headers=student).status_code == 404


def test_stale_profile_version_conflicts(client, student):
    profile = client.get("/api/students/profile", headers=student).json()
    version = profile["version"]

    resp = client.put("/api/students/profile", json={"bio": "First", "version": version}, headers=student)
    assert resp.status_code == 200
    assert resp.json()["version"] == version + 1

    resp = client.put("/api/students/profile", json={"bio": "Second", "version": version}, headers=student)
    assert resp.status_code == 409
    assert client.get("/api/students/profile", headers=student).json()["bio"] == "First"


def test_update_without_version_always_applies(client, student):
    client.put("/api/students/profile", json={"bio": "One"}, headers=student)
    resp = client.put("/api/students/profile", json={"bio": "Two"}, headers=student)
    assert resp.json()["bio"] == "Two"


def test_service_version_conflict(client, student):
    user_id = client.get("/api/auth/me", headers=student).json()["id"]
    service = get_student_profile_service()
    profile = service.get_or_create(user_id)
    service.update(user_id, {"first_name": "Ada"})
    with pytest.raises(VersionConflict):
        service.update(user_id, {"first_name": "Grace"}, version=profile["version"])


def test_profile_rejects_duplicate_career_goals(client, student):
    resp = client.put("/api/students/profile", json={"career_goals": ["Lead", "Lead"]}, headers=student)
    assert resp.status_code == 400


def test_employer_cannot_read_student_profile(client, employer):
    assert client.get("/api/students/profile", headers=employer).status_code == 403
