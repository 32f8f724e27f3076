import pytest

from app.core.errors import InvalidStatusTransition
from app.services.application_service import can_transition, next_status


# ============================================================
# Status workflow
# ============================================================

@pytest.mark.parametrize("current,new", [
    ("applied", "in_review"),
    ("applied", "offer"),
    ("in_review", "interview"),
    ("interview", "offer"),
    ("interview", "withdrawn"),
    ("offer", "rejected"),
    ("applied", "rejected"),
    ("withdrawn", "withdrawn"),
])
def test_allowed_transitions(current, new):
    assert can_transition(current, new)


@pytest.mark.parametrize("current,new", [
    ("interview", "applied"),
    ("offer", "in_review"),
    ("rejected", "applied"),
    ("withdrawn", "in_review"),
    ("rejected", "withdrawn"),
    ("applied", "hired"),
])
def test_rejected_transitions(current, new):
    assert not can_transition(current, new)
    with pytest.raises(InvalidStatusTransition):
        next_status(current, new)


# ============================================================
# Applying
# ============================================================

def test_apply_and_check_status(client, student, make_job):
    job = make_job()
    resp = client.post(f"/api/jobs/{job['id']}/apply", json={"cover_letter": "Hi"}, headers=student)
    assert resp.status_code == 201
    body = resp.json()
    assert body["status"] == "applied"
    assert body["job"]["title"] == "Backend Engineer"
    assert body["resume_id"] is None

    status = client.get(f"/api/jobs/{job['id']}/application-status", headers=student).json()
    assert status == {"applied": True, "status": "applied"}


def test_not_applied_status(client, student, make_job):
    job = make_job()
    status = client.get(f"/api/jobs/{job['id']}/application-status", headers=student).json()
    assert status == {"applied": False, "status": None}


def test_duplicate_application_conflicts(client, student, make_job):
    job = make_job()
    client.post(f"/api/jobs/{job['id']}/apply", json={}, headers=student)
    resp = client.post(f"/api/jobs/{job['id']}/apply", json={}, headers=student)
    assert resp.status_code == 409


def test_cannot_apply_to_closed_job(client, student, make_job):
    job = make_job(status="closed")
    resp = client.post(f"/api/jobs/{job['id']}/apply", json={}, headers=student)
    assert resp.status_code == 400


def test_apply_to_missing_job(client, student):
    assert client.post("/api/jobs/nope/apply", json={}, headers=student).status_code == 404


def test_primary_resume_attached_by_default(client, student, make_job):
    resume = client.post("/api/resumes", json={"title": "Main", "is_primary": True}, headers=student).json()
    job = make_job()
    body = client.post(f"/api/jobs/{job['id']}/apply", json={}, headers=student).json()
    assert body["resume_id"] == resume["id"]


def test_employers_cannot_apply(client, employer, make_job):
    job = make_job()
    assert client.post(f"/api/jobs/{job['id']}/apply", json={}, headers=employer).status_code == 403


# ============================================================
# Student side
# ============================================================

def test_withdraw_is_idempotent(client, student, make_job):
    job = make_job()
    app_id = client.post(f"/api/jobs/{job['id']}/apply", json={}, headers=student).json()["id"]

    first = client.post(f"/api/applications/{app_id}/withdraw", headers=student)
    assert first.status_code == 200
    assert first.json()["status"] == "withdrawn"

    second = client.post(f"/api/applications/{app_id}/withdraw", headers=student)
    assert second.status_code == 200
    assert second.json()["status"] == "withdrawn"


def test_withdrawn_application_cannot_be_edited(client, student, make_job):
    job = make_job()
    app_id = client.post(f"/api/jobs/{job['id']}/apply", json={}, headers=student).json()["id"]
    client.post(f"/api/applications/{app_id}/withdraw", headers=student)
    resp = client.put(f"/api/applications/{app_id}", json={"cover_letter": "Changed"}, headers=student)
    assert resp.status_code == 409


def test_list_filtered_by_status(client, student, make_job):
    first = make_job(title="First")
    second = make_job(title="Second")
    app_id = client.post(f"/api/jobs/{first['id']}/apply", json={}, headers=student).json()["id"]
    client.post(f"/api/jobs/{second['id']}/apply", json={}, headers=student)
    client.post(f"/api/applications/{app_id}/withdraw", headers=student)

    everything = client.get("/api/applications", headers=student).json()
    assert [a["job"]["title"] for a in everything] == ["Second", "First"]
    withdrawn = client.get("/api/applications", params={"status": "withdrawn"}, headers=student).json()
    assert [a["id"] for a in withdrawn] == [app_id]


# ============================================================
# Employer side
# ============================================================

def test_employer_moves_application_forward(client, student, employer, make_job):
    job = make_job()
    app_id = client.post(f"/api/jobs/{job['id']}/apply", json={}, headers=student).json()["id"]

    received = client.get("/api/employers/applications", headers=employer).json()
    assert [a["id"] for a in received] == [app_id]

    resp = client.put(f"/api/employers/applications/{app_id}/status", json={"status": "interview"}, headers=employer)
    assert resp.status_code == 200
    assert resp.json()["status"] == "interview"

    resp = client.put(f"/api/employers/applications/{app_id}/status", json={"status": "in_review"}, headers=employer)
    assert resp.status_code == 409

    # the applicant can still withdraw from interview
    resp = client.post(f"/api/applications/{app_id}/withdraw", headers=student)
    assert resp.json()["status"] == "withdrawn"


def test_employer_cannot_withdraw(client, student, employer, make_job):
    job = make_job()
    app_id = client.post(f"/api/jobs/{job['id']}/apply", json={}, headers=student).json()["id"]
    resp = client.put(f"/api/employers/applications/{app_id}/status", json={"status": "withdrawn"}, headers=employer)
    assert resp.status_code == 403


def test_other_employer_sees_not_found(client, signup, student, make_job):
    job = make_job()
    app_id = client.post(f"/api/jobs/{job['id']}/apply", json={}, headers=student).json()["id"]
    other = signup("employer")
    resp = client.put(f"/api/employers/applications/{app_id}/status", json={"status": "offer"}, headers=other)
    assert resp.status_code == 404
    assert client.get("/api/employers/applications", headers=other).json() == []


def test_deleting_job_removes_applications(client, student, employer, make_job):
    job = make_job()
    client.post(f"/api/jobs/{job['id']}/apply", json={}, headers=student)
    assert client.delete(f"/api/jobs/{job['id']}", headers=employer).status_code == 200
    assert client.get("/api/applications", headers=student).json() == []
    assert client.get(f"/api/jobs/{job['id']}", headers=student).status_code == 404
