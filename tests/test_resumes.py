from app.services.resume_service import build_resume_prompt, format_resume_for_ai

RESUME = {
    "title": "Backend",
    "basic_info": {"name": "Ada Lovelace", "email": "ada@example.com", "phone": "", "location": "London"},
    "education": [
        {"id": "e1", "institution": "UCL", "degree": "BSc", "field": "Mathematics", "start_date": "2019"}
    ],
    "experience": [
        {"id": "x1", "company": "Acme", "position": "Engineer", "start_date": "2022", "current": True,
         "description": "Built APIs"}
    ],
    "skills": {"technical": ["Python", "SQL"], "soft": ["Writing"]},
    "projects": [{"id": "p1", "title": "Engine", "description": "Analytical", "technologies": ["Python"]}],
}


def _ids(client, headers):
    return {r["title"]: r for r in client.get("/api/resumes", headers=headers).json()}


# ============================================================
# Formatting for the assistant
# ============================================================

def test_format_resume_for_ai_sections():
    text = format_resume_for_ai(RESUME)
    for header in ("# BASIC INFORMATION", "# EDUCATION", "# EXPERIENCE", "# SKILLS", "# PROJECTS"):
        assert header in text
    assert "Name: Ada Lovelace" in text
    assert "Phone: Not provided" in text
    assert "1. UCL - BSc in Mathematics" in text
    assert "1. Engineer at Acme" in text
    assert "Technical Skills: Python, SQL" in text
    assert "Languages" not in text


def test_format_skips_empty_sections():
    text = format_resume_for_ai({"basic_info": {"name": "Ada"}, "education": [], "projects": []})
    assert "# EDUCATION" not in text
    assert "# PROJECTS" not in text


def test_build_resume_prompt():
    prompt = build_resume_prompt({"basic_info": {"name": "Ada"}}, "Tighten the summary")
    assert prompt.startswith("Based on the following resume data:\n\n# BASIC INFORMATION")
    assert prompt.endswith("\n\nTighten the summary")


# ============================================================
# CRUD
# ============================================================

def test_create_and_read(client, student):
    resp = client.post("/api/resumes", json=RESUME, headers=student)
    assert resp.status_code == 201
    body = resp.json()
    assert body["title"] == "Backend"
    assert body["version"] == 1
    assert body["is_primary"] is False
    assert body["experience"][0]["current"] is True
    assert body["skills"]["languages"] == []

    got = client.get(f"/api/resumes/{body['id']}", headers=student).json()
    assert got["education"][0]["institution"] == "UCL"


def test_default_title(client, student):
    assert client.post("/api/resumes", json={}, headers=student).json()["title"] == "Untitled Resume"


def test_current_entry_with_end_date_rejected(client, student):
    bad = {"experience": [{"company": "Acme", "position": "Dev", "start_date": "2020",
                           "end_date": "2021", "current": True}]}
    assert client.post("/api/resumes", json=bad, headers=student).status_code == 422


def test_duplicate_skills_rejected(client, student):
    bad = {"skills": {"technical": ["Python", "Python"]}}
    assert client.post("/api/resumes", json=bad, headers=student).status_code == 422


def test_duplicate_entry_ids_rejected(client, student):
    project = {"id": "same", "title": "A"}
    bad = {"projects": [project, dict(project, title="B")]}
    assert client.post("/api/resumes", json=bad, headers=student).status_code == 422


def test_exactly_one_primary(client, student):
    first = client.post("/api/resumes", json={"title": "One", "is_primary": True}, headers=student).json()
    second = client.post("/api/resumes", json={"title": "Two", "is_primary": True}, headers=student).json()
    resumes = _ids(client, student)
    assert resumes["One"]["is_primary"] is False
    assert resumes["Two"]["is_primary"] is True

    resp = client.post(f"/api/resumes/{first['id']}/primary", headers=student)
    assert resp.status_code == 200
    assert resp.json()["is_primary"] is True
    resumes = _ids(client, student)
    assert [t for t, r in resumes.items() if r["is_primary"]] == ["One"]
    assert resumes["Two"]["id"] == second["id"]


def test_update_with_stale_version(client, student):
    resume = client.post("/api/resumes", json={"title": "Draft"}, headers=student).json()

    resp = client.put(
        f"/api/resumes/{resume['id']}",
        json={"title": "Final", "version": resume["version"]},
        headers=student
    )
    assert resp.status_code == 200
    assert resp.json()["title"] == "Final"
    assert resp.json()["version"] == 2

    resp = client.put(
        f"/api/resumes/{resume['id']}",
        json={"title": "Lost update", "version": resume["version"]},
        headers=student
    )
    assert resp.status_code == 409
    assert client.get(f"/api/resumes/{resume['id']}", headers=student).json()["title"] == "Final"


def test_update_replaces_only_sent_sections(client, student):
    resume = client.post("/api/resumes", json=RESUME, headers=student).json()
    resp = client.put(
        f"/api/resumes/{resume['id']}",
        json={"skills": {"technical": ["Go"]}},
        headers=student
    )
    body = resp.json()
    assert body["skills"]["technical"] == ["Go"]
    assert body["education"][0]["institution"] == "UCL"


def test_update_assigns_stable_entry_ids(client, student):
    resume = client.post("/api/resumes", json={"title": "Draft"}, headers=student).json()
    resp = client.put(
        f"/api/resumes/{resume['id']}",
        json={"experience": [{"company": "Acme", "position": "Dev", "start_date": "2020"}]},
        headers=student
    )
    assert resp.status_code == 200
    entry_id = resp.json()["experience"][0]["id"]
    assert entry_id

    first = client.get(f"/api/resumes/{resume['id']}", headers=student).json()
    second = client.get(f"/api/resumes/{resume['id']}", headers=student).json()
    assert first["experience"][0]["id"] == entry_id
    assert second["experience"][0]["id"] == entry_id
    assert first["experience"][0]["description"] == ""


def test_other_students_resume_is_not_found(client, signup, student):
    resume = client.post("/api/resumes", json={"title": "Mine"}, headers=student).json()
    other = signup("student")
    assert client.get(f"/api/resumes/{resume['id']}", headers=other).status_code == 404
    assert client.post(f"/api/resumes/{resume['id']}/primary", headers=other).status_code == 404
    assert client.delete(f"/api/resumes/{resume['id']}", headers=other).status_code == 404


def test_delete_detaches_applications(client, student, make_job):
    resume = client.post("/api/resumes", json={"title": "CV"}, headers=student).json()
    job = make_job()
    client.post(f"/api/jobs/{job['id']}/apply", json={"resume_id": resume["id"]}, headers=student)

    assert client.delete(f"/api/resumes/{resume['id']}", headers=student).status_code == 200
    applications = client.get("/api/applications", headers=student).json()
    assert applications[0]["resume_id"] is None
    assert client.get("/api/resumes", headers=student).json() == []
