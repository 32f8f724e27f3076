import pytest
from starlette import status

from app.core.errors import StorageError, TooLarge, UnsupportedType
from app.main import app
from app.services.storage_service import get_storage
from app.utils.file_upload import BUCKET_RULES, generate_key, get_file_extension, validate_upload

PNG = b"\x89PNG\r\n\x1a\n" + b"0" * 64


class TestValidation:

    def test_type_checked_before_size(self):
        with pytest.raises(UnsupportedType):
            validate_upload("application/pdf", 50 * 1024 * 1024, BUCKET_RULES["avatars"])

    def test_size_limit(self):
        with pytest.raises(TooLarge):
            validate_upload("image/png", 5 * 1024 * 1024 + 1, BUCKET_RULES["avatars"])

    def test_limit_is_inclusive(self):
        validate_upload("image/png", 5 * 1024 * 1024, BUCKET_RULES["avatars"])

    def test_svg_only_for_logos(self):
        validate_upload("image/svg+xml", 10, BUCKET_RULES["company_logos"])
        with pytest.raises(UnsupportedType):
            validate_upload("image/svg+xml", 10, BUCKET_RULES["avatars"])

    def test_resume_limit_is_10mb(self):
        validate_upload("application/pdf", 10 * 1024 * 1024, BUCKET_RULES["resumes"])
        with pytest.raises(TooLarge):
            validate_upload("application/pdf", 10 * 1024 * 1024 + 1, BUCKET_RULES["resumes"])


def test_keys_keep_extension_and_are_unique():
    assert get_file_extension("Me.JPG") == "jpg"
    assert get_file_extension("noext") == ""
    first, second = generate_key("a.png"), generate_key("a.png")
    assert first.endswith(".png")
    assert first != second


def test_upload_and_read_back(client, student, storage):
    resp = client.post(
        "/api/storage/avatars",
        files={"file": ("me.png", PNG, "image/png")},
        headers=student
    )
    assert resp.status_code == 201
    url = resp.json()["url"]
    assert url.startswith("http://testserver/api/storage/avatars/")
    assert url.endswith(".png")

    # public read, no token
    path = url.replace("http://testserver", "")
    got = client.get(path)
    assert got.status_code == 200
    assert got.content == PNG
    assert got.headers["content-type"] == "image/png"


def test_unsupported_type_never_stored(client, student, storage):
    resp = client.post(
        "/api/storage/avatars",
        files={"file": ("doc.pdf", b"%PDF-1.4", "application/pdf")},
        headers=student
    )
    assert resp.status_code == 415
    assert storage.objects == {}


def test_too_large_never_stored(client, student, storage):
    big = b"0" * (5 * 1024 * 1024 + 1)
    resp = client.post(
        "/api/storage/avatars",
        files={"file": ("big.png", big, "image/png")},
        headers=student
    )
    assert resp.status_code == 413
    assert storage.objects == {}


def test_unknown_bucket(client, student):
    resp = client.post(
        "/api/storage/videos",
        files={"file": ("a.png", PNG, "image/png")},
        headers=student
    )
    assert resp.status_code == 404
    assert client.get("/api/storage/videos/a.png").status_code == 404


def test_missing_file_is_404(client):
    assert client.get("/api/storage/avatars/missing.png").status_code == 404


def test_upload_requires_auth(client):
    resp = client.post("/api/storage/avatars", files={"file": ("me.png", PNG, "image/png")})
    assert resp.status_code == 401


def test_profile_picture_step(client, student, storage):
    resp = client.post(
        "/api/onboarding/student/profile-picture",
        files={"file": ("me.webp", b"RIFF0000WEBP", "image/webp")},
        headers=student
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["onboarding"]["step"] == "github"
    assert client.get("/api/students/profile", headers=student).json()["profile_image_url"] == body["url"]
    assert len(storage.objects) == 1


def test_resume_upload_keeps_wizard_in_place(client, student, storage):
    client.put("/api/onboarding/step", json={"step": "resume"}, headers=student)
    resp = client.post(
        "/api/onboarding/student/resume",
        files={"file": ("cv.pdf", b"%PDF-1.4 test", "application/pdf")},
        headers=student
    )
    assert resp.status_code == 200
    assert resp.json()["onboarding"]["step"] == "resume"
    assert client.get("/api/students/profile", headers=student).json()["resume_url"] == resp.json()["url"]


def test_company_logo_step(client, employer, storage):
    resp = client.post(
        "/api/onboarding/employer/company-logo",
        files={"file": ("logo.svg", b"<svg/>", "image/svg+xml")},
        headers=employer
    )
    assert resp.status_code == 200
    assert resp.json()["onboarding"]["step"] == "company-details"
    assert client.get("/api/employers/profile", headers=employer).json()["logo_url"] == resp.json()["url"]


class BrokenStorage:
    """Store whose backend is down."""

    def put(self, bucket, key, data, content_type):
        raise StorageError("Failed to store file: connection refused")

    def get(self, bucket, key):
        raise StorageError("Failed to read file: connection refused")


def test_too_large_status():
    assert TooLarge.status_code == status.HTTP_413_CONTENT_TOO_LARGE == 413


def test_failed_store_leaves_profile_untouched(client, student):
    app.dependency_overrides[get_storage] = lambda: BrokenStorage()
    resp = client.post(
        "/api/onboarding/student/profile-picture",
        files={"file": ("me.png", PNG, "image/png")},
        headers=student
    )
    assert resp.status_code == 502
    assert client.get("/api/students/profile", headers=student).json()["profile_image_url"] is None
    assert client.get("/api/onboarding", headers=student).json()["step"] == "basic-info"
