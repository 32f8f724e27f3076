"""
File Upload Utility - validate and store uploaded files.

Bucket rules:
- avatars        JPEG / PNG / WebP, max 5MB
- company_logos  JPEG / PNG / WebP / SVG, max 5MB
- resumes        PDF, max 10MB

Type is checked before size, and both before anything is written, so a
rejected file never reaches storage. Each stored file gets a fresh random
key (uuid + original extension); there is no retry and no cleanup of
partial uploads.
"""

import uuid
from dataclasses import dataclass, field
from typing import Dict, FrozenSet

import structlog
from fastapi import UploadFile

from app.core.config import get_settings
from app.core.errors import NotFound, TooLarge, UnsupportedType, ValidationError

settings = get_settings()
logger = structlog.get_logger(__name__)

IMAGE_TYPES = frozenset({"image/jpeg", "image/png", "image/webp"})


@dataclass(frozen=True)
class UploadOptions:
    bucket: str
    allowed_types: FrozenSet[str] = field(default_factory=frozenset)
    max_size_mb: int = 5

    @property
    def max_size_bytes(self) -> int:
        return self.max_size_mb * 1024 * 1024


BUCKET_RULES: Dict[str, UploadOptions] = {
    "avatars": UploadOptions("avatars", IMAGE_TYPES, 5),
    "company_logos": UploadOptions("company_logos", IMAGE_TYPES | {"image/svg+xml"}, 5),
    "resumes": UploadOptions("resumes", frozenset({"application/pdf"}), 10),
}


def get_upload_options(bucket: str) -> UploadOptions:
    if bucket not in BUCKET_RULES:
        raise NotFound(f"Unknown storage bucket: {bucket}")
    return BUCKET_RULES[bucket]


def get_file_extension(filename: str) -> str:
    """Get lowercase file extension (without the dot)."""
    if not filename or '.' not in filename:
        return ''
    return filename.rsplit('.', 1)[1].lower()


def generate_key(filename: str) -> str:
    ext = get_file_extension(filename)
    key = uuid.uuid4().hex
    return f"{key}.{ext}" if ext else key


def public_url(bucket: str, key: str) -> str:
    return f"{settings.public_base_url.rstrip('/')}/api/storage/{bucket}/{key}"


def validate_upload(content_type: str, size: int, options: UploadOptions) -> None:
    """
    Check declared type and size against the bucket rules.

    Raises:
        UnsupportedType: content type not in options.allowed_types
        TooLarge: size over options.max_size_mb
    """
    if content_type not in options.allowed_types:
        allowed = ", ".join(sorted(options.allowed_types))
        raise UnsupportedType(f"Unsupported file type '{content_type}'. Allowed: {allowed}")
    if size > options.max_size_bytes:
        raise TooLarge(f"File too large. Maximum size: {options.max_size_mb}MB")


async def upload_file(file: UploadFile, options: UploadOptions, storage) -> str:
    """
    Validate and store an uploaded file.

    Args:
        file: FastAPI UploadFile
        options: bucket, allowed types and size limit
        storage: object with put(bucket, key, data, content_type)

    Returns:
        Public URL of the stored file
    """
    if not file.filename:
        raise ValidationError("No filename provided")

    content_type = file.content_type or ""
    # Reject on declared type before reading the body
    if content_type not in options.allowed_types:
        validate_upload(content_type, 0, options)

    content = await file.read()
    validate_upload(content_type, len(content), options)

    key = generate_key(file.filename)
    storage.put(options.bucket, key, content, content_type)
    logger.info("file_uploaded", bucket=options.bucket, key=key, size=len(content))
    return public_url(options.bucket, key)
