"""
Error taxonomy.

Every error the services raise is an HTTPException subclass, so FastAPI
turns it into a response without extra plumbing:

    raise NotFound("Resume not found")   ->  404 {"detail": "Resume not found"}

Routes never catch these except the AI proxy, which reshapes its own
failures into {"error", "details"}.
"""

from typing import Dict, Optional

from fastapi import HTTPException
from starlette import status


class AppError(HTTPException):
    """Base class. Subclasses only set `status_code`."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, detail: str, headers: Optional[Dict[str, str]] = None):
        super().__init__(status_code=type(self).status_code, detail=detail, headers=headers)


# ============================================================
# 4xx - caller problems
# ============================================================

class ValidationError(AppError):
    """Required field missing, malformed URL, unknown step name, ..."""
    status_code = status.HTTP_400_BAD_REQUEST


class DuplicateEntry(ValidationError):
    """Value already present in a no-duplicates list."""


class Unauthenticated(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, detail: str = "Not authenticated"):
        super().__init__(detail, headers={"WWW-Authenticate": "Bearer"})


class Forbidden(AppError):
    status_code = status.HTTP_403_FORBIDDEN


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND


class Conflict(AppError):
    status_code = status.HTTP_409_CONFLICT


class VersionConflict(Conflict):
    """Optimistic-concurrency check failed: the row changed since it was read."""


class InvalidStatusTransition(Conflict):
    pass


class TooLarge(AppError):
    status_code = status.HTTP_413_CONTENT_TOO_LARGE


class UnsupportedType(AppError):
    status_code = status.HTTP_415_UNSUPPORTED_MEDIA_TYPE


# ============================================================
# 5xx - backend / third-party problems
# ============================================================

class UpstreamError(AppError):
    status_code = status.HTTP_502_BAD_GATEWAY


class StorageError(AppError):
    status_code = status.HTTP_502_BAD_GATEWAY


class MissingCredential(AppError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class GenerationFailed(AppError):
    """Upstream answered but produced no candidates."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
