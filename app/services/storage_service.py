"""
Storage Service - object storage for uploaded files.

Each storage bucket (avatars, company_logos, resumes) is a GridFS bucket
in the MongoDB file database. Objects are addressed by (bucket, key) and
carry their content type in the file metadata.
"""

from typing import Tuple

import gridfs
import structlog
from gridfs.errors import NoFile
from pymongo.errors import PyMongoError

from app.core.errors import NotFound, StorageError
from app.db.mongodb import BUCKETS, get_mongo_db

logger = structlog.get_logger(__name__)


class GridFSStorage:
    """
    Put/get objects in GridFS buckets.

    Usage:
        storage = get_storage()
        storage.put("avatars", "3f2a...png", data, "image/png")
        data, content_type = storage.get("avatars", "3f2a...png")
    """

    def _bucket(self, bucket: str) -> gridfs.GridFSBucket:
        if bucket not in BUCKETS:
            raise NotFound(f"Unknown storage bucket: {bucket}")
        return gridfs.GridFSBucket(get_mongo_db(), bucket_name=BUCKETS[bucket])

    def put(self, bucket: str, key: str, data: bytes, content_type: str) -> None:
        """Write one object. Raises StorageError when MongoDB fails."""
        fs = self._bucket(bucket)
        try:
            fs.upload_from_stream(key, data, metadata={"content_type": content_type})
        except PyMongoError as e:
            logger.error("storage_write_failed", bucket=bucket, key=key, error=str(e))
            raise StorageError(f"Failed to store file: {e}")

    def get(self, bucket: str, key: str) -> Tuple[bytes, str]:
        """Read one object back as (bytes, content_type)."""
        fs = self._bucket(bucket)
        try:
            stream = fs.open_download_stream_by_name(key)
            data = stream.read()
        except NoFile:
            raise NotFound("File not found")
        except PyMongoError as e:
            logger.error("storage_read_failed", bucket=bucket, key=key, error=str(e))
            raise StorageError(f"Failed to read file: {e}")
        metadata = stream.metadata or {}
        return data, metadata.get("content_type", "application/octet-stream")


# Singleton
_storage = None


def get_storage() -> GridFSStorage:
    """FastAPI dependency - the configured storage backend."""
    global _storage
    if _storage is None:
        _storage = GridFSStorage()
    return _storage
