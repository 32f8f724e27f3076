"""
MongoDB Connection Utility

MongoDB stores the uploaded files:
- avatars         student profile pictures
- company_logos   employer logos
- resumes         resume PDFs

Each is a GridFS bucket, so files of any size are chunked and streamed
back without loading a whole collection document.
"""
import structlog
from pymongo import MongoClient
from pymongo.database import Database
from app.core.config import get_settings

settings = get_settings()
logger = structlog.get_logger(__name__)

# Global client (connection pooling handled internally by pymongo)
_client: MongoClient = None
_db: Database = None


def get_mongo_client() -> MongoClient:
    """Get or create MongoDB client (singleton pattern)"""
    global _client
    if _client is None:
        _client = MongoClient(
            settings.mongodb_uri,
            serverSelectionTimeoutMS=settings.mongodb_timeout_ms
        )
    return _client


def get_mongo_db() -> Database:
    """Get the file storage database"""
    global _db
    if _db is None:
        client = get_mongo_client()
        _db = client[settings.mongodb_db]
    return _db


def test_mongo_connection() -> bool:
    """
    Test if MongoDB is reachable.
    Returns True if connection successful, False otherwise.
    """
    try:
        client = get_mongo_client()
        # ping command checks connection
        client.admin.command('ping')
        return True
    except Exception as e:
        logger.warning("mongodb_unreachable", error=str(e))
        return False


# Bucket name constants (avoid typos)
BUCKETS = {
    "avatars": "avatars",
    "company_logos": "company_logos",
    "resumes": "resumes"
}
