"""
Storage Routes

POST /storage/{bucket} - Upload a file (signed-in users)
GET /storage/{bucket}/{key} - Public read of a stored file
"""

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import Response

from app.core.auth import get_current_user
from app.services.storage_service import get_storage
from app.utils.file_upload import get_upload_options, upload_file
from app.schemas.schemas import UploadResponse

router = APIRouter(prefix="/storage", tags=["Storage"])


@router.post("/{bucket}", response_model=UploadResponse, status_code=201)
async def upload(
    bucket: str,
    file: UploadFile = File(...),
    user: dict = Depends(get_current_user),
    storage=Depends(get_storage)
):
    """Upload to avatars, company_logos or resumes under a fresh random key."""
    options = get_upload_options(bucket)
    url = await upload_file(file, options, storage)
    return UploadResponse(url=url)


@router.get("/{bucket}/{key}")
async def download(bucket: str, key: str, storage=Depends(get_storage)):
    get_upload_options(bucket)
    data, content_type = storage.get(bucket, key)
    return Response(content=data, media_type=content_type)
