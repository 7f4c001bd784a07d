"""
Uploads API Endpoints
Presigned S3 URLs for product images; the browser uploads directly
"""
import logging

from fastapi import APIRouter, HTTPException

from phace.api.schemas import UploadUrlRequest
from phace.services.s3_service import S3Service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/upload-url")
async def get_upload_url(body: UploadUrlRequest):
    if not body.file_name or not body.content_type:
        raise HTTPException(status_code=400, detail="File name and content type are required")

    try:
        upload_url = S3Service().get_upload_url(body.file_name, body.content_type)
    except Exception as e:
        logger.error(f"Get upload URL error: {e}")
        raise HTTPException(status_code=500, detail=str(e) or "Failed to get upload URL")

    return {"uploadUrl": upload_url}
