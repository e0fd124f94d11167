"""Media upload route."""

from typing import Optional

from fastapi import APIRouter, Depends, File, UploadFile

from api.auth.dependencies import CurrentUser, get_current_user
from api.exceptions import ValidationError
from api.models.api_models import UploadResponse
from api.responses import ERROR_RESPONSES
from api.services.upload_service import UploadService

router = APIRouter(tags=["upload"])


def get_upload_service() -> UploadService:
    return UploadService()


@router.post("/upload", response_model=UploadResponse, responses=ERROR_RESPONSES)
def upload_media(
    media: Optional[UploadFile] = File(None),
    current_user: CurrentUser = Depends(get_current_user),
    service: UploadService = Depends(get_upload_service),
):
    """Store one image or video and return its public URL.

    Allowed: jpeg, png, gif, webp, mp4, mov, avi, webm. Maximum 100MB.
    """
    if media is None:
        raise ValidationError("No file uploaded", details={"field": "media"})

    stored = service.store(
        media.file,
        original_name=media.filename,
        mime_type=media.content_type,
        size=media.size,
    )
    return UploadResponse(
        fileName=stored.file_name,
        fileUrl=stored.url,
        fileSize=stored.size,
        mimetype=stored.mime_type,
    )
