from fastapi import APIRouter, Depends, File, HTTPException, UploadFile

from careconnect.config import get_settings
from careconnect.constants import IMAGE_TYPES
from careconnect.models import User
from careconnect.schemas import UploadOut
from careconnect.security import get_current_user
from careconnect.utils.storage import upload_image

settings = get_settings()

router = APIRouter(prefix="/api/upload", tags=["upload"])


@router.post("", response_model=UploadOut)
async def upload(file: UploadFile = File(...), current: User = Depends(get_current_user)):
    """Upload a profile photo or certificate image; returns its public URL."""
    if file.content_type not in IMAGE_TYPES:
        raise HTTPException(
            status_code=400,
            detail="Invalid file type. Only images are allowed (jpeg, jpg, png, gif, webp)",
        )
    file_bytes = await file.read()
    if not file_bytes:
        raise HTTPException(status_code=400, detail="No file provided")
    if len(file_bytes) > settings.MAX_IMAGE_MB * 1024 * 1024:
        raise HTTPException(status_code=400, detail=f"File size exceeds {settings.MAX_IMAGE_MB}MB limit")

    url = await upload_image(str(current.id), file_bytes, file.content_type)
    return UploadOut(url=url)
