"""
Image storage for profile photos and Guardian certificates.

Cloudflare R2 (S3 API) when all R2_* settings are present, otherwise the
local MEDIA_ROOT directory, which main serves under /media.
"""
from datetime import datetime, timezone
from pathlib import Path
from uuid import uuid4

import boto3
from fastapi import HTTPException

from careconnect.config import get_settings
from careconnect.utils.logger import get_logger

settings = get_settings()
logger = get_logger("storage")

UPLOAD_FOLDER = "careconnect"

EXTENSIONS = {
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/png": ".png",
    "image/webp": ".webp",
    "image/gif": ".gif",
}


def r2_configured() -> bool:
    return all((
        settings.R2_ACCOUNT_ID,
        settings.R2_ACCESS_KEY_ID,
        settings.R2_SECRET_ACCESS_KEY,
        settings.R2_BUCKET_NAME,
        settings.R2_PUBLIC_BASE,
    ))


def _r2_client():
    return boto3.session.Session().client(
        "s3",
        endpoint_url=f"https://{settings.R2_ACCOUNT_ID}.r2.cloudflarestorage.com",
        aws_access_key_id=settings.R2_ACCESS_KEY_ID,
        aws_secret_access_key=settings.R2_SECRET_ACCESS_KEY,
        region_name="auto",
    )


def build_object_key(owner_id: str, content_type: str | None) -> str:
    """careconnect/<owner>/<utc timestamp>_<random>.<ext>"""
    ts = datetime.now(timezone.utc).strftime("%Y%m%d%H%M%S")
    ext = EXTENSIONS.get((content_type or "").lower(), "")
    return f"{UPLOAD_FOLDER}/{owner_id}/{ts}_{uuid4().hex[:12]}{ext}"


async def upload_image(owner_id: str, file_bytes: bytes, content_type: str = "image/jpeg") -> str:
    """Store an image and return the URL clients should use for it."""
    if not owner_id or not file_bytes:
        raise HTTPException(status_code=400, detail="Missing upload information")

    key = build_object_key(owner_id, content_type)

    if r2_configured():
        try:
            _r2_client().put_object(
                Bucket=settings.R2_BUCKET_NAME,
                Key=key,
                Body=file_bytes,
                ContentType=content_type,
            )
        except Exception as exc:
            logger.error(f"R2 upload failed for {key}: {exc}", exc_info=True)
            raise HTTPException(status_code=500, detail="Failed to upload media file")
        logger.info(f"Uploaded {key} to R2")
        return f"{settings.R2_PUBLIC_BASE.rstrip('/')}/{key}"

    target = Path(settings.MEDIA_ROOT) / key
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(file_bytes)
    except OSError as exc:
        logger.error(f"Could not write {target}: {exc}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to save media file")
    logger.info(f"Stored {key} under {settings.MEDIA_ROOT}")
    return f"/media/{key}"
