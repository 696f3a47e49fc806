"""
Local object storage for uploaded images.

Files are stored under ``UPLOAD_DIR`` using the same prefixes the hosted
storage bucket used: ``listing-images/{user_id}/`` and
``chat-images/{room}/``.
"""
import re
import time
from pathlib import Path

import aiofiles
import aiofiles.os
import structlog
from fastapi import HTTPException, UploadFile, status

from monlyking.core.config import settings

logger = structlog.get_logger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")

CHUNK_SIZE = 64 * 1024


def _safe_filename(filename: str) -> str:
    name = _UNSAFE_CHARS.sub("_", Path(filename).name).strip("._")
    return name or "upload"


def _extension(filename: str) -> str:
    return Path(filename).suffix.lower().lstrip(".")


async def save_upload(upload: UploadFile, prefix: str) -> str:
    """
    Validate and store an uploaded image.

    Args:
        upload: Incoming file
        prefix: Storage path prefix, e.g. ``chat-images/1_2``

    Returns:
        Public URL path of the stored file
    """
    filename = upload.filename or ""
    if _extension(filename) not in settings.ALLOWED_EXTENSIONS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"File type not allowed. Allowed: {', '.join(sorted(settings.ALLOWED_EXTENSIONS))}",
        )

    relative = Path(prefix) / f"{int(time.time() * 1000)}_{_safe_filename(filename)}"
    target = Path(settings.UPLOAD_DIR) / relative
    await aiofiles.os.makedirs(target.parent, exist_ok=True)

    size = 0
    async with aiofiles.open(target, "wb") as f:
        while chunk := await upload.read(CHUNK_SIZE):
            size += len(chunk)
            if size > settings.MAX_UPLOAD_SIZE:
                break
            await f.write(chunk)

    if size > settings.MAX_UPLOAD_SIZE:
        await aiofiles.os.remove(target)
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail="File too large",
        )
    if not size:
        await aiofiles.os.remove(target)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Empty file",
        )

    logger.info("file_stored", path=str(relative), size=size)

    return f"{settings.UPLOAD_URL_PREFIX}/{relative.as_posix()}"
