"""
File Upload Endpoint.

Stores one file under a bucket and path and returns its public URL.
Existing objects are never overwritten.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, File, Form, UploadFile

from bizboard.core.errors import BadRequestError, PayloadTooLargeError
from bizboard.core.logging_config import get_logger
from bizboard.core.models.io.profiles import UploadResponse
from bizboard.core.storage import DEFAULT_BUCKET
from bizboard.server.core.config import settings
from bizboard.server.services.deps import CurrentUserDep, StorageDep

logger = get_logger(__name__)

router = APIRouter(tags=["upload"])


@router.post(
    "",
    response_model=UploadResponse,
    summary="Upload File",
    responses={
        400: {"description": "Missing file or path, or an invalid path"},
        401: {"description": "Not logged in"},
        409: {"description": "An object already exists at the path"},
        413: {"description": "File too large"},
    },
)
async def upload_file(
    user: CurrentUserDep,
    storage: StorageDep,
    file: Optional[UploadFile] = File(default=None),
    path: Optional[str] = Form(default=None),
    bucket: str = Form(default=DEFAULT_BUCKET),
) -> UploadResponse:
    if file is None:
        raise BadRequestError("חסר קובץ")
    if not path:
        raise BadRequestError("חסר נתיב")
    data = await file.read()
    if len(data) > settings.storage.upload_max_bytes:
        raise PayloadTooLargeError()
    stored = storage.save(bucket, path, data)
    logger.info(f"User {user.id} uploaded {bucket}/{stored}")
    return UploadResponse(path=stored, public_url=storage.public_url(bucket, stored))
