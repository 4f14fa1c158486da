"""
CV API endpoints.

Upload runs the ingestion pipeline; the remaining routes are CRUD over the
caller's CV records. PUT and DELETE go through the ownership gate.
"""

from datetime import datetime
from typing import Any, Optional

from fastapi import APIRouter, Depends, File, UploadFile, status
from pydantic import BaseModel, Field
from starlette.concurrency import run_in_threadpool

from smartcv.api.deps import (
    get_current_user,
    get_cv_repository,
    get_ingestion_pipeline,
    require_cv_owner,
)
from smartcv.core.config import Settings, get_settings
from smartcv.core.errors import BadRequest, NoFile
from smartcv.models import Cv, User
from smartcv.services import (
    CvIngestionPipeline,
    CvRepository,
    SUPPORTED_MIME_TYPES,
    authorize_cv_owner,
)

router = APIRouter()


# ============== Pydantic Schemas ==============


class CvResponse(BaseModel):
    """Wire shape of a stored CV record."""

    id: int
    user_id: int = Field(serialization_alias="userId")
    original_file_url: Optional[str] = None
    generated_cv: Optional[dict[str, Any]] = None
    created_at: datetime = Field(serialization_alias="createdAt")
    updated_at: datetime = Field(serialization_alias="updatedAt")

    class Config:
        from_attributes = True


class CvUpdateRequest(BaseModel):
    """Replacement structured CV; the whole document is overwritten."""

    generated_cv: Optional[dict[str, Any]] = None


class MessageResponse(BaseModel):
    message: str


# ============== API Endpoints ==============


@router.post("/upload", response_model=CvResponse, status_code=status.HTTP_201_CREATED)
async def upload_cv(
    file: Optional[UploadFile] = File(None),
    current_user: User = Depends(get_current_user),
    pipeline: CvIngestionPipeline = Depends(get_ingestion_pipeline),
    settings: Settings = Depends(get_settings),
):
    """
    Upload a PDF, DOC or DOCX CV and turn it into a structured record.

    Accepts: multipart field ``file``, at most MAX_UPLOAD_SIZE_MB
    Returns: the created CV record
    """
    if file is None:
        raise NoFile()

    # Drop parameters such as "; charset=binary"
    mime_type = (file.content_type or "").split(";")[0].strip().lower()
    if mime_type not in SUPPORTED_MIME_TYPES:
        raise BadRequest("Invalid file type. Only PDF, DOC, and DOCX files are allowed.")

    max_bytes = settings.MAX_UPLOAD_SIZE_MB * 1024 * 1024
    too_large = BadRequest(f"File too large. Maximum size is {settings.MAX_UPLOAD_SIZE_MB}MB.")
    if file.size is not None and file.size > max_bytes:
        raise too_large

    content = await file.read()
    if len(content) > max_bytes:
        raise too_large

    # Storage, extraction and the model call all block; keep them off the event loop
    return await run_in_threadpool(
        pipeline.ingest,
        current_user.id,
        content,
        mime_type,
        file.filename or "upload",
    )


@router.get("", response_model=list[CvResponse])
async def list_cvs(
    current_user: User = Depends(get_current_user),
    repository: CvRepository = Depends(get_cv_repository),
):
    """List the caller's CVs, newest first."""
    return repository.list_by_user(current_user.id)


@router.get("/{cv_id}", response_model=CvResponse)
async def get_cv(
    cv_id: int,
    current_user: User = Depends(get_current_user),
    repository: CvRepository = Depends(get_cv_repository),
    settings: Settings = Depends(get_settings),
):
    """
    Fetch one CV by id.

    Any authenticated user may read any CV unless ENFORCE_CV_READ_OWNERSHIP
    is enabled.
    """
    if settings.ENFORCE_CV_READ_OWNERSHIP:
        return authorize_cv_owner(repository, current_user.id, cv_id)
    return repository.get_by_id(cv_id)


@router.put("/{cv_id}", response_model=CvResponse)
async def update_cv(
    data: Optional[CvUpdateRequest] = None,
    cv: Cv = Depends(require_cv_owner),
    repository: CvRepository = Depends(get_cv_repository),
):
    """Replace the structured CV of a record the caller owns."""
    if data is None or data.generated_cv is None:
        raise BadRequest("No CV content provided")

    return repository.update(cv.id, data.generated_cv)


@router.delete("/{cv_id}", response_model=MessageResponse)
async def delete_cv(
    cv: Cv = Depends(require_cv_owner),
    repository: CvRepository = Depends(get_cv_repository),
):
    """Delete a record the caller owns."""
    repository.delete(cv.id)
    return MessageResponse(message="CV deleted successfully")
