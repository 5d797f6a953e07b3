"""Uploads and ACL-checked object serving."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, Response, UploadFile
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from desktown.core.config import settings
from desktown.core.deps import get_current_session, get_db, get_optional_user, require_csrf_header
from desktown.db.enums import ObjectVisibility
from desktown.schemas.auth import UserSession
from desktown.schemas.storage import UploadResponse
from desktown.services import object_storage_service
from desktown.utils.file_upload import content_length_exceeds_limit, get_upload_file_size

router = APIRouter()
objects_router = APIRouter()


def upload_response(record) -> UploadResponse:
    return UploadResponse(
        object_path=record.object_path,
        url=object_storage_service.object_url(record.object_path),
        content_type=record.content_type,
        size_bytes=record.size_bytes,
        visibility=record.visibility,
    )


async def receive_upload(
    request: Request,
    file: UploadFile,
    db: Session,
    owner_id: UUID,
    visibility: ObjectVisibility,
) -> UploadResponse:
    """Size-check a spooled upload, then stream it to storage off the event loop."""
    max_mb = settings.MAX_UPLOAD_BYTES / (1024 * 1024)
    if content_length_exceeds_limit(
        request.headers.get("content-length"),
        max_size_bytes=settings.MAX_UPLOAD_BYTES,
    ):
        raise HTTPException(status_code=400, detail=f"File size exceeds {max_mb:.0f} MB limit")

    file_size = await get_upload_file_size(file)
    if file_size > settings.MAX_UPLOAD_BYTES:
        raise HTTPException(status_code=400, detail=f"File size exceeds {max_mb:.0f} MB limit")

    try:
        record = await run_in_threadpool(
            object_storage_service.store_upload,
            db,
            owner_id=owner_id,
            filename=file.filename or "untitled",
            content_type=file.content_type or "application/octet-stream",
            stream=file.file,
            size=file_size,
            visibility=visibility,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return upload_response(record)


@router.post(
    "/upload/media",
    response_model=UploadResponse,
    status_code=201,
    dependencies=[Depends(require_csrf_header)],
)
async def upload_media(
    request: Request,
    file: Annotated[UploadFile, File()],
    visibility: Annotated[ObjectVisibility, Form()] = ObjectVisibility.PUBLIC,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    return await receive_upload(request, file, db, session.user_id, visibility)


@objects_router.get("/objects/{object_path:path}")
def get_object(
    object_path: str,
    user=Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    record = object_storage_service.get_object_record(db, object_path)
    if not record:
        raise HTTPException(status_code=404, detail="Object not found")
    if not object_storage_service.can_read(record, user):
        if user is None:
            raise HTTPException(status_code=401, detail="Not authenticated")
        raise HTTPException(status_code=403, detail="Access denied")

    data = object_storage_service.read_object(object_path)
    if data is None:
        raise HTTPException(status_code=404, detail="Object not found")

    cache = "public, max-age=3600" if record.visibility == ObjectVisibility.PUBLIC.value else "private, no-store"
    return Response(
        content=data,
        media_type=record.content_type,
        headers={"Cache-Control": cache},
    )
