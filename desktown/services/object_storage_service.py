"""
Object storage service - uploads and their access-control tag.

Files live under uploads/<uuid><ext> in the configured backend. Every
upload gets a StoredObject row; its visibility decides who may read it.
"""

import logging
import os
import shutil
import uuid
from typing import BinaryIO
from uuid import UUID

from botocore.exceptions import ClientError
from sqlalchemy.orm import Session

from desktown.core.config import settings
from desktown.db.enums import ADMIN_ROLES, ObjectVisibility
from desktown.db.models import StoredObject
from desktown.services import storage_client

logger = logging.getLogger(__name__)

ALLOWED_MIME_PREFIXES = ("image/", "video/", "audio/")
ALLOWED_MIME_TYPES = {"application/pdf"}
UPLOAD_PREFIX = "uploads"
_MAX_EXT_LENGTH = 10


def validate_upload(content_type: str, size: int) -> None:
    """
    Raises:
        ValueError: type not allowed, empty file or over MAX_UPLOAD_BYTES
    """
    content_type = (content_type or "").lower()
    if not (content_type.startswith(ALLOWED_MIME_PREFIXES) or content_type in ALLOWED_MIME_TYPES):
        raise ValueError(f"Content type '{content_type or 'unknown'}' not allowed")
    if size <= 0:
        raise ValueError("File is empty")
    if size > settings.MAX_UPLOAD_BYTES:
        max_mb = settings.MAX_UPLOAD_BYTES / (1024 * 1024)
        raise ValueError(f"File size exceeds {max_mb:.0f} MB limit")


def build_object_path(filename: str) -> str:
    ext = os.path.splitext(filename or "")[1].lower()
    if not ext[1:].isalnum() or len(ext) > _MAX_EXT_LENGTH:
        ext = ""
    return f"{UPLOAD_PREFIX}/{uuid.uuid4().hex}{ext}"


def object_url(object_path: str) -> str:
    return f"/objects/{object_path}"


def put_object(object_path: str, stream: BinaryIO, content_type: str) -> None:
    stream.seek(0)
    if storage_client.backend() == "s3":
        storage_client.get_s3_client().upload_fileobj(
            stream,
            settings.S3_BUCKET,
            object_path,
            ExtraArgs={"ContentType": content_type},
        )
        return
    path = storage_client.local_path(object_path)
    os.makedirs(path.parent, exist_ok=True)
    with open(path, "wb") as f:
        shutil.copyfileobj(stream, f)


def read_object(object_path: str) -> bytes | None:
    """Object bytes, or None when the backend has no such key."""
    if storage_client.backend() == "s3":
        try:
            result = storage_client.get_s3_client().get_object(
                Bucket=settings.S3_BUCKET, Key=object_path
            )
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in ("NoSuchKey", "404"):
                return None
            raise
        return result["Body"].read()
    try:
        path = storage_client.local_path(object_path)
    except ValueError:
        return None
    return path.read_bytes() if path.is_file() else None


def store_upload(
    db: Session,
    owner_id: UUID,
    filename: str,
    content_type: str,
    stream: BinaryIO,
    size: int,
    visibility: ObjectVisibility = ObjectVisibility.PUBLIC,
) -> StoredObject:
    """
    Validate, stream to the backend and record the ACL row.

    Raises:
        ValueError: validation failure
    """
    validate_upload(content_type, size)
    object_path = build_object_path(filename)
    put_object(object_path, stream, content_type)

    record = StoredObject(
        object_path=object_path,
        owner_id=owner_id,
        filename=(filename or "untitled")[:255],
        content_type=content_type,
        size_bytes=size,
        visibility=visibility.value,
    )
    db.add(record)
    db.commit()
    db.refresh(record)
    logger.info("Stored object %s (%s bytes, %s)", object_path, size, visibility.value)
    return record


def get_object_record(db: Session, object_path: str) -> StoredObject | None:
    return db.query(StoredObject).filter(StoredObject.object_path == object_path).first()


def can_read(record: StoredObject, user) -> bool:
    """Public objects are open; private ones need the owner or an admin."""
    if record.visibility == ObjectVisibility.PUBLIC.value:
        return True
    if user is None:
        return False
    return record.owner_id == user.id or user.role in {r.value for r in ADMIN_ROLES}


def set_visibility(db: Session, record: StoredObject, visibility: ObjectVisibility) -> StoredObject:
    record.visibility = visibility.value
    db.commit()
    db.refresh(record)
    return record
