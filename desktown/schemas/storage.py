"""Object storage schemas."""

from pydantic import BaseModel

from desktown.db.enums import ObjectVisibility


class UploadResponse(BaseModel):
    object_path: str
    url: str
    content_type: str
    size_bytes: int
    visibility: str


class MediaVisibilityUpdate(BaseModel):
    object_path: str
    visibility: ObjectVisibility
