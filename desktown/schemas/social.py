"""Social feed schemas: profiles, follows, posts."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field


class ProfileRead(BaseModel):
    id: int
    owner_id: UUID
    display_name: str | None
    bio: str | None
    avatar_url: str | None
    cover_url: str | None
    website: str | None
    location: str | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ProfileUpdate(BaseModel):
    display_name: str | None = Field(None, max_length=255)
    bio: str | None = Field(None, max_length=2000)
    avatar_url: str | None = None
    cover_url: str | None = None
    website: str | None = Field(None, max_length=255)
    location: str | None = Field(None, max_length=255)


class ProfileStats(BaseModel):
    posts: int
    followers: int
    following: int
    likes: int


class FollowStatus(BaseModel):
    is_following: bool
    followers: int


class PostCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=10000)
    media_url: str | None = None
    media_type: str | None = Field(None, max_length=30)
    scope: str = Field("public", pattern="^(public|profile)$")


class PostRead(BaseModel):
    id: int
    author_id: UUID
    author_name: str | None = None
    author_avatar: str | None = None
    profile_id: int | None
    content: str
    media_url: str | None
    media_type: str | None
    scope: str
    created_at: datetime
    like_count: int = 0
    comment_count: int = 0
    is_liked: bool = False


class LikeCount(BaseModel):
    likes: int
    is_liked: bool


class CommentCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=5000)


class CommentRead(BaseModel):
    id: int
    post_id: int
    author_id: UUID
    author_name: str | None = None
    content: str
    created_at: datetime
