"""Profiles router - social profile, follows and stats."""

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from desktown.core.deps import get_current_session, get_db, require_csrf_header
from desktown.routers.posts import posts_to_read
from desktown.schemas.auth import UserSession
from desktown.schemas.social import (
    FollowStatus,
    PostRead,
    ProfileRead,
    ProfileStats,
    ProfileUpdate,
)
from desktown.services import post_service, profile_service

router = APIRouter()


def _get_profile_or_404(db: Session, profile_id: int):
    profile = profile_service.get_profile(db, profile_id)
    if not profile:
        raise HTTPException(status_code=404, detail="Profile not found")
    return profile


@router.get("/profile", response_model=ProfileRead)
def get_my_profile(
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Caller's profile, created on first access."""
    return profile_service.get_or_create_profile(db, session.user_id)


@router.patch("/profile", response_model=ProfileRead, dependencies=[Depends(require_csrf_header)])
def update_my_profile(
    data: ProfileUpdate,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    profile = profile_service.get_or_create_profile(db, session.user_id)
    return profile_service.update_profile(db, profile, data.model_dump(exclude_unset=True))


@router.get("/profile/{profile_id}", response_model=ProfileRead)
def get_profile(
    profile_id: int,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    return _get_profile_or_404(db, profile_id)


@router.get("/profile/{profile_id}/stats", response_model=ProfileStats)
def get_profile_stats(
    profile_id: int,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    profile = _get_profile_or_404(db, profile_id)
    return ProfileStats(**profile_service.get_stats(db, profile))


@router.post(
    "/profile/{profile_id}/follow",
    response_model=FollowStatus,
    dependencies=[Depends(require_csrf_header)],
)
def follow_profile(
    profile_id: int,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    profile = _get_profile_or_404(db, profile_id)
    try:
        profile_service.follow(db, profile, session.user_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return FollowStatus(is_following=True, followers=profile_service.get_follower_count(db, profile_id))


@router.delete(
    "/profile/{profile_id}/follow",
    response_model=FollowStatus,
    dependencies=[Depends(require_csrf_header)],
)
def unfollow_profile(
    profile_id: int,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    _get_profile_or_404(db, profile_id)
    if not profile_service.unfollow(db, profile_id, session.user_id):
        raise HTTPException(status_code=404, detail="Not following this profile")
    return FollowStatus(is_following=False, followers=profile_service.get_follower_count(db, profile_id))


@router.get("/profile/{profile_id}/following", response_model=FollowStatus)
def get_follow_status(
    profile_id: int,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Whether the caller follows this profile."""
    _get_profile_or_404(db, profile_id)
    return FollowStatus(
        is_following=profile_service.is_following(db, profile_id, session.user_id),
        followers=profile_service.get_follower_count(db, profile_id),
    )


@router.get("/profile/{profile_id}/posts", response_model=list[PostRead])
def list_profile_posts(
    profile_id: int,
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    profile = _get_profile_or_404(db, profile_id)
    posts = post_service.list_author_posts(db, profile.owner_id, limit=limit, offset=offset)
    return posts_to_read(db, posts, session.user_id)
