"""Profile service - social profiles, follows and stats."""

from uuid import UUID

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from desktown.db.models import Follower, Post, PostLike, Profile, User


def get_profile(db: Session, profile_id: int) -> Profile | None:
    return db.query(Profile).filter(Profile.id == profile_id).first()


def get_profile_by_owner(db: Session, owner_id: UUID) -> Profile | None:
    return db.query(Profile).filter(Profile.owner_id == owner_id).first()


def get_or_create_profile(db: Session, owner_id: UUID) -> Profile:
    """Profiles are created lazily on first access."""
    profile = get_profile_by_owner(db, owner_id)
    if profile:
        return profile

    user = db.query(User).filter(User.id == owner_id).first()
    profile = Profile(
        owner_id=owner_id,
        display_name=user.display_name if user else None,
        avatar_url=user.profile_image_url if user else None,
    )
    db.add(profile)
    try:
        db.commit()
    except IntegrityError:
        # Concurrent first access created it
        db.rollback()
        return get_profile_by_owner(db, owner_id)
    db.refresh(profile)
    return profile


def update_profile(db: Session, profile: Profile, updates: dict) -> Profile:
    """Blank strings clear a field."""
    for field, value in updates.items():
        if isinstance(value, str):
            value = value.strip() or None
        setattr(profile, field, value)
    db.commit()
    db.refresh(profile)
    return profile


def get_follower_count(db: Session, profile_id: int) -> int:
    return db.query(Follower).filter(Follower.profile_id == profile_id).count()


def is_following(db: Session, profile_id: int, user_id: UUID) -> bool:
    return db.query(Follower.id).filter(
        Follower.profile_id == profile_id,
        Follower.follower_user_id == user_id,
    ).first() is not None


def follow(db: Session, profile: Profile, user_id: UUID) -> None:
    """
    Raises:
        ValueError: self-follow or already following
    """
    if profile.owner_id == user_id:
        raise ValueError("You cannot follow yourself")
    if is_following(db, profile.id, user_id):
        raise ValueError("Already following")
    db.add(Follower(profile_id=profile.id, follower_user_id=user_id))
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ValueError("Already following")


def unfollow(db: Session, profile_id: int, user_id: UUID) -> bool:
    deleted = db.query(Follower).filter(
        Follower.profile_id == profile_id,
        Follower.follower_user_id == user_id,
    ).delete(synchronize_session=False)
    db.commit()
    return deleted > 0


def get_stats(db: Session, profile: Profile) -> dict:
    """Posts, followers, following and likes received across all posts."""
    posts = db.query(Post).filter(Post.author_id == profile.owner_id).count()
    followers = get_follower_count(db, profile.id)
    following = db.query(Follower).filter(
        Follower.follower_user_id == profile.owner_id
    ).count()
    likes = db.query(func.count(PostLike.id)).join(
        Post, Post.id == PostLike.post_id
    ).filter(Post.author_id == profile.owner_id).scalar() or 0
    return {"posts": posts, "followers": followers, "following": following, "likes": likes}
