"""Post service - feed posts, likes and comments."""

from uuid import UUID

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from desktown.db.models import Post, PostComment, PostLike


def list_feed(db: Session, limit: int = 50, offset: int = 0) -> list[Post]:
    """Public feed, newest first."""
    return db.query(Post).options(selectinload(Post.author)).filter(
        Post.scope == "public"
    ).order_by(Post.created_at.desc(), Post.id.desc()).offset(offset).limit(limit).all()


def list_author_posts(db: Session, author_id: UUID, limit: int = 50, offset: int = 0) -> list[Post]:
    return db.query(Post).options(selectinload(Post.author)).filter(
        Post.author_id == author_id
    ).order_by(Post.created_at.desc(), Post.id.desc()).offset(offset).limit(limit).all()


def get_post(db: Session, post_id: int) -> Post | None:
    return db.query(Post).filter(Post.id == post_id).first()


def create_post(
    db: Session,
    author_id: UUID,
    profile_id: int | None,
    content: str,
    media_url: str | None = None,
    media_type: str | None = None,
    scope: str = "public",
) -> Post:
    post = Post(
        author_id=author_id,
        profile_id=profile_id,
        content=content,
        media_url=media_url,
        media_type=media_type,
        scope=scope,
    )
    db.add(post)
    db.commit()
    db.refresh(post)
    return post


def delete_post(db: Session, post: Post) -> None:
    """Likes and comments cascade."""
    db.delete(post)
    db.commit()


def get_engagement(db: Session, post_ids: list[int], user_id: UUID) -> dict[int, dict]:
    """like_count / comment_count / is_liked for a page of posts."""
    result = {pid: {"like_count": 0, "comment_count": 0, "is_liked": False} for pid in post_ids}
    if not post_ids:
        return result

    for post_id, count in db.query(PostLike.post_id, func.count(PostLike.id)).filter(
        PostLike.post_id.in_(post_ids)
    ).group_by(PostLike.post_id):
        result[post_id]["like_count"] = count

    for post_id, count in db.query(PostComment.post_id, func.count(PostComment.id)).filter(
        PostComment.post_id.in_(post_ids)
    ).group_by(PostComment.post_id):
        result[post_id]["comment_count"] = count

    for (post_id,) in db.query(PostLike.post_id).filter(
        PostLike.post_id.in_(post_ids),
        PostLike.user_id == user_id,
    ):
        result[post_id]["is_liked"] = True
    return result


def like_count(db: Session, post_id: int) -> int:
    return db.query(PostLike).filter(PostLike.post_id == post_id).count()


def like_post(db: Session, post_id: int, user_id: UUID) -> bool:
    """Returns False when the user already liked the post."""
    db.add(PostLike(post_id=post_id, user_id=user_id))
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        return False
    return True


def unlike_post(db: Session, post_id: int, user_id: UUID) -> bool:
    deleted = db.query(PostLike).filter(
        PostLike.post_id == post_id,
        PostLike.user_id == user_id,
    ).delete(synchronize_session=False)
    db.commit()
    return deleted > 0


def list_comments(db: Session, post_id: int) -> list[PostComment]:
    return db.query(PostComment).options(selectinload(PostComment.author)).filter(
        PostComment.post_id == post_id
    ).order_by(PostComment.created_at.asc(), PostComment.id.asc()).all()


def get_comment(db: Session, post_id: int, comment_id: int) -> PostComment | None:
    return db.query(PostComment).filter(
        PostComment.id == comment_id,
        PostComment.post_id == post_id,
    ).first()


def add_comment(db: Session, post_id: int, author_id: UUID, content: str) -> PostComment:
    comment = PostComment(post_id=post_id, author_id=author_id, content=content)
    db.add(comment)
    db.commit()
    db.refresh(comment)
    return comment


def delete_comment(db: Session, comment: PostComment) -> None:
    db.delete(comment)
    db.commit()
