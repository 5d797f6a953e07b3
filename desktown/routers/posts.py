"""Posts router - social feed, likes and comments."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session

from desktown.core.deps import get_current_session, get_db, require_csrf_header
from desktown.schemas.auth import UserSession
from desktown.schemas.social import CommentCreate, CommentRead, LikeCount, PostCreate, PostRead
from desktown.services import post_service, profile_service

router = APIRouter()


def posts_to_read(db: Session, posts: list, user_id: UUID) -> list[PostRead]:
    engagement = post_service.get_engagement(db, [p.id for p in posts], user_id)
    return [
        PostRead(
            id=p.id,
            author_id=p.author_id,
            author_name=p.author.display_name if p.author else None,
            author_avatar=p.author.profile_image_url if p.author else None,
            profile_id=p.profile_id,
            content=p.content,
            media_url=p.media_url,
            media_type=p.media_type,
            scope=p.scope,
            created_at=p.created_at,
            **engagement[p.id],
        )
        for p in posts
    ]


def _comment_to_read(comment) -> CommentRead:
    return CommentRead(
        id=comment.id,
        post_id=comment.post_id,
        author_id=comment.author_id,
        author_name=comment.author.display_name if comment.author else None,
        content=comment.content,
        created_at=comment.created_at,
    )


def _get_post_or_404(db: Session, post_id: int):
    post = post_service.get_post(db, post_id)
    if not post:
        raise HTTPException(status_code=404, detail="Post not found")
    return post


@router.get("/posts", response_model=list[PostRead])
def list_posts(
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    posts = post_service.list_feed(db, limit=limit, offset=offset)
    return posts_to_read(db, posts, session.user_id)


@router.post(
    "/posts",
    response_model=PostRead,
    status_code=201,
    dependencies=[Depends(require_csrf_header)],
)
def create_post(
    data: PostCreate,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    profile = profile_service.get_or_create_profile(db, session.user_id)
    post = post_service.create_post(
        db,
        author_id=session.user_id,
        profile_id=profile.id,
        content=data.content,
        media_url=data.media_url,
        media_type=data.media_type,
        scope=data.scope,
    )
    return posts_to_read(db, [post], session.user_id)[0]


@router.delete("/posts/{post_id}", status_code=204, dependencies=[Depends(require_csrf_header)])
def delete_post(
    post_id: int,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    post = _get_post_or_404(db, post_id)
    if post.author_id != session.user_id:
        raise HTTPException(status_code=403, detail="Not authorized to delete this post")
    post_service.delete_post(db, post)
    return Response(status_code=204)


@router.post("/posts/{post_id}/like", response_model=LikeCount, dependencies=[Depends(require_csrf_header)])
def like_post(
    post_id: int,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Idempotent: one like per user."""
    _get_post_or_404(db, post_id)
    post_service.like_post(db, post_id, session.user_id)
    return LikeCount(likes=post_service.like_count(db, post_id), is_liked=True)


@router.delete("/posts/{post_id}/like", response_model=LikeCount, dependencies=[Depends(require_csrf_header)])
def unlike_post(
    post_id: int,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    _get_post_or_404(db, post_id)
    post_service.unlike_post(db, post_id, session.user_id)
    return LikeCount(likes=post_service.like_count(db, post_id), is_liked=False)


@router.get("/posts/{post_id}/comments", response_model=list[CommentRead])
def list_comments(
    post_id: int,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    _get_post_or_404(db, post_id)
    return [_comment_to_read(c) for c in post_service.list_comments(db, post_id)]


@router.post(
    "/posts/{post_id}/comments",
    response_model=CommentRead,
    status_code=201,
    dependencies=[Depends(require_csrf_header)],
)
def add_comment(
    post_id: int,
    data: CommentCreate,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    _get_post_or_404(db, post_id)
    comment = post_service.add_comment(db, post_id, session.user_id, data.content)
    return _comment_to_read(comment)


@router.delete(
    "/posts/{post_id}/comments/{comment_id}",
    status_code=204,
    dependencies=[Depends(require_csrf_header)],
)
def delete_comment(
    post_id: int,
    comment_id: int,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    comment = post_service.get_comment(db, post_id, comment_id)
    if not comment:
        raise HTTPException(status_code=404, detail="Comment not found")
    if comment.author_id != session.user_id:
        raise HTTPException(status_code=403, detail="Not authorized to delete this comment")
    post_service.delete_comment(db, comment)
    return Response(status_code=204)
