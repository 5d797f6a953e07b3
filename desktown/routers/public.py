"""
Public storefront router - unauthenticated visitor routes.

Everything here is scoped to published offices; unpublished or unknown
offices are indistinguishable (404).
"""

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from desktown.core.deps import get_db, get_optional_user
from desktown.core.rate_limit import PUBLIC_WRITE_LIMIT, limiter
from desktown.schemas.office import (
    SESSION_ID_MIN_LENGTH,
    OfficeMediaRead,
    OfficeMessageRead,
    OfficePostRead,
    OfficeRead,
    VisitorMessageCreate,
)
from desktown.schemas.storefront import (
    PublicServiceRead,
    RatingCreate,
    RatingRead,
    RatingSummary,
    ServiceCommentCreate,
    ServiceCommentRead,
    ServiceRequestCreate,
    ServiceRequestRead,
)
from desktown.schemas.video_call import PublicVideoCallRead, VideoCallCreate, VideoCallEnd
from desktown.services import (
    notification_service,
    office_service,
    storefront_service,
    video_call_service,
)

router = APIRouter()


def _published_office_or_404(db: Session, office_id: int):
    office = office_service.get_published_office(db, office_id)
    if not office:
        raise HTTPException(status_code=404, detail="Office not found")
    return office


def _public_service_or_404(db: Session, service_id: int):
    service = storefront_service.get_service(db, service_id)
    if not service or not service.is_active or not service.office.is_published:
        raise HTTPException(status_code=404, detail="Service not found")
    return service


def services_to_public(db: Session, services) -> list[PublicServiceRead]:
    stats = storefront_service.rating_stats(db, [s.id for s in services])
    result = []
    for service in services:
        average, count = stats.get(service.id, (None, 0))
        item = PublicServiceRead.model_validate(service)
        item.average_rating = average
        item.rating_count = count
        result.append(item)
    return result


# =============================================================================
# Offices
# =============================================================================


@router.get("/public/offices", response_model=list[OfficeRead])
def list_public_offices(
    category: str | None = None,
    db: Session = Depends(get_db),
):
    return office_service.list_published_offices(db, category)


@router.get("/public/offices/{slug}", response_model=OfficeRead)
def get_public_office(slug: str, db: Session = Depends(get_db)):
    office = office_service.get_office_by_slug(db, slug)
    if not office or not office.is_published:
        raise HTTPException(status_code=404, detail="Office not found")
    return office


@router.get("/public/offices/{office_id}/services", response_model=list[PublicServiceRead])
def list_public_office_services(office_id: int, db: Session = Depends(get_db)):
    """Active services with their average rating and rating count."""
    _published_office_or_404(db, office_id)
    services = storefront_service.list_office_services(db, office_id, active_only=True)
    return services_to_public(db, services)


# =============================================================================
# Service feedback
# =============================================================================


@router.get("/public/services/{service_id}/ratings", response_model=RatingSummary)
def list_service_ratings(service_id: int, db: Session = Depends(get_db)):
    _public_service_or_404(db, service_id)
    average, count = storefront_service.rating_stats(db, [service_id])[service_id]
    return RatingSummary(
        ratings=storefront_service.list_ratings(db, service_id),
        average=average,
        count=count,
    )


@router.post("/public/services/{service_id}/ratings", response_model=RatingRead, status_code=201)
@limiter.limit(PUBLIC_WRITE_LIMIT)
def rate_service(
    request: Request,
    service_id: int,
    data: RatingCreate,
    user=Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    _public_service_or_404(db, service_id)
    return storefront_service.add_rating(
        db,
        service_id,
        data.rating,
        visitor_name=data.visitor_name,
        user_id=user.id if user else None,
    )


@router.get("/public/services/{service_id}/comments", response_model=list[ServiceCommentRead])
def list_service_comments(service_id: int, db: Session = Depends(get_db)):
    _public_service_or_404(db, service_id)
    return storefront_service.list_comments(db, service_id)


@router.post("/public/services/{service_id}/comments", response_model=ServiceCommentRead, status_code=201)
@limiter.limit(PUBLIC_WRITE_LIMIT)
def comment_on_service(
    request: Request,
    service_id: int,
    data: ServiceCommentCreate,
    user=Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    _public_service_or_404(db, service_id)
    try:
        return storefront_service.add_comment(db, service_id, data, user_id=user.id if user else None)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/public/services/{service_id}/request", response_model=ServiceRequestRead, status_code=201)
@limiter.limit(PUBLIC_WRITE_LIMIT)
def request_service(
    request: Request,
    service_id: int,
    data: ServiceRequestCreate,
    db: Session = Depends(get_db),
):
    service = _public_service_or_404(db, service_id)
    request_row = storefront_service.create_request(db, service, data)
    notification_service.notify_service_request(db, request_row, service, service.office.owner_id)
    return request_row


# =============================================================================
# Media / posts
# =============================================================================


@router.get("/public/offices/{office_id}/media", response_model=list[OfficeMediaRead])
def list_public_media(office_id: int, db: Session = Depends(get_db)):
    """Unexpired media, pinned first."""
    _published_office_or_404(db, office_id)
    return office_service.list_media(db, office_id)


@router.post("/public/media/{media_id}/view")
def view_media(media_id: int, db: Session = Depends(get_db)):
    media = office_service.get_media(db, media_id)
    if not media:
        raise HTTPException(status_code=404, detail="Media not found")
    _published_office_or_404(db, media.office_id)
    return {"views": office_service.increment_media_views(db, media)}


@router.get("/public/offices/{office_id}/posts", response_model=list[OfficePostRead])
def list_public_posts(office_id: int, db: Session = Depends(get_db)):
    _published_office_or_404(db, office_id)
    return office_service.list_office_posts(db, office_id)


@router.post("/public/posts/{post_id}/like")
def like_office_post(post_id: int, db: Session = Depends(get_db)):
    post = office_service.get_office_post(db, post_id)
    if not post:
        raise HTTPException(status_code=404, detail="Post not found")
    _published_office_or_404(db, post.office_id)
    return {"likes": office_service.like_office_post(db, post)}


# =============================================================================
# Visitor chat
# =============================================================================


@router.get("/public/offices/{office_id}/messages", response_model=list[OfficeMessageRead])
def list_visitor_conversation(
    office_id: int,
    session_id: str = Query(..., min_length=SESSION_ID_MIN_LENGTH, max_length=255),
    db: Session = Depends(get_db),
):
    """One visitor's conversation, keyed by the browser-generated session id."""
    _published_office_or_404(db, office_id)
    return office_service.list_messages(db, office_id, session_id)


@router.post("/public/offices/{office_id}/messages", response_model=OfficeMessageRead, status_code=201)
@limiter.limit(PUBLIC_WRITE_LIMIT)
def send_visitor_message(
    request: Request,
    office_id: int,
    data: VisitorMessageCreate,
    db: Session = Depends(get_db),
):
    _published_office_or_404(db, office_id)
    return office_service.create_visitor_message(db, office_id, data)


# =============================================================================
# Video calls (visitor side)
# =============================================================================


def _call_by_room_or_404(db: Session, room_id: str):
    if not video_call_service.is_valid_room_id(room_id):
        raise HTTPException(status_code=400, detail="Invalid room ID format")
    call = video_call_service.get_call_by_room(db, room_id)
    if not call:
        raise HTTPException(status_code=404, detail="Video call not found")
    return call


@router.post("/public/offices/{office_id}/video-calls", response_model=PublicVideoCallRead, status_code=201)
@limiter.limit(PUBLIC_WRITE_LIMIT)
def request_video_call(
    request: Request,
    office_id: int,
    data: VideoCallCreate,
    db: Session = Depends(get_db),
):
    office = _published_office_or_404(db, office_id)
    call = video_call_service.create_call(db, office_id, data.session_id, data.visitor_name)
    notification_service.notify_incoming_video_call(
        db, call, office.receptionist_id or office.owner_id
    )
    return call


@router.get("/public/video-calls/{room_id}", response_model=PublicVideoCallRead)
def get_video_call(room_id: str, db: Session = Depends(get_db)):
    return _call_by_room_or_404(db, room_id)


@router.post("/public/video-calls/{room_id}/end", response_model=PublicVideoCallRead)
def end_video_call(
    room_id: str,
    data: VideoCallEnd,
    db: Session = Depends(get_db),
):
    call = _call_by_room_or_404(db, room_id)
    if call.session_id != data.session_id:
        raise HTTPException(status_code=403, detail="Not authorized to end this call")
    try:
        return video_call_service.transition(db, call, "visitor_end")
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
