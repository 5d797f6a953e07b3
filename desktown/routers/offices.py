"""
Offices router - the tenant-facing side of a virtual office.

Office CRUD and its content are for managers who own the office (or
admins). Visitor chat and video calls are staffed by the owner or the
office's receptionist.
"""

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.orm import Session

from desktown.core.deps import get_current_session, get_db, require_csrf_header, require_roles
from desktown.db.enums import ADMIN_ROLES, MANAGER_ROLES, VideoCallStatus
from desktown.schemas.auth import UserSession
from desktown.schemas.office import (
    DepartmentCreate,
    DepartmentRead,
    DepartmentUpdate,
    OfficeCreate,
    OfficeFollowStatus,
    OfficeMediaCreate,
    OfficeMediaRead,
    OfficeMessageRead,
    OfficePostCreate,
    OfficePostRead,
    OfficeRead,
    OfficeUpdate,
    ReceptionistMessageCreate,
    SectionCreate,
    SectionRead,
    SectionUpdate,
    UnreadMessagesResponse,
)
from desktown.schemas.storefront import ServiceFields, ServiceRead, ServiceUpdate
from desktown.schemas.video_call import VideoCallRead
from desktown.services import office_service, storefront_service, user_service, video_call_service

router = APIRouter()


def _get_office_or_404(db: Session, office_id: int):
    office = office_service.get_office(db, office_id)
    if not office:
        raise HTTPException(status_code=404, detail="Office not found")
    return office


def _managed_office(db: Session, office_id: int, session: UserSession):
    office = _get_office_or_404(db, office_id)
    if not office_service.can_manage(office, session.user_id, session.role):
        raise HTTPException(status_code=403, detail="You do not manage this office")
    return office


def _staffed_office(db: Session, office_id: int, session: UserSession):
    office = _get_office_or_404(db, office_id)
    if not office_service.can_staff(office, session.user_id, session.role):
        raise HTTPException(status_code=403, detail="You are not staff of this office")
    return office


def _department_or_404(db: Session, department_id: int, office_id: int | None = None):
    department = office_service.get_department(db, department_id, office_id)
    if not department:
        raise HTTPException(status_code=404, detail="Department not found")
    return department


# =============================================================================
# Offices
# =============================================================================


@router.get("/offices", response_model=list[OfficeRead])
def list_offices(
    session: UserSession = Depends(require_roles(MANAGER_ROLES)),
    db: Session = Depends(get_db),
):
    """Caller's offices; admins see every office."""
    if session.role in ADMIN_ROLES:
        return office_service.list_offices(db)
    return office_service.list_offices(db, owner_id=session.user_id)


@router.get("/offices/{office_id}", response_model=OfficeRead)
def get_office(
    office_id: int,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    return _staffed_office(db, office_id, session)


@router.post(
    "/offices",
    response_model=OfficeRead,
    status_code=201,
    dependencies=[Depends(require_csrf_header)],
)
def create_office(
    data: OfficeCreate,
    session: UserSession = Depends(require_roles(MANAGER_ROLES)),
    db: Session = Depends(get_db),
):
    try:
        return office_service.create_office(db, session.user_id, data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.patch(
    "/offices/{office_id}",
    response_model=OfficeRead,
    dependencies=[Depends(require_csrf_header)],
)
def update_office(
    office_id: int,
    data: OfficeUpdate,
    session: UserSession = Depends(require_roles(MANAGER_ROLES)),
    db: Session = Depends(get_db),
):
    office = _managed_office(db, office_id, session)
    try:
        return office_service.update_office(db, office, data.model_dump(exclude_unset=True))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.delete("/offices/{office_id}", status_code=204, dependencies=[Depends(require_csrf_header)])
def delete_office(
    office_id: int,
    session: UserSession = Depends(require_roles(MANAGER_ROLES)),
    db: Session = Depends(get_db),
):
    office = _managed_office(db, office_id, session)
    office_service.delete_office(db, office)
    return Response(status_code=204)


# =============================================================================
# Departments / sections
# =============================================================================


@router.get("/offices/{office_id}/departments", response_model=list[DepartmentRead])
def list_departments(
    office_id: int,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    _staffed_office(db, office_id, session)
    return office_service.list_departments(db, office_id)


@router.post(
    "/offices/{office_id}/departments",
    response_model=DepartmentRead,
    status_code=201,
    dependencies=[Depends(require_csrf_header)],
)
def create_department(
    office_id: int,
    data: DepartmentCreate,
    session: UserSession = Depends(require_roles(MANAGER_ROLES)),
    db: Session = Depends(get_db),
):
    _managed_office(db, office_id, session)
    try:
        return office_service.create_department(db, office_id, data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.patch(
    "/offices/{office_id}/departments/{department_id}",
    response_model=DepartmentRead,
    dependencies=[Depends(require_csrf_header)],
)
def update_department(
    office_id: int,
    department_id: int,
    data: DepartmentUpdate,
    session: UserSession = Depends(require_roles(MANAGER_ROLES)),
    db: Session = Depends(get_db),
):
    _managed_office(db, office_id, session)
    department = _department_or_404(db, department_id, office_id)
    try:
        return office_service.update_department(db, department, data.model_dump(exclude_unset=True))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.delete(
    "/offices/{office_id}/departments/{department_id}",
    status_code=204,
    dependencies=[Depends(require_csrf_header)],
)
def delete_department(
    office_id: int,
    department_id: int,
    session: UserSession = Depends(require_roles(MANAGER_ROLES)),
    db: Session = Depends(get_db),
):
    _managed_office(db, office_id, session)
    department = _department_or_404(db, department_id, office_id)
    office_service.delete_department(db, department)
    return Response(status_code=204)


@router.get("/departments/{department_id}/sections", response_model=list[SectionRead])
def list_sections(
    department_id: int,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    department = _department_or_404(db, department_id)
    _staffed_office(db, department.office_id, session)
    return office_service.list_sections(db, department_id)


@router.post(
    "/departments/{department_id}/sections",
    response_model=SectionRead,
    status_code=201,
    dependencies=[Depends(require_csrf_header)],
)
def create_section(
    department_id: int,
    data: SectionCreate,
    session: UserSession = Depends(require_roles(MANAGER_ROLES)),
    db: Session = Depends(get_db),
):
    department = _department_or_404(db, department_id)
    _managed_office(db, department.office_id, session)
    try:
        return office_service.create_section(db, department_id, data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


def _managed_section(db: Session, section_id: int, session: UserSession):
    section = office_service.get_section(db, section_id)
    if not section:
        raise HTTPException(status_code=404, detail="Section not found")
    _managed_office(db, section.department.office_id, session)
    return section


@router.patch(
    "/sections/{section_id}",
    response_model=SectionRead,
    dependencies=[Depends(require_csrf_header)],
)
def update_section(
    section_id: int,
    data: SectionUpdate,
    session: UserSession = Depends(require_roles(MANAGER_ROLES)),
    db: Session = Depends(get_db),
):
    section = _managed_section(db, section_id, session)
    try:
        return office_service.update_section(db, section, data.model_dump(exclude_unset=True))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.delete("/sections/{section_id}", status_code=204, dependencies=[Depends(require_csrf_header)])
def delete_section(
    section_id: int,
    session: UserSession = Depends(require_roles(MANAGER_ROLES)),
    db: Session = Depends(get_db),
):
    section = _managed_section(db, section_id, session)
    office_service.delete_section(db, section)
    return Response(status_code=204)


# =============================================================================
# Office services
# =============================================================================


@router.get("/offices/{office_id}/services", response_model=list[ServiceRead])
def list_office_services(
    office_id: int,
    session: UserSession = Depends(require_roles(MANAGER_ROLES)),
    db: Session = Depends(get_db),
):
    _managed_office(db, office_id, session)
    return storefront_service.list_office_services(db, office_id)


@router.post(
    "/offices/{office_id}/services",
    response_model=ServiceRead,
    status_code=201,
    dependencies=[Depends(require_csrf_header)],
)
def create_office_service(
    office_id: int,
    data: ServiceFields,
    session: UserSession = Depends(require_roles(MANAGER_ROLES)),
    db: Session = Depends(get_db),
):
    office = _managed_office(db, office_id, session)
    try:
        return storefront_service.create_service(db, office, office.owner_id, data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


def _office_service_or_404(db: Session, office_id: int, service_id: int):
    service = storefront_service.get_service(db, service_id, office_id)
    if not service:
        raise HTTPException(status_code=404, detail="Service not found")
    return service


@router.patch(
    "/offices/{office_id}/services/{service_id}",
    response_model=ServiceRead,
    dependencies=[Depends(require_csrf_header)],
)
def update_office_service(
    office_id: int,
    service_id: int,
    data: ServiceUpdate,
    session: UserSession = Depends(require_roles(MANAGER_ROLES)),
    db: Session = Depends(get_db),
):
    _managed_office(db, office_id, session)
    service = _office_service_or_404(db, office_id, service_id)
    return storefront_service.update_service(db, service, data.model_dump(exclude_unset=True))


@router.delete(
    "/offices/{office_id}/services/{service_id}",
    status_code=204,
    dependencies=[Depends(require_csrf_header)],
)
def delete_office_service(
    office_id: int,
    service_id: int,
    session: UserSession = Depends(require_roles(MANAGER_ROLES)),
    db: Session = Depends(get_db),
):
    _managed_office(db, office_id, session)
    service = _office_service_or_404(db, office_id, service_id)
    storefront_service.delete_service(db, service)
    return Response(status_code=204)


# =============================================================================
# Media / posts
# =============================================================================


@router.get("/offices/{office_id}/media", response_model=list[OfficeMediaRead])
def list_office_media(
    office_id: int,
    session: UserSession = Depends(require_roles(MANAGER_ROLES)),
    db: Session = Depends(get_db),
):
    """Includes expired items, unlike the public listing."""
    _managed_office(db, office_id, session)
    return office_service.list_media(db, office_id, include_expired=True)


@router.post(
    "/offices/{office_id}/media",
    response_model=OfficeMediaRead,
    status_code=201,
    dependencies=[Depends(require_csrf_header)],
)
def create_office_media(
    office_id: int,
    data: OfficeMediaCreate,
    session: UserSession = Depends(require_roles(MANAGER_ROLES)),
    db: Session = Depends(get_db),
):
    _managed_office(db, office_id, session)
    return office_service.create_media(db, office_id, data)


@router.delete(
    "/offices/{office_id}/media/{media_id}",
    status_code=204,
    dependencies=[Depends(require_csrf_header)],
)
def delete_office_media(
    office_id: int,
    media_id: int,
    session: UserSession = Depends(require_roles(MANAGER_ROLES)),
    db: Session = Depends(get_db),
):
    _managed_office(db, office_id, session)
    media = office_service.get_media(db, media_id, office_id)
    if not media:
        raise HTTPException(status_code=404, detail="Media not found")
    office_service.delete_row(db, media)
    return Response(status_code=204)


@router.post(
    "/offices/{office_id}/posts",
    response_model=OfficePostRead,
    status_code=201,
    dependencies=[Depends(require_csrf_header)],
)
def create_office_post(
    office_id: int,
    data: OfficePostCreate,
    session: UserSession = Depends(require_roles(MANAGER_ROLES)),
    db: Session = Depends(get_db),
):
    _managed_office(db, office_id, session)
    return office_service.create_office_post(db, office_id, session.user_id, data)


@router.delete(
    "/offices/{office_id}/posts/{post_id}",
    status_code=204,
    dependencies=[Depends(require_csrf_header)],
)
def delete_office_post(
    office_id: int,
    post_id: int,
    session: UserSession = Depends(require_roles(MANAGER_ROLES)),
    db: Session = Depends(get_db),
):
    _managed_office(db, office_id, session)
    post = office_service.get_office_post(db, post_id, office_id)
    if not post:
        raise HTTPException(status_code=404, detail="Post not found")
    office_service.delete_row(db, post)
    return Response(status_code=204)


# =============================================================================
# Visitor chat (receptionist side)
# =============================================================================


@router.get("/offices/{office_id}/messages/unread", response_model=UnreadMessagesResponse)
def unread_visitor_messages(
    office_id: int,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    _staffed_office(db, office_id, session)
    return UnreadMessagesResponse(count=office_service.unread_visitor_message_count(db, office_id))


@router.get("/offices/{office_id}/messages", response_model=list[OfficeMessageRead])
def list_visitor_messages(
    office_id: int,
    session_id: str | None = None,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    """Reading the conversation marks the visitor's messages read."""
    _staffed_office(db, office_id, session)
    office_service.mark_visitor_messages_read(db, office_id, session_id)
    return office_service.list_messages(db, office_id, session_id)


@router.post(
    "/offices/{office_id}/messages",
    response_model=OfficeMessageRead,
    status_code=201,
    dependencies=[Depends(require_csrf_header)],
)
def reply_to_visitor(
    office_id: int,
    data: ReceptionistMessageCreate,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    _staffed_office(db, office_id, session)
    sender = user_service.get_user(db, session.user_id)
    return office_service.create_receptionist_message(db, office_id, sender, data)


# =============================================================================
# Follow
# =============================================================================


def _follow_status(db: Session, office_id: int, session: UserSession) -> OfficeFollowStatus:
    return OfficeFollowStatus(
        is_following=office_service.is_following(db, office_id, session.user_id),
        follower_count=office_service.follower_count(db, office_id),
    )


@router.get("/offices/{office_id}/follow", response_model=OfficeFollowStatus)
def get_follow_status(
    office_id: int,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    _get_office_or_404(db, office_id)
    return _follow_status(db, office_id, session)


@router.post(
    "/offices/{office_id}/follow",
    response_model=OfficeFollowStatus,
    dependencies=[Depends(require_csrf_header)],
)
def follow_office(
    office_id: int,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    _get_office_or_404(db, office_id)
    try:
        office_service.follow(db, office_id, session.user_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _follow_status(db, office_id, session)


@router.delete(
    "/offices/{office_id}/follow",
    response_model=OfficeFollowStatus,
    dependencies=[Depends(require_csrf_header)],
)
def unfollow_office(
    office_id: int,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    _get_office_or_404(db, office_id)
    try:
        office_service.unfollow(db, office_id, session.user_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _follow_status(db, office_id, session)


# =============================================================================
# Video calls (receptionist side)
# =============================================================================


@router.get("/offices/{office_id}/video-calls", response_model=list[VideoCallRead])
def list_video_calls(
    office_id: int,
    status: VideoCallStatus | None = None,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    _staffed_office(db, office_id, session)
    return video_call_service.list_calls(db, office_id, status.value if status else None)


def _call_action(db: Session, office_id: int, call_id: int, session: UserSession, action: str):
    _staffed_office(db, office_id, session)
    call = video_call_service.get_call(db, call_id, office_id)
    if not call:
        raise HTTPException(status_code=404, detail="Video call not found")
    try:
        return video_call_service.transition(db, call, action, receptionist_id=session.user_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post(
    "/offices/{office_id}/video-calls/{call_id}/accept",
    response_model=VideoCallRead,
    dependencies=[Depends(require_csrf_header)],
)
def accept_video_call(
    office_id: int,
    call_id: int,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    return _call_action(db, office_id, call_id, session, "accept")


@router.post(
    "/offices/{office_id}/video-calls/{call_id}/decline",
    response_model=VideoCallRead,
    dependencies=[Depends(require_csrf_header)],
)
def decline_video_call(
    office_id: int,
    call_id: int,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    return _call_action(db, office_id, call_id, session, "decline")


@router.post(
    "/offices/{office_id}/video-calls/{call_id}/end",
    response_model=VideoCallRead,
    dependencies=[Depends(require_csrf_header)],
)
def end_video_call(
    office_id: int,
    call_id: int,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    return _call_action(db, office_id, call_id, session, "end")
