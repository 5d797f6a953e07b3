"""Tickets router."""

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.orm import Session

from desktown.core.deps import get_current_session, get_db, require_csrf_header
from desktown.db.enums import TicketStatus
from desktown.schemas.auth import UserSession
from desktown.schemas.task import TicketCreate, TicketRead, TicketUpdate
from desktown.services import ticket_service

router = APIRouter()


def _get_ticket_or_404(db: Session, ticket_id: int):
    ticket = ticket_service.get_ticket(db, ticket_id)
    if not ticket:
        raise HTTPException(status_code=404, detail="Ticket not found")
    return ticket


@router.get("/tickets", response_model=list[TicketRead])
def list_tickets(
    status: TicketStatus | None = None,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    return ticket_service.list_tickets(db, status=status.value if status else None)


@router.get("/tickets/{ticket_id}", response_model=TicketRead)
def get_ticket(
    ticket_id: int,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    return _get_ticket_or_404(db, ticket_id)


@router.post(
    "/tickets",
    response_model=TicketRead,
    status_code=201,
    dependencies=[Depends(require_csrf_header)],
)
def create_ticket(
    data: TicketCreate,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    try:
        return ticket_service.create_ticket(db, session.user_id, data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.patch(
    "/tickets/{ticket_id}",
    response_model=TicketRead,
    dependencies=[Depends(require_csrf_header)],
)
def update_ticket(
    ticket_id: int,
    data: TicketUpdate,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    ticket = _get_ticket_or_404(db, ticket_id)
    try:
        return ticket_service.update_ticket(db, ticket, data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.delete("/tickets/{ticket_id}", status_code=204, dependencies=[Depends(require_csrf_header)])
def delete_ticket(
    ticket_id: int,
    session: UserSession = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    ticket = _get_ticket_or_404(db, ticket_id)
    ticket_service.delete_ticket(db, ticket)
    return Response(status_code=204)
