"""Ticket service."""

from uuid import UUID

from sqlalchemy.orm import Session

from desktown.db.models import Ticket, User
from desktown.schemas.task import TicketCreate, TicketUpdate


def list_tickets(db: Session, status: str | None = None) -> list[Ticket]:
    query = db.query(Ticket)
    if status:
        query = query.filter(Ticket.status == status)
    return query.order_by(Ticket.created_at.desc(), Ticket.id.desc()).all()


def get_ticket(db: Session, ticket_id: int) -> Ticket | None:
    return db.query(Ticket).filter(Ticket.id == ticket_id).first()


def _check_assignee(db: Session, assignee_id: UUID | None) -> None:
    if assignee_id and not db.query(User.id).filter(User.id == assignee_id).first():
        raise ValueError("Assignee not found")


def create_ticket(db: Session, reporter_id: UUID, data: TicketCreate) -> Ticket:
    """
    Raises:
        ValueError: assignee does not exist
    """
    _check_assignee(db, data.assignee_id)
    ticket = Ticket(
        title=data.title,
        description=data.description,
        reporter_id=reporter_id,
        assignee_id=data.assignee_id,
        priority=data.priority.value,
        status=data.status.value,
    )
    db.add(ticket)
    db.commit()
    db.refresh(ticket)
    return ticket


def update_ticket(db: Session, ticket: Ticket, data: TicketUpdate) -> Ticket:
    updates = data.model_dump(exclude_unset=True)
    _check_assignee(db, updates.get("assignee_id"))
    for field, value in updates.items():
        if field in ("title", "priority", "status") and value is None:
            continue
        setattr(ticket, field, getattr(value, "value", value))
    db.commit()
    db.refresh(ticket)
    return ticket


def delete_ticket(db: Session, ticket: Ticket) -> None:
    db.delete(ticket)
    db.commit()
