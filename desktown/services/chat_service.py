"""
Chat service - threads, participants, messages and unread counts.

Unread is derived at read time: a participant's unread messages are those
in the thread sent by someone else with id > last_read_message_id (all of
them while last_read_message_id is null). Message ids are monotonic, so
marking read just copies the thread's last_message_id.
"""

from uuid import UUID

from sqlalchemy import and_, func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from desktown.db.base import utcnow
from desktown.db.enums import MessageType, NotificationType, ThreadType
from desktown.db.models import ChatParticipant, ChatThread, Message, User


# =============================================================================
# Threads
# =============================================================================


def get_thread(db: Session, thread_id: int) -> ChatThread | None:
    return db.query(ChatThread).filter(ChatThread.id == thread_id).first()


def get_participant(db: Session, thread_id: int, user_id: UUID) -> ChatParticipant | None:
    return db.query(ChatParticipant).filter(
        ChatParticipant.thread_id == thread_id,
        ChatParticipant.user_id == user_id,
    ).first()


def can_manage_thread(thread: ChatThread, participant: ChatParticipant | None, user_id: UUID) -> bool:
    """Thread admins and the creator may rename, delete and manage members."""
    if thread.creator_id == user_id:
        return True
    return bool(participant and participant.is_admin)


def list_user_threads(db: Session, user_id: UUID) -> list[ChatThread]:
    """Threads the user participates in, most recently active first."""
    return db.query(ChatThread).join(
        ChatParticipant, ChatParticipant.thread_id == ChatThread.id
    ).filter(
        ChatParticipant.user_id == user_id
    ).options(
        selectinload(ChatThread.participants).selectinload(ChatParticipant.user)
    ).order_by(
        func.coalesce(ChatThread.last_message_id, 0).desc(),
        ChatThread.id.desc(),
    ).all()


def _existing_user_ids(db: Session, user_ids: list[UUID]) -> set[UUID]:
    if not user_ids:
        return set()
    rows = db.query(User.id).filter(User.id.in_(user_ids), User.is_active.is_(True)).all()
    return {row[0] for row in rows}


def create_group_thread(
    db: Session,
    creator_id: UUID,
    name: str,
    participant_ids: list[UUID],
    description: str | None = None,
    avatar_url: str | None = None,
) -> ChatThread:
    """
    Create a group thread with the creator as admin participant.

    Raises:
        ValueError: a listed participant does not exist
    """
    wanted = {uid for uid in participant_ids if uid != creator_id}
    found = _existing_user_ids(db, list(wanted))
    missing = wanted - found
    if missing:
        raise ValueError("Unknown participant(s)")

    thread = ChatThread(
        name=name,
        type=ThreadType.GROUP.value,
        creator_id=creator_id,
        description=description,
        avatar_url=avatar_url,
    )
    db.add(thread)
    db.flush()
    db.add(ChatParticipant(thread_id=thread.id, user_id=creator_id, is_admin=True))
    for uid in wanted:
        db.add(ChatParticipant(thread_id=thread.id, user_id=uid))
    db.commit()
    db.refresh(thread)
    return thread


def find_direct_thread(db: Session, user_a: UUID, user_b: UUID) -> ChatThread | None:
    """Existing direct thread whose participants include both users."""
    a_threads = db.query(ChatParticipant.thread_id).filter(ChatParticipant.user_id == user_a)
    return db.query(ChatThread).join(
        ChatParticipant, ChatParticipant.thread_id == ChatThread.id
    ).filter(
        ChatThread.type == ThreadType.DIRECT.value,
        ChatParticipant.user_id == user_b,
        ChatThread.id.in_(a_threads),
    ).order_by(ChatThread.id.asc()).first()


def get_or_create_direct_thread(db: Session, user_id: UUID, other_id: UUID) -> tuple[ChatThread, bool]:
    """
    Reuse the direct thread between two users, or create one.

    Returns (thread, created).

    Raises:
        ValueError: self-chat
        LookupError: unknown user
    """
    if user_id == other_id:
        raise ValueError("Cannot start a direct chat with yourself")
    other = db.query(User).filter(User.id == other_id, User.is_active.is_(True)).first()
    if not other:
        raise LookupError("User not found")

    existing = find_direct_thread(db, user_id, other_id)
    if existing:
        return existing, False

    me = db.query(User).filter(User.id == user_id).first()
    thread = ChatThread(
        name=f"{me.display_name if me else 'Direct'} & {other.display_name}",
        type=ThreadType.DIRECT.value,
        creator_id=user_id,
    )
    db.add(thread)
    db.flush()
    db.add(ChatParticipant(thread_id=thread.id, user_id=user_id))
    db.add(ChatParticipant(thread_id=thread.id, user_id=other_id))
    db.commit()
    db.refresh(thread)
    return thread, True


def update_thread(db: Session, thread: ChatThread, updates: dict) -> ChatThread:
    for field, value in updates.items():
        if field == "name" and not value:
            continue
        setattr(thread, field, value)
    db.commit()
    db.refresh(thread)
    return thread


def delete_thread(db: Session, thread: ChatThread) -> None:
    """Participants and messages go with it (ON DELETE CASCADE)."""
    db.delete(thread)
    db.commit()


# =============================================================================
# Participants
# =============================================================================


def list_participants(db: Session, thread_id: int) -> list[ChatParticipant]:
    return db.query(ChatParticipant).options(
        selectinload(ChatParticipant.user)
    ).filter(
        ChatParticipant.thread_id == thread_id
    ).order_by(ChatParticipant.joined_at.asc(), ChatParticipant.id.asc()).all()


def add_participant(
    db: Session,
    thread: ChatThread,
    user_id: UUID,
    is_admin: bool = False,
) -> ChatParticipant:
    """
    Raises:
        ValueError: direct thread, unknown user, or already a member
    """
    if thread.type == ThreadType.DIRECT.value:
        raise ValueError("Cannot add participants to a direct thread")
    if not _existing_user_ids(db, [user_id]):
        raise ValueError("User not found")

    participant = ChatParticipant(thread_id=thread.id, user_id=user_id, is_admin=is_admin)
    db.add(participant)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ValueError("User is already a participant")
    db.refresh(participant)
    return participant


def remove_participant(db: Session, participant: ChatParticipant) -> None:
    db.delete(participant)
    db.commit()


# =============================================================================
# Messages
# =============================================================================


def list_messages(
    db: Session,
    thread_id: int,
    limit: int = 100,
    before_id: int | None = None,
) -> list[Message]:
    """Oldest first within the returned window."""
    query = db.query(Message).options(selectinload(Message.sender)).filter(
        Message.thread_id == thread_id
    )
    if before_id:
        query = query.filter(Message.id < before_id)
    rows = query.order_by(Message.id.desc()).limit(limit).all()
    return list(reversed(rows))


def get_message(db: Session, thread_id: int, message_id: int) -> Message | None:
    return db.query(Message).filter(
        Message.id == message_id,
        Message.thread_id == thread_id,
    ).first()


def post_message(
    db: Session,
    thread: ChatThread,
    sender_id: UUID,
    content: str,
    message_type: MessageType = MessageType.TEXT,
    media_url: str | None = None,
) -> Message:
    """Append a message and advance thread.last_message_id."""
    message = Message(
        thread_id=thread.id,
        sender_id=sender_id,
        content=content,
        message_type=message_type.value,
        media_url=media_url,
    )
    db.add(message)
    db.flush()
    thread.last_message_id = message.id
    thread.updated_at = utcnow()
    db.commit()
    db.refresh(message)
    return message


def notify_participants(db: Session, thread: ChatThread, message: Message, sender_name: str) -> None:
    """new_message notification to everyone in the thread but the sender."""
    from desktown.services import notification_service

    recipients = db.query(ChatParticipant.user_id).filter(
        ChatParticipant.thread_id == thread.id,
        ChatParticipant.user_id != message.sender_id,
    ).all()
    preview = message.content[:120]
    for (user_id,) in recipients:
        notification_service.create_notification(
            db,
            user_id=user_id,
            type=NotificationType.NEW_MESSAGE,
            title=f"{sender_name} in {thread.name}",
            message=preview,
            data={"thread_id": thread.id, "message_id": message.id},
        )


def delete_message(db: Session, thread: ChatThread, message: Message) -> None:
    """Delete and point last_message_id at the newest remaining message."""
    db.delete(message)
    db.flush()
    thread.last_message_id = db.query(func.max(Message.id)).filter(
        Message.thread_id == thread.id
    ).scalar()
    db.commit()


def get_messages_by_ids(db: Session, message_ids: list[int]) -> dict[int, Message]:
    if not message_ids:
        return {}
    rows = db.query(Message).options(selectinload(Message.sender)).filter(
        Message.id.in_(message_ids)
    ).all()
    return {m.id: m for m in rows}


# =============================================================================
# Unread
# =============================================================================


def get_unread_counts(db: Session, user_id: UUID, thread_ids: list[int]) -> dict[int, int]:
    """Unread count per thread for one user, in a single grouped query."""
    if not thread_ids:
        return {}
    rows = db.query(Message.thread_id, func.count(Message.id)).join(
        ChatParticipant,
        and_(
            ChatParticipant.thread_id == Message.thread_id,
            ChatParticipant.user_id == user_id,
        ),
    ).filter(
        Message.thread_id.in_(thread_ids),
        Message.sender_id != user_id,
        or_(
            ChatParticipant.last_read_message_id.is_(None),
            Message.id > ChatParticipant.last_read_message_id,
        ),
    ).group_by(Message.thread_id).all()
    counts = {thread_id: 0 for thread_id in thread_ids}
    counts.update({thread_id: count for thread_id, count in rows})
    return counts


def get_unread_count(db: Session, thread_id: int, user_id: UUID) -> int:
    return get_unread_counts(db, user_id, [thread_id]).get(thread_id, 0)


def mark_read(db: Session, thread: ChatThread, participant: ChatParticipant) -> ChatParticipant:
    """Idempotent: only ever moves the read marker forward."""
    latest = thread.last_message_id
    current = participant.last_read_message_id
    if latest is not None and (current is None or latest > current):
        participant.last_read_message_id = latest
        db.commit()
        db.refresh(participant)
    return participant
