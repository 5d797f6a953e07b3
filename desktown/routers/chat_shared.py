"""Shared helpers for the chat and employee-portal routers."""

from uuid import UUID

from sqlalchemy.orm import Session

from desktown.schemas.chat import MessageRead, ParticipantRead, ThreadRead
from desktown.services import chat_service


def _message_to_read(message) -> MessageRead:
    return MessageRead(
        id=message.id,
        thread_id=message.thread_id,
        sender_id=message.sender_id,
        sender_name=message.sender.display_name if message.sender else None,
        content=message.content,
        message_type=message.message_type,
        media_url=message.media_url,
        created_at=message.created_at,
    )


def _participant_to_read(participant) -> ParticipantRead:
    user = participant.user
    return ParticipantRead(
        user_id=participant.user_id,
        display_name=user.display_name if user else "",
        profile_image_url=user.profile_image_url if user else None,
        status=user.status if user else None,
        is_admin=participant.is_admin,
        last_read_message_id=participant.last_read_message_id,
        joined_at=participant.joined_at,
    )


def _thread_to_read(thread, unread_count: int = 0, last_message=None) -> ThreadRead:
    return ThreadRead(
        id=thread.id,
        name=thread.name,
        type=thread.type,
        creator_id=thread.creator_id,
        avatar_url=thread.avatar_url,
        description=thread.description,
        last_message_id=thread.last_message_id,
        created_at=thread.created_at,
        updated_at=thread.updated_at,
        unread_count=unread_count,
        last_message=_message_to_read(last_message) if last_message else None,
        participants=[_participant_to_read(p) for p in thread.participants],
    )


def threads_for_user(db: Session, user_id: UUID) -> list[ThreadRead]:
    """Thread summaries with unread counts and last message, batched."""
    threads = chat_service.list_user_threads(db, user_id)
    thread_ids = [t.id for t in threads]
    unread = chat_service.get_unread_counts(db, user_id, thread_ids)
    last_messages = chat_service.get_messages_by_ids(
        db, [t.last_message_id for t in threads if t.last_message_id]
    )
    return [
        _thread_to_read(
            t,
            unread_count=unread.get(t.id, 0),
            last_message=last_messages.get(t.last_message_id),
        )
        for t in threads
    ]


def thread_for_user(db: Session, thread, user_id: UUID) -> ThreadRead:
    last_message = None
    if thread.last_message_id:
        last_message = chat_service.get_messages_by_ids(db, [thread.last_message_id]).get(
            thread.last_message_id
        )
    return _thread_to_read(
        thread,
        unread_count=chat_service.get_unread_count(db, thread.id, user_id),
        last_message=last_message,
    )
