"""Enum definitions for application constants."""

from desktown.db.enums.auth import ADMIN_ROLES, MANAGER_ROLES, PresenceStatus, Role
from desktown.db.enums.automations import AutomationStatus
from desktown.db.enums.chat import MessageType, ThreadType
from desktown.db.enums.notifications import NotificationType, ObjectVisibility
from desktown.db.enums.offices import (
    ApprovalStatus,
    MessageSenderType,
    OfficeMediaType,
    ServiceCommentStatus,
    ServiceRequestStatus,
    VideoCallStatus,
)
from desktown.db.enums.payments import (
    CHECKOUT_ALLOWED_FROM,
    MANUAL_ORDER_STATUSES,
    OrderStatus,
)
from desktown.db.enums.work import (
    AttendeeStatus,
    JobPostingStatus,
    TaskPriority,
    TaskStatus,
    TicketStatus,
    TransactionStatus,
    TransactionType,
)

__all__ = [
    "ADMIN_ROLES",
    "MANAGER_ROLES",
    "ApprovalStatus",
    "AttendeeStatus",
    "AutomationStatus",
    "CHECKOUT_ALLOWED_FROM",
    "JobPostingStatus",
    "MANUAL_ORDER_STATUSES",
    "MessageSenderType",
    "MessageType",
    "NotificationType",
    "ObjectVisibility",
    "OfficeMediaType",
    "OrderStatus",
    "PresenceStatus",
    "Role",
    "ServiceCommentStatus",
    "ServiceRequestStatus",
    "TaskPriority",
    "TaskStatus",
    "ThreadType",
    "TicketStatus",
    "TransactionStatus",
    "TransactionType",
    "VideoCallStatus",
]
