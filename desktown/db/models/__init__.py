"""SQLAlchemy ORM models."""

from desktown.db.models.auth import AdminAuditLog, User
from desktown.db.models.automations import N8nSettings, TaskAutomation
from desktown.db.models.chat import ChatParticipant, ChatThread, Message
from desktown.db.models.notifications import InternalEmail, Notification, PushSubscription
from desktown.db.models.offices import (
    CompanyDepartment,
    CompanySection,
    Office,
    OfficeFollower,
    OfficeMedia,
    OfficeMessage,
    OfficePost,
    VideoCall,
)
from desktown.db.models.social import Follower, Post, PostComment, PostLike, Profile
from desktown.db.models.statuses import Status, StatusLike, StatusReply, StatusView
from desktown.db.models.storage import StoredObject
from desktown.db.models.storefront import (
    OfficeService,
    PaymentWebhookEvent,
    ServiceComment,
    ServiceOrder,
    ServiceRating,
    ServiceRequest,
)
from desktown.db.models.work import (
    JobPosting,
    Meeting,
    MeetingAttendee,
    Task,
    Ticket,
    Transaction,
)

__all__ = [
    "AdminAuditLog",
    "ChatParticipant",
    "ChatThread",
    "CompanyDepartment",
    "CompanySection",
    "Follower",
    "InternalEmail",
    "JobPosting",
    "Meeting",
    "MeetingAttendee",
    "Message",
    "N8nSettings",
    "Notification",
    "Office",
    "OfficeFollower",
    "OfficeMedia",
    "OfficeMessage",
    "OfficePost",
    "OfficeService",
    "PaymentWebhookEvent",
    "Post",
    "PostComment",
    "PostLike",
    "Profile",
    "PushSubscription",
    "ServiceComment",
    "ServiceOrder",
    "ServiceRating",
    "ServiceRequest",
    "Status",
    "StatusLike",
    "StatusReply",
    "StatusView",
    "StoredObject",
    "Task",
    "TaskAutomation",
    "Ticket",
    "Transaction",
    "User",
    "VideoCall",
]
