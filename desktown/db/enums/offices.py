"""Office storefront enums."""

from enum import Enum


class ApprovalStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class OfficeMediaType(str, Enum):
    VIDEO = "video"
    ANNOUNCEMENT = "announcement"
    IMAGE = "image"


class MessageSenderType(str, Enum):
    VISITOR = "visitor"
    RECEPTIONIST = "receptionist"


class VideoCallStatus(str, Enum):
    """
    Visitor video call lifecycle.

    pending -> active -> ended
    pending -> declined
    pending -> ended (visitor hung up before answer)
    """
    PENDING = "pending"
    ACTIVE = "active"
    ENDED = "ended"
    DECLINED = "declined"


class ServiceRequestStatus(str, Enum):
    PENDING = "pending"
    CONTACTED = "contacted"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class ServiceCommentStatus(str, Enum):
    PUBLISHED = "published"
    PENDING = "pending"
    HIDDEN = "hidden"
