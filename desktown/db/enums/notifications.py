"""Notification enums."""

from enum import Enum


class NotificationType(str, Enum):
    TASK_ASSIGNED = "task_assigned"
    NEW_MESSAGE = "new_message"
    NEW_EMAIL = "new_email"
    MEETING_INVITE = "meeting_invite"
    AUTOMATION_READY = "automation_ready"
    ORDER_PAID = "order_paid"
    SERVICE_REQUEST = "service_request"
    OFFICE_APPROVED = "office_approved"
    OFFICE_REJECTED = "office_rejected"
    VIDEO_CALL = "video_call"


class ObjectVisibility(str, Enum):
    PUBLIC = "public"
    PRIVATE = "private"
