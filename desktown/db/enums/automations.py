"""Task automation enums."""

from enum import Enum


class AutomationStatus(str, Enum):
    """
    pending -> processing -> ready -> approved | rejected
    processing -> pending (webhook delivery failed)
    completed: finished by an n8n internal-email action
    """
    PENDING = "pending"
    PROCESSING = "processing"
    READY = "ready"
    APPROVED = "approved"
    REJECTED = "rejected"
    COMPLETED = "completed"
