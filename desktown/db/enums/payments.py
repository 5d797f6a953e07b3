"""Service order payment enums."""

from enum import Enum


class OrderStatus(str, Enum):
    """
    Service order status.

    pending -> awaiting_payment -> paid | payment_failed
    payment_failed -> awaiting_payment (retry checkout)
    Manual: cancelled, completed
    """
    PENDING = "pending"
    AWAITING_PAYMENT = "awaiting_payment"
    PAID = "paid"
    PAYMENT_FAILED = "payment_failed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


CHECKOUT_ALLOWED_FROM = {OrderStatus.PENDING.value, OrderStatus.PAYMENT_FAILED.value}
MANUAL_ORDER_STATUSES = {OrderStatus.CANCELLED.value, OrderStatus.COMPLETED.value}
