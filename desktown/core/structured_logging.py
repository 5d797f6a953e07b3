"""Structured logging helpers."""

import logging
from typing import Any

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Root logging setup for the API process."""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)


def build_log_context(
    *,
    user_id: str | None = None,
    office_id: int | None = None,
    order_id: int | None = None,
    route: str | None = None,
    method: str | None = None,
) -> dict[str, Any]:
    """Return a log context dict with only the populated keys."""
    context: dict[str, Any] = {}
    if user_id:
        context["user_id"] = user_id
    if office_id is not None:
        context["office_id"] = office_id
    if order_id is not None:
        context["order_id"] = order_id
    if route:
        context["route"] = route
    if method:
        context["method"] = method
    return context
