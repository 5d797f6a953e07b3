"""Pagination utilities for list endpoints."""

from dataclasses import dataclass

from fastapi import Query


DEFAULT_LIMIT = 50
MAX_LIMIT = 200


@dataclass
class PaginationParams:
    """limit/offset taken from the query string."""
    limit: int
    offset: int


def get_pagination(
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=MAX_LIMIT, description=f"Max items (<= {MAX_LIMIT})"),
    offset: int = Query(0, ge=0),
) -> PaginationParams:
    """
    Pagination dependency.

    Usage:
        @router.get("/items")
        def list_items(pagination: PaginationParams = Depends(get_pagination)):
            ...
    """
    return PaginationParams(limit=limit, offset=offset)

