"""Platform-wide reporting for the admin dashboard."""

from datetime import datetime

from sqlalchemy import func
from sqlalchemy.orm import Session

from desktown.core.config import settings
from desktown.db.base import utcnow
from desktown.db.enums import ApprovalStatus, OrderStatus
from desktown.db.models import Office, ServiceOrder, User

GROWTH_MONTHS = 6


def _paid_revenue(db: Session) -> int:
    return int(
        db.query(func.coalesce(func.sum(ServiceOrder.quoted_price), 0))
        .filter(ServiceOrder.status == OrderStatus.PAID.value)
        .scalar()
        or 0
    )


def get_stats(db: Session) -> dict:
    return {
        "total_users": db.query(func.count(User.id)).scalar() or 0,
        "total_offices": db.query(func.count(Office.id)).scalar() or 0,
        "pending_offices": db.query(func.count(Office.id))
        .filter(Office.approval_status == ApprovalStatus.PENDING.value)
        .scalar()
        or 0,
        "total_orders": db.query(func.count(ServiceOrder.id)).scalar() or 0,
        "paid_revenue": _paid_revenue(db),
    }


def _month_starts(now: datetime, months: int) -> list[tuple[int, int]]:
    year, month = now.year, now.month
    keys = []
    for _ in range(months):
        keys.append((year, month))
        month -= 1
        if month == 0:
            year, month = year - 1, 12
    return list(reversed(keys))


def get_growth_data(db: Session, months: int = GROWTH_MONTHS, now: datetime | None = None) -> list[dict]:
    """
    User signups per calendar month, oldest first, zero-filled.

    Bucketing happens in Python so the query stays portable across
    Postgres and SQLite.
    """
    now = now or utcnow()
    keys = _month_starts(now, months)
    first_year, first_month = keys[0]
    window_start = datetime(first_year, first_month, 1, tzinfo=now.tzinfo)

    counts = {key: 0 for key in keys}
    rows = db.query(User.created_at).filter(User.created_at >= window_start).all()
    for (created_at,) in rows:
        key = (created_at.year, created_at.month)
        if key in counts:
            counts[key] += 1

    return [{"month": f"{y:04d}-{m:02d}", "users": counts[(y, m)]} for y, m in keys]


def list_all_offices(db: Session) -> list[Office]:
    return db.query(Office).order_by(Office.created_at.desc(), Office.id.desc()).all()


def get_financials(db: Session) -> dict:
    rate = settings.PLATFORM_COMMISSION_RATE
    rows = (
        db.query(
            Office.id,
            Office.name,
            func.count(ServiceOrder.id),
            func.coalesce(func.sum(ServiceOrder.quoted_price), 0),
        )
        .join(ServiceOrder, ServiceOrder.office_id == Office.id)
        .filter(ServiceOrder.status == OrderStatus.PAID.value)
        .group_by(Office.id, Office.name)
        .order_by(func.sum(ServiceOrder.quoted_price).desc())
        .all()
    )

    by_office = [
        {
            "office_id": office_id,
            "office_name": name,
            "paid_orders": count,
            "revenue": int(revenue),
        }
        for office_id, name, count, revenue in rows
    ]
    total = sum(item["revenue"] for item in by_office)
    commission = round(total * rate)
    return {
        "total_revenue": total,
        "platform_commission": commission,
        "net_to_offices": total - commission,
        "commission_rate": rate,
        "paid_orders": sum(item["paid_orders"] for item in by_office),
        "by_office": by_office,
    }
