"""Finance transaction service."""

from uuid import UUID

from sqlalchemy.orm import Session

from desktown.db.enums import TransactionStatus
from desktown.db.models import Transaction

DECIDED_STATUSES = {TransactionStatus.APPROVED.value, TransactionStatus.REJECTED.value}


def list_transactions(db: Session, status: str | None = None) -> list[Transaction]:
    query = db.query(Transaction)
    if status:
        query = query.filter(Transaction.status == status)
    return query.order_by(Transaction.created_at.desc(), Transaction.id.desc()).all()


def get_transaction(db: Session, transaction_id: int) -> Transaction | None:
    return db.query(Transaction).filter(Transaction.id == transaction_id).first()


def create_transaction(db: Session, submitter_id: UUID, data) -> Transaction:
    txn = Transaction(
        description=data.description,
        amount=data.amount,
        type=data.type.value,
        category=data.category,
        receipt_url=data.receipt_url,
        submitter_id=submitter_id,
    )
    db.add(txn)
    db.commit()
    db.refresh(txn)
    return txn


def update_transaction(db: Session, txn: Transaction, data, actor_id: UUID) -> Transaction:
    """Approving or rejecting records the approver."""
    updates = data.model_dump(exclude_unset=True)
    for field, value in updates.items():
        if value is None and field in ("description", "amount", "type", "status"):
            continue
        setattr(txn, field, getattr(value, "value", value))

    if updates.get("status") is not None:
        txn.approver_id = actor_id if txn.status in DECIDED_STATUSES else None
    db.commit()
    db.refresh(txn)
    return txn


def delete_transaction(db: Session, txn: Transaction) -> None:
    db.delete(txn)
    db.commit()
