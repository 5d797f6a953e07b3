"""Finance transactions router (admin only)."""

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.orm import Session

from desktown.core.deps import get_db, require_csrf_header, require_roles
from desktown.db.enums import ADMIN_ROLES, TransactionStatus
from desktown.schemas.auth import UserSession
from desktown.schemas.transaction import TransactionCreate, TransactionRead, TransactionUpdate
from desktown.services import transaction_service

router = APIRouter()


def _get_transaction_or_404(db: Session, transaction_id: int):
    txn = transaction_service.get_transaction(db, transaction_id)
    if not txn:
        raise HTTPException(status_code=404, detail="Transaction not found")
    return txn


@router.get("/transactions", response_model=list[TransactionRead])
def list_transactions(
    session: UserSession = Depends(require_roles(ADMIN_ROLES)),
    db: Session = Depends(get_db),
):
    return transaction_service.list_transactions(db)


@router.get("/transactions/pending", response_model=list[TransactionRead])
def list_pending_transactions(
    session: UserSession = Depends(require_roles(ADMIN_ROLES)),
    db: Session = Depends(get_db),
):
    return transaction_service.list_transactions(db, status=TransactionStatus.PENDING.value)


@router.get("/transactions/{transaction_id}", response_model=TransactionRead)
def get_transaction(
    transaction_id: int,
    session: UserSession = Depends(require_roles(ADMIN_ROLES)),
    db: Session = Depends(get_db),
):
    return _get_transaction_or_404(db, transaction_id)


@router.post(
    "/transactions",
    response_model=TransactionRead,
    status_code=201,
    dependencies=[Depends(require_csrf_header)],
)
def create_transaction(
    data: TransactionCreate,
    session: UserSession = Depends(require_roles(ADMIN_ROLES)),
    db: Session = Depends(get_db),
):
    return transaction_service.create_transaction(db, session.user_id, data)


@router.patch(
    "/transactions/{transaction_id}",
    response_model=TransactionRead,
    dependencies=[Depends(require_csrf_header)],
)
def update_transaction(
    transaction_id: int,
    data: TransactionUpdate,
    session: UserSession = Depends(require_roles(ADMIN_ROLES)),
    db: Session = Depends(get_db),
):
    """Setting status approved/rejected records the caller as approver."""
    txn = _get_transaction_or_404(db, transaction_id)
    return transaction_service.update_transaction(db, txn, data, session.user_id)


@router.delete(
    "/transactions/{transaction_id}",
    status_code=204,
    dependencies=[Depends(require_csrf_header)],
)
def delete_transaction(
    transaction_id: int,
    session: UserSession = Depends(require_roles(ADMIN_ROLES)),
    db: Session = Depends(get_db),
):
    txn = _get_transaction_or_404(db, transaction_id)
    transaction_service.delete_transaction(db, txn)
    return Response(status_code=204)
