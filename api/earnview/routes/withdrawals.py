from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from earnview.config import Settings
from earnview.db.database import get_db
from earnview.deps import get_current_user_id, get_settings, http_error
from earnview.schemas.withdrawal import (
    WithdrawalCreate, WithdrawalCreated, WithdrawalEntry, WithdrawalHistory,
)
from earnview.services.ledger_service import LedgerService, LedgerError

PROCESSING_NOTICE = 'Withdrawal request submitted. Processing within 24-48 hours.'

router = APIRouter()


@router.post('/request', response_model=WithdrawalCreated)
async def request_withdrawal(
    data: WithdrawalCreate | None = None,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    config: Settings = Depends(get_settings),
):
    """Withdraw the entire balance. Paid out manually."""
    data = data or WithdrawalCreate()
    svc = LedgerService(db, config)
    try:
        withdrawal = await svc.request_withdrawal(
            user_id, method=data.method, paypal_email=data.paypal_email,
        )
    except LedgerError as e:
        raise http_error(e)
    await db.commit()

    return WithdrawalCreated(message=PROCESSING_NOTICE, amount=float(withdrawal.amount))


@router.get('/history', response_model=WithdrawalHistory)
async def withdrawal_history(
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """The caller's 20 most recent withdrawals."""
    rows = await LedgerService(db).get_withdrawal_history(user_id, limit=20)
    return WithdrawalHistory(withdrawals=[
        WithdrawalEntry(
            id=w.id,
            amount=float(w.amount),
            method=w.method,
            status=w.status,
            created_at=w.created_at,
            processed_at=w.processed_at,
        )
        for w in rows
    ])
