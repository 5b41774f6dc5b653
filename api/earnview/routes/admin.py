"""Admin dashboard: stats and the withdrawal queue.

All routes require the admin `username`/`password` headers.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from earnview.db.database import get_db
from earnview.deps import require_admin, http_error
from earnview.schemas.admin import AdminStats, MessageResponse
from earnview.schemas.withdrawal import (
    PendingWithdrawal, PendingWithdrawalList, WithdrawalProcess,
)
from earnview.services.ledger_service import LedgerService, LedgerError
from earnview.services.stats_service import StatsService

router = APIRouter(dependencies=[Depends(require_admin)])


@router.get('/stats', response_model=AdminStats)
async def get_stats(db: AsyncSession = Depends(get_db)):
    """Today's totals, user counts, pending payouts and all-time revenue."""
    stats = await StatsService(db).get_stats()
    return AdminStats(**stats)


@router.get('/withdrawals', response_model=PendingWithdrawalList)
async def list_pending_withdrawals(db: AsyncSession = Depends(get_db)):
    """Pending withdrawals, newest first."""
    rows = await StatsService(db).list_pending_withdrawals()
    return PendingWithdrawalList(withdrawals=[
        PendingWithdrawal(
            id=w.id,
            user_id=w.user_id,
            amount=float(w.amount),
            method=w.method,
            paypal_email=w.paypal_email,
            status=w.status,
            transaction_id=w.transaction_id,
            notes=w.notes,
            created_at=w.created_at,
            processed_at=w.processed_at,
            username=username,
            email=email,
        )
        for w, username, email in rows
    ])


@router.post('/withdrawals/{withdrawal_id}/process', response_model=MessageResponse)
async def process_withdrawal(
    withdrawal_id: int,
    data: WithdrawalProcess,
    db: AsyncSession = Depends(get_db),
):
    """Set a withdrawal's status. The balance is not touched either way."""
    svc = LedgerService(db)
    try:
        await svc.process_withdrawal(
            withdrawal_id, data.status,
            transaction_id=data.transaction_id, notes=data.notes,
        )
    except LedgerError as e:
        raise http_error(e)
    await db.commit()
    return MessageResponse(message='Withdrawal updated')
