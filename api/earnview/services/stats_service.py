"""Admin reporting queries."""
from datetime import date, datetime
from sqlalchemy import select, func, desc
from sqlalchemy.ext.asyncio import AsyncSession

from earnview.models.user import User
from earnview.models.ad_view import AdView
from earnview.models.withdrawal import Withdrawal, WithdrawalStatus
from earnview.models.revenue import DailyRevenue
from earnview.services.ledger_service import day_bounds


class StatsService:
    """Read-only aggregates for the admin dashboard."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_stats(self, today: date | None = None) -> dict:
        """Today's revenue row, user counts, pending payouts and all-time totals."""
        today = today or datetime.utcnow().date()
        start, end = day_bounds(today)

        result = await self.db.execute(
            select(DailyRevenue)
            .where(DailyRevenue.date == today)
            .execution_options(populate_existing=True)
        )
        row = result.scalar_one_or_none()

        total_users = await self.db.scalar(select(func.count()).select_from(User))
        active_today = await self.db.scalar(
            select(func.count(func.distinct(AdView.user_id)))
            .where(AdView.created_at >= start, AdView.created_at < end)
        )

        pending = (await self.db.execute(
            select(func.sum(Withdrawal.amount), func.count())
            .select_from(Withdrawal)
            .where(Withdrawal.status == WithdrawalStatus.PENDING.value)
        )).one()

        all_time = (await self.db.execute(
            select(
                func.sum(DailyRevenue.revenue),
                func.sum(DailyRevenue.paid_out),
                func.sum(DailyRevenue.profit),
            )
        )).one()

        return {
            'today': {
                'ad_views': row.ad_views if row else 0,
                'revenue': _money(row.revenue if row else None),
                'paid_out': _money(row.paid_out if row else None),
                'profit': _money(row.profit if row else None),
                'active_users': row.active_users if row else 0,
            },
            'total_users': total_users or 0,
            'active_today': active_today or 0,
            'pending_withdrawals': {
                'amount': _money(pending[0]),
                'count': pending[1] or 0,
            },
            'all_time': {
                'revenue': _money(all_time[0]),
                'paid_out': _money(all_time[1]),
                'profit': _money(all_time[2]),
            },
        }

    async def list_pending_withdrawals(self) -> list[tuple[Withdrawal, str, str]]:
        """Pending withdrawals with the owner's username and email, newest first."""
        result = await self.db.execute(
            select(Withdrawal, User.username, User.email)
            .join(User, Withdrawal.user_id == User.id)
            .where(Withdrawal.status == WithdrawalStatus.PENDING.value)
            .order_by(desc(Withdrawal.created_at), desc(Withdrawal.id))
        )
        return [tuple(r) for r in result.all()]


def _money(value) -> float:
    """SUM() over no rows is NULL; report it as zero."""
    return float(value) if value is not None else 0.0
