"""Balance-mutating operations: ad credits, withdrawals, referral bonuses.

Every operation runs inside the caller's session and locks the user row
before reading anything it will check, so concurrent requests for the same
user are applied one after the other. Nothing is committed here; the calling
route commits the request session as a whole.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, date, time, timedelta
from decimal import Decimal

from sqlalchemy import select, func, desc, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from earnview.config import Settings, settings
from earnview.models.user import User
from earnview.models.ad_view import AdView
from earnview.models.withdrawal import Withdrawal, WithdrawalStatus, WithdrawalMethod
from earnview.models.revenue import DailyRevenue
from earnview.models.referral import ReferralEarning

logger = logging.getLogger(__name__)


class LedgerError(Exception):
    """Base for rejected ledger operations. Nothing has been written when raised."""
    reason = 'ledger_error'
    status_code = 400
    default_message = 'Operation rejected'

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)


class AccountNotActive(LedgerError):
    reason = 'account_not_active'
    status_code = 403
    default_message = 'Account not active'


class DailyLimitReached(LedgerError):
    reason = 'daily_limit_reached'
    status_code = 429
    default_message = 'Daily ad limit reached'


class CooldownActive(LedgerError):
    reason = 'cooldown_active'
    status_code = 429
    default_message = 'Please wait between ads'


class UserNotFound(LedgerError):
    reason = 'user_not_found'
    status_code = 404
    default_message = 'User not found'


class BelowMinimumWithdrawal(LedgerError):
    reason = 'below_minimum'
    status_code = 400
    default_message = 'Balance below minimum withdrawal'


class PendingWithdrawalExists(LedgerError):
    reason = 'pending_withdrawal_exists'
    status_code = 409
    default_message = 'You have a pending withdrawal'


class PayoutEmailRequired(LedgerError):
    reason = 'payout_email_required'
    status_code = 400
    default_message = 'PayPal email required'


class WithdrawalNotFound(LedgerError):
    reason = 'withdrawal_not_found'
    status_code = 404
    default_message = 'Withdrawal not found'


@dataclass
class AdCredit:
    """Outcome of a successful ad credit."""
    earned: Decimal
    balance: Decimal
    total_earned: Decimal
    ads_watched_today: int
    daily_limit: int


def day_bounds(day: date) -> tuple[datetime, datetime]:
    """[start, end) of a calendar day as naive datetimes."""
    start = datetime.combine(day, time.min)
    return start, start + timedelta(days=1)


class LedgerService:
    """Handles all balance operations. Every movement goes through here."""

    def __init__(self, db: AsyncSession, config: Settings = settings):
        self.db = db
        self.config = config

    async def credit_ad_view(
        self,
        user_id: int,
        ad_type: str = 'video',
        ip_address: str | None = None,
        user_agent: str | None = None,
        now: datetime | None = None,
    ) -> AdCredit:
        """Credit one ad view to an active user.

        Checks, in order: account active, daily limit, cooldown. On success the
        user is credited, the view recorded, today's revenue row bumped and the
        referrer (if any) paid its bonus.
        """
        now = now or datetime.utcnow()
        today = now.date()

        user = await self._lock_user(user_id)
        if not user or not user.is_active:
            raise AccountNotActive()

        watched_today = await self.count_views_on(user_id, today)
        if watched_today >= self.config.daily_ad_limit:
            raise DailyLimitReached(
                f'Daily limit reached ({self.config.daily_ad_limit} ads)'
            )

        cooldown_start = now - timedelta(seconds=self.config.ad_cooldown_seconds)
        recent = await self.db.scalar(
            select(func.count())
            .select_from(AdView)
            .where(AdView.user_id == user_id, AdView.created_at > cooldown_start)
        )
        if recent:
            raise CooldownActive(
                f'Please wait {self.config.ad_cooldown_seconds} seconds between ads'
            )

        earning = self.config.ad_user_earning
        revenue = self.config.ad_platform_revenue

        user.balance += earning
        user.total_earned += earning
        user.last_ad_date = today

        self.db.add(AdView(
            user_id=user_id,
            ad_type=ad_type or 'video',
            earning=earning,
            revenue=revenue,
            ip_address=ip_address,
            user_agent=user_agent,
            created_at=now,
        ))

        # Lock order matters: user, then referrer, then the shared daily row last.
        # A referrer always registered before the user, so user locks never cycle.
        if user.referred_by is not None:
            await self._pay_referral_bonus(user.referred_by, user_id, earning, now)

        await self._add_daily_revenue(today, revenue, earning)

        await self.db.flush()

        logger.info(
            f'Credited user {user_id} {earning} for {ad_type} ad '
            f'({watched_today + 1}/{self.config.daily_ad_limit} today)'
        )
        return AdCredit(
            earned=earning,
            balance=user.balance,
            total_earned=user.total_earned,
            ads_watched_today=watched_today + 1,
            daily_limit=self.config.daily_ad_limit,
        )

    async def request_withdrawal(
        self,
        user_id: int,
        method: str = WithdrawalMethod.PAYPAL.value,
        paypal_email: str | None = None,
        now: datetime | None = None,
    ) -> Withdrawal:
        """Sweep the user's whole balance into a pending withdrawal."""
        user = await self._lock_user(user_id)
        if not user:
            raise UserNotFound()

        amount = user.balance
        if amount < self.config.min_withdrawal:
            raise BelowMinimumWithdrawal(
                f'Minimum withdrawal is ${self.config.min_withdrawal:.2f}'
            )

        pending = await self.db.scalar(
            select(func.count())
            .select_from(Withdrawal)
            .where(
                Withdrawal.user_id == user_id,
                Withdrawal.status == WithdrawalStatus.PENDING.value,
            )
        )
        if pending:
            raise PendingWithdrawalExists()

        destination = paypal_email or user.paypal_email
        if not destination and method == WithdrawalMethod.PAYPAL.value:
            raise PayoutEmailRequired()

        user.balance = Decimal('0')
        withdrawal = Withdrawal(
            user_id=user_id,
            amount=amount,
            method=method,
            paypal_email=destination,
            status=WithdrawalStatus.PENDING.value,
            created_at=now or datetime.utcnow(),
        )
        self.db.add(withdrawal)
        try:
            await self.db.flush()
        except IntegrityError as e:
            # Lost a race with another request that opened a pending withdrawal
            raise PendingWithdrawalExists() from e
        await self.db.refresh(withdrawal)

        logger.info(f'User {user_id} requested withdrawal {withdrawal.id} of {amount} via {method}')
        return withdrawal

    async def process_withdrawal(
        self,
        withdrawal_id: int,
        status: WithdrawalStatus,
        transaction_id: str | None = None,
        notes: str | None = None,
        now: datetime | None = None,
    ) -> Withdrawal:
        """Admin override of a withdrawal's status. No transition rules apply."""
        withdrawal = await self.db.get(
            Withdrawal, withdrawal_id, with_for_update=True, populate_existing=True,
        )
        if not withdrawal:
            raise WithdrawalNotFound(f'Withdrawal {withdrawal_id} not found')

        status = WithdrawalStatus(status)
        withdrawal.status = status.value
        withdrawal.transaction_id = transaction_id
        withdrawal.notes = notes
        if status != WithdrawalStatus.PENDING:
            withdrawal.processed_at = now or datetime.utcnow()

        try:
            await self.db.flush()
        except IntegrityError as e:
            raise PendingWithdrawalExists() from e

        logger.info(f'Withdrawal {withdrawal_id} marked {status.value}')
        return withdrawal

    async def count_views_on(self, user_id: int, day: date) -> int:
        """Number of ad views a user has on a calendar day."""
        start, end = day_bounds(day)
        count = await self.db.scalar(
            select(func.count())
            .select_from(AdView)
            .where(
                AdView.user_id == user_id,
                AdView.created_at >= start,
                AdView.created_at < end,
            )
        )
        return count or 0

    async def get_withdrawal_history(
        self,
        user_id: int,
        limit: int = 20,
    ) -> list[Withdrawal]:
        """Get a user's withdrawals, newest first."""
        result = await self.db.execute(
            select(Withdrawal)
            .where(Withdrawal.user_id == user_id)
            .order_by(desc(Withdrawal.created_at), desc(Withdrawal.id))
            .limit(limit)
        )
        return list(result.scalars().all())

    async def _lock_user(self, user_id: int) -> User | None:
        """Load the user row with a row lock held until the transaction ends."""
        return await self.db.get(
            User, user_id, with_for_update=True, populate_existing=True,
        )

    async def _pay_referral_bonus(
        self,
        referrer_id: int,
        referred_id: int,
        earning: Decimal,
        now: datetime,
    ) -> Decimal:
        """Credit the referrer a share of the referred user's earning."""
        bonus = earning * self.config.referral_bonus_rate

        await self.db.execute(
            update(User)
            .where(User.id == referrer_id)
            .values(balance=User.balance + bonus)
        )
        self.db.add(ReferralEarning(
            referrer_id=referrer_id,
            referred_id=referred_id,
            earning=bonus,
            created_at=now,
        ))
        return bonus

    async def _add_daily_revenue(
        self,
        day: date,
        revenue: Decimal,
        paid_out: Decimal,
    ) -> None:
        """Insert today's revenue row or add one view's worth to it."""
        profit = revenue - paid_out

        stmt = self._insert(DailyRevenue).values(
            date=day,
            ad_views=1,
            revenue=revenue,
            paid_out=paid_out,
            profit=profit,
            active_users=1,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=['date'],
            set_={
                'ad_views': DailyRevenue.ad_views + stmt.excluded.ad_views,
                'revenue': DailyRevenue.revenue + stmt.excluded.revenue,
                'paid_out': DailyRevenue.paid_out + stmt.excluded.paid_out,
                'profit': DailyRevenue.profit + stmt.excluded.profit,
                'active_users': DailyRevenue.active_users + stmt.excluded.active_users,
            },
        )
        await self.db.execute(stmt)

    def _insert(self, model):
        """Dialect-specific INSERT that supports ON CONFLICT."""
        if self.db.get_bind().dialect.name == 'sqlite':
            return sqlite_insert(model)
        return pg_insert(model)
