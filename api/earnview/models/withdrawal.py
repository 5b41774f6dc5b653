from datetime import datetime
from decimal import Decimal
from enum import Enum
from sqlalchemy import String, ForeignKey, DateTime, Index, text
from sqlalchemy.orm import Mapped, mapped_column

from earnview.db.database import Base
from earnview.models.user import Money


class WithdrawalStatus(str, Enum):
    PENDING = 'pending'
    COMPLETED = 'completed'
    FAILED = 'failed'
    CANCELLED = 'cancelled'


class WithdrawalMethod(str, Enum):
    PAYPAL = 'paypal'


class Withdrawal(Base):
    """Cash-out request. Money moves outside the system; this is the record."""

    __tablename__ = 'withdrawals'

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey('users.id', ondelete='CASCADE'), index=True
    )

    # Snapshot of the balance that was swept
    amount: Mapped[Decimal] = mapped_column(Money)
    method: Mapped[str] = mapped_column(String(30), default=WithdrawalMethod.PAYPAL.value)
    paypal_email: Mapped[str | None] = mapped_column(String(255), default=None)

    status: Mapped[str] = mapped_column(
        String(20), default=WithdrawalStatus.PENDING.value, index=True
    )
    transaction_id: Mapped[str | None] = mapped_column(String(255), default=None)
    notes: Mapped[str | None] = mapped_column(String(1000), default=None)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    processed_at: Mapped[datetime | None] = mapped_column(DateTime, default=None)

    __table_args__ = (
        # One open request per user
        Index(
            'uq_withdrawals_user_pending', 'user_id',
            unique=True,
            postgresql_where=text("status = 'pending'"),
            sqlite_where=text("status = 'pending'"),
        ),
    )
