from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from sqlalchemy import String, Numeric, ForeignKey, DateTime, Date, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column

from earnview.db.database import Base

# Money columns keep four decimal places so sub-cent referral bonuses add up exactly
Money = Numeric(12, 4)


class UserStatus(str, Enum):
    ACTIVE = 'active'
    SUSPENDED = 'suspended'


class User(Base):
    """Account with its spendable balance and referral linkage."""

    __tablename__ = 'users'

    id: Mapped[int] = mapped_column(primary_key=True)
    username: Mapped[str] = mapped_column(String(50), unique=True, index=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String(255))

    # balance is swept to zero by a withdrawal; total_earned only ever grows
    balance: Mapped[Decimal] = mapped_column(Money, default=Decimal('0'))
    total_earned: Mapped[Decimal] = mapped_column(Money, default=Decimal('0'))

    referral_code: Mapped[str] = mapped_column(String(20), unique=True, index=True)
    referred_by: Mapped[int | None] = mapped_column(
        ForeignKey('users.id', ondelete='SET NULL'), default=None,
    )

    paypal_email: Mapped[str | None] = mapped_column(String(255), default=None)
    status: Mapped[str] = mapped_column(String(20), default=UserStatus.ACTIVE.value)
    last_ad_date: Mapped[date | None] = mapped_column(Date, default=None)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    __table_args__ = (
        CheckConstraint('balance >= 0', name='ck_users_balance_non_negative'),
    )

    @property
    def is_active(self) -> bool:
        return self.status == UserStatus.ACTIVE.value
