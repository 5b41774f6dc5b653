from datetime import datetime
from decimal import Decimal
from sqlalchemy import ForeignKey, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from earnview.db.database import Base
from earnview.models.user import Money


class ReferralEarning(Base):
    """Bonus paid to a referrer out of a referred user's ad credit."""

    __tablename__ = 'referral_earnings'

    id: Mapped[int] = mapped_column(primary_key=True)
    referrer_id: Mapped[int] = mapped_column(
        ForeignKey('users.id', ondelete='CASCADE'), index=True
    )
    referred_id: Mapped[int] = mapped_column(
        ForeignKey('users.id', ondelete='CASCADE')
    )
    earning: Mapped[Decimal] = mapped_column(Money)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
