import datetime as dt
from decimal import Decimal
from sqlalchemy import Integer, Date, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from earnview.db.database import Base
from earnview.models.user import Money


class DailyRevenue(Base):
    """Per-day totals, incremented by every ad credit (insert-or-increment)."""

    __tablename__ = 'daily_revenue'

    date: Mapped[dt.date] = mapped_column(Date, primary_key=True)

    ad_views: Mapped[int] = mapped_column(Integer, default=0)
    revenue: Mapped[Decimal] = mapped_column(Money, default=Decimal('0'))
    paid_out: Mapped[Decimal] = mapped_column(Money, default=Decimal('0'))
    profit: Mapped[Decimal] = mapped_column(Money, default=Decimal('0'))

    # Bumped once per view, not per distinct user
    active_users: Mapped[int] = mapped_column(Integer, default=0)

    created_at: Mapped[dt.datetime] = mapped_column(DateTime, default=dt.datetime.utcnow)
