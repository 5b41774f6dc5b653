from datetime import datetime
from decimal import Decimal
from sqlalchemy import String, ForeignKey, DateTime, Index
from sqlalchemy.orm import Mapped, mapped_column

from earnview.db.database import Base
from earnview.models.user import Money


class AdView(Base):
    """One credited ad view. Never updated after insert."""

    __tablename__ = 'ad_views'

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey('users.id', ondelete='CASCADE'), index=True
    )
    ad_type: Mapped[str] = mapped_column(String(50), default='video')

    # What the user got vs. what the platform booked; profit is the difference
    earning: Mapped[Decimal] = mapped_column(Money)
    revenue: Mapped[Decimal] = mapped_column(Money)

    ip_address: Mapped[str | None] = mapped_column(String(64), default=None)
    user_agent: Mapped[str | None] = mapped_column(String(500), default=None)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    __table_args__ = (
        Index('ix_ad_views_user_created', 'user_id', 'created_at'),
    )
