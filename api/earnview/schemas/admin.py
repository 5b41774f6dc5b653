from earnview.schemas.base import CamelModel


class TodayStats(CamelModel):
    """Today's revenue row. Keys stay snake_case to match the dashboard."""
    ad_views: int = 0
    revenue: float = 0.0
    paid_out: float = 0.0
    profit: float = 0.0
    active_users: int = 0

    class Config:
        alias_generator = None


class PendingTotals(CamelModel):
    amount: float = 0.0
    count: int = 0


class AllTimeStats(CamelModel):
    revenue: float = 0.0
    paid_out: float = 0.0
    profit: float = 0.0


class AdminStats(CamelModel):
    success: bool = True
    today: TodayStats
    total_users: int
    active_today: int
    pending_withdrawals: PendingTotals
    all_time: AllTimeStats


class MessageResponse(CamelModel):
    success: bool = True
    message: str
