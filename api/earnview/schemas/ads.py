from pydantic import Field

from earnview.schemas.base import CamelModel


class AdCreditRequest(CamelModel):
    ad_type: str | None = Field('video', max_length=50)


class AdCreditResponse(CamelModel):
    """Result of one credited ad view."""
    success: bool = True
    earned: float
    balance: float
    total_earned: float
    ads_watched_today: int
    daily_limit: int
