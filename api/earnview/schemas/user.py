from datetime import datetime
from pydantic import Field

from earnview.schemas.base import CamelModel, EMAIL_PATTERN


class ProfileResponse(CamelModel):
    """Full profile of the calling user."""
    id: int
    username: str
    email: str
    balance: float
    total_earned: float
    referral_code: str
    paypal_email: str | None
    created_at: datetime
    ads_watched_today: int = 0


class ProfileEnvelope(CamelModel):
    success: bool = True
    user: ProfileResponse


class PaypalUpdate(CamelModel):
    """Schema for saving the payout email."""
    paypal_email: str = Field(..., max_length=255, pattern=EMAIL_PATTERN)
