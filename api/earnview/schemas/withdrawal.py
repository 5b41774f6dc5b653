from datetime import datetime
from pydantic import Field

from earnview.models.withdrawal import WithdrawalStatus, WithdrawalMethod
from earnview.schemas.base import CamelModel, EMAIL_PATTERN


class WithdrawalCreate(CamelModel):
    """Schema for requesting a payout of the whole balance."""
    method: str = Field(WithdrawalMethod.PAYPAL.value, min_length=1, max_length=30)
    paypal_email: str | None = Field(None, max_length=255, pattern=EMAIL_PATTERN)


class WithdrawalCreated(CamelModel):
    success: bool = True
    message: str
    amount: float


class WithdrawalEntry(CamelModel):
    """Single withdrawal in a user's history."""
    id: int
    amount: float
    method: str
    status: str
    created_at: datetime
    processed_at: datetime | None


class WithdrawalHistory(CamelModel):
    success: bool = True
    withdrawals: list[WithdrawalEntry]


class WithdrawalProcess(CamelModel):
    """Admin status change for a withdrawal."""
    status: WithdrawalStatus
    transaction_id: str | None = Field(None, max_length=255)
    notes: str | None = Field(None, max_length=1000)


class PendingWithdrawal(CamelModel):
    """Pending withdrawal with its owner, for the admin queue."""
    id: int
    user_id: int
    amount: float
    method: str
    paypal_email: str | None
    status: str
    transaction_id: str | None
    notes: str | None
    created_at: datetime
    processed_at: datetime | None
    username: str
    email: str


class PendingWithdrawalList(CamelModel):
    success: bool = True
    withdrawals: list[PendingWithdrawal]
