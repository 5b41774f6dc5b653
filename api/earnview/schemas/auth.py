from pydantic import Field

from earnview.schemas.base import CamelModel, EMAIL_PATTERN


class RegisterRequest(CamelModel):
    """Schema for creating an account."""
    username: str = Field(..., min_length=3, max_length=50, pattern=r'^[a-zA-Z0-9_.-]+$')
    email: str = Field(..., max_length=255, pattern=EMAIL_PATTERN)
    password: str = Field(..., min_length=6, max_length=72)
    referral_code: str | None = Field(None, max_length=20)


class LoginRequest(CamelModel):
    email: str = Field(..., max_length=255, pattern=EMAIL_PATTERN)
    password: str = Field(..., min_length=1, max_length=72)


class AuthUser(CamelModel):
    """User info returned alongside a token."""
    id: int
    username: str
    email: str
    referral_code: str | None = None


class TokenResponse(CamelModel):
    success: bool = True
    token: str
    user: AuthUser
