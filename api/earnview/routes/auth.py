"""Account registration and login."""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from earnview.config import Settings
from earnview.db.database import get_db
from earnview.deps import get_settings, http_error
from earnview.schemas.auth import RegisterRequest, LoginRequest, AuthUser, TokenResponse
from earnview.services.auth_service import AuthService, AuthError, issue_access_token

router = APIRouter()


@router.post('/register', response_model=TokenResponse)
async def register(
    data: RegisterRequest,
    db: AsyncSession = Depends(get_db),
    config: Settings = Depends(get_settings),
):
    """Create an account, optionally linked to a referrer by code."""
    svc = AuthService(db, config)
    try:
        user = await svc.register(
            data.username, data.email, data.password, data.referral_code,
        )
    except AuthError as e:
        raise http_error(e)
    await db.commit()

    return TokenResponse(
        token=issue_access_token(user.id, config),
        user=AuthUser(
            id=user.id,
            username=user.username,
            email=user.email,
            referral_code=user.referral_code,
        ),
    )


@router.post('/login', response_model=TokenResponse)
async def login(
    data: LoginRequest,
    db: AsyncSession = Depends(get_db),
    config: Settings = Depends(get_settings),
):
    """Exchange email + password for a bearer token."""
    svc = AuthService(db, config)
    try:
        user = await svc.authenticate(data.email, data.password)
    except AuthError as e:
        raise http_error(e)

    return TokenResponse(
        token=issue_access_token(user.id, config),
        user=AuthUser(id=user.id, username=user.username, email=user.email),
    )
