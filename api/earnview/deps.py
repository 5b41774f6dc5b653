"""Shared route dependencies: settings, bearer auth, admin header auth."""
import secrets

from fastapi import Depends, Header, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from earnview.config import Settings, settings
from earnview.services.auth_service import InvalidToken, decode_access_token

bearer_scheme = HTTPBearer(auto_error=False)


def get_settings() -> Settings:
    return settings


def http_error(exc) -> HTTPException:
    """Turn a LedgerError/AuthError into an HTTPException with its reason tag."""
    return HTTPException(
        status_code=exc.status_code,
        detail={'reason': exc.reason, 'message': str(exc)},
    )


async def get_current_user_id(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    config: Settings = Depends(get_settings),
) -> int:
    """User id from a valid `Authorization: Bearer <jwt>` header."""
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={'reason': 'missing_token', 'message': 'Access token required'},
            headers={'WWW-Authenticate': 'Bearer'},
        )
    try:
        return decode_access_token(credentials.credentials, config)
    except InvalidToken as e:
        raise http_error(e)


async def require_admin(
    username: str | None = Header(None),
    password: str | None = Header(None),
    config: Settings = Depends(get_settings),
) -> None:
    """Admin routes authenticate with plain `username`/`password` headers."""
    valid = (
        username is not None
        and password is not None
        and secrets.compare_digest(username.encode(), config.admin_username.encode())
        and secrets.compare_digest(password.encode(), config.admin_password.encode())
    )
    if not valid:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={'reason': 'unauthorized', 'message': 'Unauthorized'},
        )
