"""Registration, login and bearer-token handling."""
import logging
import secrets
import string
from datetime import datetime, timedelta, timezone

import bcrypt
import jwt
from jwt import InvalidTokenError
from sqlalchemy import select, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from earnview.config import Settings, settings
from earnview.models.user import User, UserStatus

logger = logging.getLogger(__name__)

REFERRAL_SUFFIX_ALPHABET = string.ascii_uppercase + string.digits
REFERRAL_CODE_ATTEMPTS = 10
# How PostgreSQL and SQLite name the unique referral code in violation messages
REFERRAL_CODE_CONSTRAINTS = ('ix_users_referral_code', 'users.referral_code')


class AuthError(Exception):
    """Base for rejected auth operations."""
    reason = 'unauthorized'
    status_code = 401
    default_message = 'Unauthorized'

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)


class UserAlreadyExists(AuthError):
    reason = 'user_exists'
    status_code = 409
    default_message = 'User already exists'


class ReferralCodeConflict(AuthError):
    reason = 'referral_code_conflict'
    status_code = 409
    default_message = 'Could not assign a referral code, please try again'


class InvalidCredentials(AuthError):
    reason = 'invalid_credentials'
    status_code = 401
    default_message = 'Invalid credentials'


class AccountSuspended(AuthError):
    reason = 'account_suspended'
    status_code = 403
    default_message = 'Account suspended'


class InvalidToken(AuthError):
    reason = 'invalid_token'
    status_code = 401
    default_message = 'Invalid or expired token'


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt()).decode()


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode(), password_hash.encode())
    except ValueError:
        # Malformed stored hash
        return False


def issue_access_token(user_id: int, config: Settings = settings) -> str:
    """Signed JWT carrying the user id, valid for access_token_expire_days."""
    now = datetime.now(timezone.utc)
    payload = {
        'sub': str(user_id),
        'iat': now,
        'exp': now + timedelta(days=config.access_token_expire_days),
    }
    return jwt.encode(payload, config.secret_key, algorithm=config.jwt_algorithm)


def decode_access_token(token: str, config: Settings = settings) -> int:
    """Return the user id from a valid token. Raises InvalidToken otherwise."""
    try:
        payload = jwt.decode(token, config.secret_key, algorithms=[config.jwt_algorithm])
        return int(payload['sub'])
    except (InvalidTokenError, KeyError, ValueError) as e:
        raise InvalidToken() from e


def make_referral_code(username: str) -> str:
    """First four letters of the username plus four random characters."""
    suffix = ''.join(secrets.choice(REFERRAL_SUFFIX_ALPHABET) for _ in range(4))
    return username[:4].upper() + suffix


class AuthService:
    """Creates and authenticates accounts."""

    def __init__(self, db: AsyncSession, config: Settings = settings):
        self.db = db
        self.config = config

    async def register(
        self,
        username: str,
        email: str,
        password: str,
        referral_code: str | None = None,
    ) -> User:
        """Create an account. An unknown referral code is silently ignored."""
        email = email.strip().lower()

        existing = await self.db.execute(
            select(User.id).where(or_(User.email == email, User.username == username))
        )
        if existing.first():
            raise UserAlreadyExists()

        referrer_id = None
        if referral_code:
            referrer_id = await self.db.scalar(
                select(User.id).where(User.referral_code == referral_code)
            )

        user = User(
            username=username,
            email=email,
            password_hash=hash_password(password),
            referral_code=await self._unique_referral_code(username),
            referred_by=referrer_id,
        )
        self.db.add(user)
        try:
            await self.db.flush()
        except IntegrityError as e:
            # Another registration took the generated code after our lookup
            if any(name in str(e.orig) for name in REFERRAL_CODE_CONSTRAINTS):
                raise ReferralCodeConflict() from e
            raise UserAlreadyExists() from e
        await self.db.refresh(user)

        logger.info(f'Registered user {user.id} ({username}), referred_by={referrer_id}')
        return user

    async def authenticate(self, email: str, password: str) -> User:
        result = await self.db.execute(
            select(User).where(User.email == email.strip().lower())
        )
        user = result.scalar_one_or_none()
        if not user:
            raise InvalidCredentials()

        if user.status == UserStatus.SUSPENDED.value:
            raise AccountSuspended()

        if not verify_password(password, user.password_hash):
            raise InvalidCredentials()
        return user

    async def _unique_referral_code(self, username: str) -> str:
        for _ in range(REFERRAL_CODE_ATTEMPTS):
            code = make_referral_code(username)
            taken = await self.db.scalar(
                select(User.id).where(User.referral_code == code)
            )
            if not taken:
                return code
        raise RuntimeError(f'Could not generate a unique referral code for {username}')
