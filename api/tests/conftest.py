import os

# Point the app's own engine at the test database before anything imports it
TEST_DATABASE_URL = os.environ.get('EARNVIEW_TEST_DATABASE_URL')
os.environ.setdefault('EARNVIEW_DATABASE_URL', TEST_DATABASE_URL or 'sqlite+aiosqlite://')

from datetime import datetime, timedelta  # noqa: E402
from decimal import Decimal  # noqa: E402

import pytest  # noqa: E402
from httpx import AsyncClient, ASGITransport  # noqa: E402
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession  # noqa: E402

from earnview.main import app  # noqa: E402
from earnview.config import settings  # noqa: E402
from earnview.db.database import Base, get_db  # noqa: E402
from earnview.models import User, AdView  # noqa: E402
from earnview import models  # noqa: E402,F401

# A fixed noon keeps cooldown/day arithmetic away from midnight
NOON = datetime(2026, 3, 2, 12, 0, 0)

ADMIN_HEADERS = {
    'username': settings.admin_username,
    'password': settings.admin_password,
}


@pytest.fixture
def database_url(tmp_path):
    """Fresh SQLite file per test unless a PostgreSQL test URL is given."""
    return TEST_DATABASE_URL or f'sqlite+aiosqlite:///{tmp_path / "earnview_test.db"}'


@pytest.fixture
async def session_factory(database_url):
    """Create test database tables."""
    engine = create_async_engine(database_url, echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def client(session_factory):
    """Async HTTP client for testing."""

    async def override_get_db():
        """Override database dependency for tests."""
        async with session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()

    app.dependency_overrides[get_db] = override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url='http://test') as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
async def db_session(session_factory):
    """Database session for direct queries in tests."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def make_user(db_session):
    """Insert a user directly (no bcrypt round, no API)."""
    counter = {'n': 0}

    async def _make_user(
        balance: Decimal = Decimal('0'),
        referred_by: int | None = None,
        paypal_email: str | None = None,
        status: str = 'active',
    ) -> User:
        counter['n'] += 1
        n = counter['n']
        user = User(
            username=f'user{n}',
            email=f'user{n}@example.com',
            password_hash='not-a-real-hash',
            referral_code=f'CODE{n:04d}',
            referred_by=referred_by,
            paypal_email=paypal_email,
            balance=balance,
            total_earned=balance,
            status=status,
        )
        db_session.add(user)
        await db_session.commit()
        return user

    return _make_user


@pytest.fixture
def add_views(db_session):
    """Insert past ad views for a user, one every 31 seconds ending at `until`."""

    async def _add_views(user_id: int, count: int, until: datetime) -> None:
        for i in range(count):
            db_session.add(AdView(
                user_id=user_id,
                ad_type='video',
                earning=settings.ad_user_earning,
                revenue=settings.ad_platform_revenue,
                created_at=until - timedelta(seconds=31 * (count - i)),
            ))
        await db_session.commit()

    return _add_views


async def register(client: AsyncClient, username: str, referral_code: str | None = None) -> dict:
    """Register through the API and return the JSON body."""
    payload = {
        'username': username,
        'email': f'{username}@example.com',
        'password': 'secret123',
    }
    if referral_code:
        payload['referralCode'] = referral_code
    resp = await client.post('/api/auth/register', json=payload)
    assert resp.status_code == 200, resp.text
    return resp.json()


def bearer(token: str) -> dict:
    return {'Authorization': f'Bearer {token}'}
