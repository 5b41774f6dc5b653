"""Seed script: wipe all data and create demo accounts ready for testing.

Usage (from the api directory):
    python seed.py

All demo accounts use the password `password123`.
"""
import asyncio
from decimal import Decimal

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from earnview.db.database import engine, async_session, init_db
from earnview.models import User, AdView, Withdrawal, DailyRevenue, ReferralEarning
from earnview.services.auth_service import AuthService

DEMO_PASSWORD = 'password123'

# Created in order; `referred_by` names an earlier account
TEST_USERS = [
    {
        'username': 'alice',
        'email': 'alice@example.com',
        'referred_by': None,
        'balance': Decimal('0'),
    },
    {
        'username': 'bob',
        'email': 'bob@example.com',
        'referred_by': 'alice',
        'balance': Decimal('1.25'),
    },
    {
        'username': 'eve',
        'email': 'eve@example.com',
        'referred_by': None,
        'balance': Decimal('5.00'),
    },
]


async def wipe_all(db: AsyncSession):
    """Delete all rows in dependency-safe order."""
    for model in (ReferralEarning, AdView, Withdrawal, DailyRevenue, User):
        await db.execute(delete(model))
    await db.commit()
    print('✓ All tables wiped')


async def create_users(db: AsyncSession):
    """Create demo users, linking referrals by code."""
    svc = AuthService(db)
    codes: dict[str, str] = {}
    for u in TEST_USERS:
        user = await svc.register(
            u['username'], u['email'], DEMO_PASSWORD,
            referral_code=codes.get(u['referred_by']),
        )
        user.balance = u['balance']
        user.total_earned = u['balance']
        codes[u['username']] = user.referral_code

        ref = f', referred by {u["referred_by"]}' if u['referred_by'] else ''
        print(f'  ✓ {u["username"]} ({user.referral_code}): ${u["balance"]}, id={user.id}{ref}')

    await db.commit()


async def main():
    print()
    print('=' * 50)
    print('  EarnView Seed Script')
    print('=' * 50)
    print()

    await init_db()
    async with async_session() as db:
        print('[1/2] Wiping all data...')
        await wipe_all(db)

        print('[2/2] Creating demo users...')
        await create_users(db)

    await engine.dispose()

    print()
    print(f'Done! Log in with any demo email and password "{DEMO_PASSWORD}".')
    print()


if __name__ == '__main__':
    asyncio.run(main())
