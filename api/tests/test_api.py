"""End-to-end tests through the HTTP API."""
from decimal import Decimal

import pytest
from sqlalchemy import select, func

from earnview.db import database
from earnview.models import User, Withdrawal

from conftest import ADMIN_HEADERS, bearer, register


async def _set_balance(db_session, user_id: int, balance: str, paypal_email: str | None = None):
    user = await db_session.get(User, user_id, populate_existing=True)
    user.balance = Decimal(balance)
    if paypal_email:
        user.paypal_email = paypal_email
    await db_session.commit()


class TestRequestSession:
    async def test_uncommitted_work_is_discarded(self, session_factory, monkeypatch):
        monkeypatch.setattr(database, 'async_session', session_factory)

        sessions = database.get_db()
        session = await sessions.__anext__()
        session.add(User(
            username='ghost', email='ghost@example.com',
            password_hash='x', referral_code='GHOST000',
        ))
        await session.flush()
        await sessions.aclose()

        async with session_factory() as check:
            assert await check.scalar(select(func.count()).select_from(User)) == 0

    async def test_error_rolls_back(self, session_factory, monkeypatch):
        monkeypatch.setattr(database, 'async_session', session_factory)

        sessions = database.get_db()
        session = await sessions.__anext__()
        session.add(User(
            username='ghost', email='ghost@example.com',
            password_hash='x', referral_code='GHOST000',
        ))
        await session.flush()
        with pytest.raises(RuntimeError):
            await sessions.athrow(RuntimeError('boom'))

        async with session_factory() as check:
            assert await check.scalar(select(func.count()).select_from(User)) == 0


class TestHealth:
    async def test_health(self, client):
        resp = await client.get('/api/health')
        assert resp.status_code == 200
        data = resp.json()
        assert data['status'] == 'ok'
        assert 'timestamp' in data


class TestAuthRoutes:
    async def test_register_returns_token_and_code(self, client):
        body = await register(client, 'alice')

        assert body['success'] is True
        assert body['token']
        assert body['user']['username'] == 'alice'
        assert body['user']['email'] == 'alice@example.com'
        assert body['user']['referralCode'].startswith('ALIC')

    async def test_register_duplicate(self, client):
        await register(client, 'alice')
        resp = await client.post('/api/auth/register', json={
            'username': 'alice',
            'email': 'other@example.com',
            'password': 'secret123',
        })
        assert resp.status_code == 409
        assert resp.json()['detail']['reason'] == 'user_exists'

    async def test_register_validation(self, client):
        resp = await client.post('/api/auth/register', json={
            'username': 'al',
            'email': 'not-an-email',
            'password': '123',
        })
        assert resp.status_code == 422

    async def test_login(self, client):
        await register(client, 'bob')
        resp = await client.post('/api/auth/login', json={
            'email': 'bob@example.com',
            'password': 'secret123',
        })
        assert resp.status_code == 200
        assert resp.json()['user']['username'] == 'bob'

    async def test_login_bad_password(self, client):
        await register(client, 'bob')
        resp = await client.post('/api/auth/login', json={
            'email': 'bob@example.com',
            'password': 'wrong-password',
        })
        assert resp.status_code == 401
        assert resp.json()['detail']['reason'] == 'invalid_credentials'

    async def test_login_suspended(self, client, db_session):
        body = await register(client, 'mallory')
        user = await db_session.get(User, body['user']['id'])
        user.status = 'suspended'
        await db_session.commit()

        resp = await client.post('/api/auth/login', json={
            'email': 'mallory@example.com',
            'password': 'secret123',
        })
        assert resp.status_code == 403
        assert resp.json()['detail']['reason'] == 'account_suspended'


class TestBearerAuth:
    async def test_missing_token(self, client):
        resp = await client.post('/api/ads/credit', json={})
        assert resp.status_code == 401
        assert resp.json()['detail']['reason'] == 'missing_token'

    async def test_invalid_token(self, client):
        resp = await client.get('/api/user/profile', headers=bearer('garbage'))
        assert resp.status_code == 401
        assert resp.json()['detail']['reason'] == 'invalid_token'


class TestProfile:
    async def test_profile_and_paypal(self, client):
        body = await register(client, 'carol')
        headers = bearer(body['token'])

        resp = await client.post(
            '/api/user/paypal', json={'paypalEmail': 'Carol@PayPal.com'}, headers=headers,
        )
        assert resp.status_code == 200

        resp = await client.get('/api/user/profile', headers=headers)
        assert resp.status_code == 200
        user = resp.json()['user']
        assert user['username'] == 'carol'
        assert user['balance'] == 0
        assert user['totalEarned'] == 0
        assert user['paypalEmail'] == 'carol@paypal.com'
        assert user['adsWatchedToday'] == 0

    async def test_profile_of_deleted_user(self, client, db_session):
        body = await register(client, 'ghost')
        user = await db_session.get(User, body['user']['id'])
        await db_session.delete(user)
        await db_session.commit()

        resp = await client.get('/api/user/profile', headers=bearer(body['token']))
        assert resp.status_code == 404


class TestAdCreditRoute:
    async def test_first_credit(self, client):
        body = await register(client, 'dave')

        resp = await client.post(
            '/api/ads/credit', json={'adType': 'video'}, headers=bearer(body['token']),
        )

        assert resp.status_code == 200
        assert resp.json() == {
            'success': True,
            'earned': 0.05,
            'balance': 0.05,
            'totalEarned': 0.05,
            'adsWatchedToday': 1,
            'dailyLimit': 500,
        }

    async def test_credit_without_body(self, client):
        body = await register(client, 'dave')
        resp = await client.post('/api/ads/credit', headers=bearer(body['token']))
        assert resp.status_code == 200

    async def test_immediate_second_credit_hits_cooldown(self, client):
        body = await register(client, 'erin')
        headers = bearer(body['token'])

        assert (await client.post('/api/ads/credit', json={}, headers=headers)).status_code == 200
        resp = await client.post('/api/ads/credit', json={}, headers=headers)

        assert resp.status_code == 429
        assert resp.json()['detail']['reason'] == 'cooldown_active'

        profile = (await client.get('/api/user/profile', headers=headers)).json()['user']
        assert profile['balance'] == 0.05
        assert profile['adsWatchedToday'] == 1

    async def test_suspended_user_forbidden(self, client, db_session):
        body = await register(client, 'frank')
        user = await db_session.get(User, body['user']['id'])
        user.status = 'suspended'
        await db_session.commit()

        resp = await client.post('/api/ads/credit', json={}, headers=bearer(body['token']))
        assert resp.status_code == 403
        assert resp.json()['detail']['reason'] == 'account_not_active'

    async def test_referrer_receives_bonus(self, client):
        referrer = await register(client, 'gina')
        referred = await register(client, 'hank', referral_code=referrer['user']['referralCode'])

        resp = await client.post('/api/ads/credit', json={}, headers=bearer(referred['token']))
        assert resp.status_code == 200

        profile = (await client.get(
            '/api/user/profile', headers=bearer(referrer['token']),
        )).json()['user']
        assert profile['balance'] == 0.005
        assert profile['totalEarned'] == 0


class TestWithdrawRoutes:
    async def test_below_minimum(self, client, db_session):
        body = await register(client, 'ivan')
        await _set_balance(db_session, body['user']['id'], '4.99', 'ivan@paypal.com')

        resp = await client.post('/api/withdraw/request', json={'method': 'paypal'},
                                 headers=bearer(body['token']))
        assert resp.status_code == 400
        assert resp.json()['detail']['reason'] == 'below_minimum'

    async def test_request_and_history(self, client, db_session):
        body = await register(client, 'judy')
        headers = bearer(body['token'])
        await _set_balance(db_session, body['user']['id'], '5.00')

        resp = await client.post(
            '/api/withdraw/request',
            json={'method': 'paypal', 'paypalEmail': 'judy@paypal.com'},
            headers=headers,
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data['amount'] == 5.0
        assert '24-48 hours' in data['message']

        profile = (await client.get('/api/user/profile', headers=headers)).json()['user']
        assert profile['balance'] == 0

        history = (await client.get('/api/withdraw/history', headers=headers)).json()
        assert len(history['withdrawals']) == 1
        assert history['withdrawals'][0]['status'] == 'pending'
        assert history['withdrawals'][0]['amount'] == 5.0

    async def test_second_request_conflicts(self, client, db_session):
        body = await register(client, 'kate')
        headers = bearer(body['token'])
        await _set_balance(db_session, body['user']['id'], '8.00', 'kate@paypal.com')

        assert (await client.post('/api/withdraw/request', json={},
                                  headers=headers)).status_code == 200

        await _set_balance(db_session, body['user']['id'], '6.00')
        resp = await client.post('/api/withdraw/request', json={}, headers=headers)
        assert resp.status_code == 409
        assert resp.json()['detail']['reason'] == 'pending_withdrawal_exists'

    async def test_missing_paypal_email(self, client, db_session):
        body = await register(client, 'liam')
        await _set_balance(db_session, body['user']['id'], '5.00')

        resp = await client.post('/api/withdraw/request', json={'method': 'paypal'},
                                 headers=bearer(body['token']))
        assert resp.status_code == 400
        assert resp.json()['detail']['reason'] == 'payout_email_required'


class TestAdminRoutes:
    async def test_requires_credentials(self, client):
        assert (await client.get('/api/admin/stats')).status_code == 401
        resp = await client.get(
            '/api/admin/stats', headers={'username': 'admin', 'password': 'nope'},
        )
        assert resp.status_code == 401

    async def test_stats_on_empty_day(self, client):
        resp = await client.get('/api/admin/stats', headers=ADMIN_HEADERS)
        assert resp.status_code == 200
        data = resp.json()
        assert data['today'] == {
            'ad_views': 0, 'revenue': 0, 'paid_out': 0, 'profit': 0, 'active_users': 0,
        }
        assert data['totalUsers'] == 0
        assert data['pendingWithdrawals'] == {'amount': 0, 'count': 0}

    async def test_stats_after_activity(self, client, db_session):
        alice = await register(client, 'alice')
        bob = await register(client, 'bob')
        await client.post('/api/ads/credit', json={}, headers=bearer(alice['token']))
        await client.post('/api/ads/credit', json={}, headers=bearer(bob['token']))
        await _set_balance(db_session, bob['user']['id'], '6.00', 'bob@paypal.com')
        await client.post('/api/withdraw/request', json={}, headers=bearer(bob['token']))

        data = (await client.get('/api/admin/stats', headers=ADMIN_HEADERS)).json()

        assert data['today']['ad_views'] == 2
        assert data['today']['revenue'] == 0.2
        assert data['today']['paid_out'] == 0.1
        assert data['today']['profit'] == 0.1
        assert data['totalUsers'] == 2
        assert data['activeToday'] == 2
        assert data['pendingWithdrawals'] == {'amount': 6.0, 'count': 1}
        assert data['allTime'] == {'revenue': 0.2, 'paidOut': 0.1, 'profit': 0.1}

    async def test_pending_queue_and_processing(self, client, db_session):
        body = await register(client, 'mona')
        await _set_balance(db_session, body['user']['id'], '5.00', 'mona@paypal.com')
        await client.post('/api/withdraw/request', json={}, headers=bearer(body['token']))

        queue = (await client.get('/api/admin/withdrawals', headers=ADMIN_HEADERS)).json()
        assert len(queue['withdrawals']) == 1
        entry = queue['withdrawals'][0]
        assert entry['username'] == 'mona'
        assert entry['email'] == 'mona@example.com'
        assert entry['paypalEmail'] == 'mona@paypal.com'

        resp = await client.post(
            f'/api/admin/withdrawals/{entry["id"]}/process',
            json={'status': 'completed', 'transactionId': 'TX-1', 'notes': 'done'},
            headers=ADMIN_HEADERS,
        )
        assert resp.status_code == 200

        queue = (await client.get('/api/admin/withdrawals', headers=ADMIN_HEADERS)).json()
        assert queue['withdrawals'] == []

        withdrawal = (await db_session.execute(
            select(Withdrawal).execution_options(populate_existing=True)
        )).scalar_one()
        assert withdrawal.status == 'completed'
        assert withdrawal.transaction_id == 'TX-1'
        assert withdrawal.processed_at is not None

    async def test_process_unknown_status_rejected(self, client):
        resp = await client.post(
            '/api/admin/withdrawals/1/process', json={'status': 'approved'},
            headers=ADMIN_HEADERS,
        )
        assert resp.status_code == 422

    async def test_process_missing_withdrawal(self, client):
        resp = await client.post(
            '/api/admin/withdrawals/404/process', json={'status': 'completed'},
            headers=ADMIN_HEADERS,
        )
        assert resp.status_code == 404
        assert resp.json()['detail']['reason'] == 'withdrawal_not_found'
