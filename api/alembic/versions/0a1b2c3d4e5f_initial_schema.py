"""initial schema: users, ad_views, withdrawals, daily_revenue, referral_earnings

Revision ID: 0a1b2c3d4e5f
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0a1b2c3d4e5f'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

MONEY = sa.Numeric(12, 4)


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('username', sa.String(50), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('balance', MONEY, server_default='0', nullable=False),
        sa.Column('total_earned', MONEY, server_default='0', nullable=False),
        sa.Column('referral_code', sa.String(20), nullable=False),
        sa.Column(
            'referred_by', sa.Integer(),
            sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True,
        ),
        sa.Column('paypal_email', sa.String(255), nullable=True),
        sa.Column('status', sa.String(20), server_default='active', nullable=False),
        sa.Column('last_ad_date', sa.Date(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint('balance >= 0', name='ck_users_balance_non_negative'),
    )
    op.create_index('ix_users_username', 'users', ['username'], unique=True)
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_referral_code', 'users', ['referral_code'], unique=True)

    op.create_table(
        'ad_views',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column(
            'user_id', sa.Integer(),
            sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False,
        ),
        sa.Column('ad_type', sa.String(50), server_default='video', nullable=False),
        sa.Column('earning', MONEY, nullable=False),
        sa.Column('revenue', MONEY, nullable=False),
        sa.Column('ip_address', sa.String(64), nullable=True),
        sa.Column('user_agent', sa.String(500), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_ad_views_user_id', 'ad_views', ['user_id'])
    op.create_index('ix_ad_views_user_created', 'ad_views', ['user_id', 'created_at'])

    op.create_table(
        'withdrawals',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column(
            'user_id', sa.Integer(),
            sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False,
        ),
        sa.Column('amount', MONEY, nullable=False),
        sa.Column('method', sa.String(30), server_default='paypal', nullable=False),
        sa.Column('paypal_email', sa.String(255), nullable=True),
        sa.Column('status', sa.String(20), server_default='pending', nullable=False),
        sa.Column('transaction_id', sa.String(255), nullable=True),
        sa.Column('notes', sa.String(1000), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('processed_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_withdrawals_user_id', 'withdrawals', ['user_id'])
    op.create_index('ix_withdrawals_status', 'withdrawals', ['status'])
    op.create_index(
        'uq_withdrawals_user_pending', 'withdrawals', ['user_id'],
        unique=True,
        postgresql_where=sa.text("status = 'pending'"),
        sqlite_where=sa.text("status = 'pending'"),
    )

    op.create_table(
        'daily_revenue',
        sa.Column('date', sa.Date(), primary_key=True),
        sa.Column('ad_views', sa.Integer(), server_default='0', nullable=False),
        sa.Column('revenue', MONEY, server_default='0', nullable=False),
        sa.Column('paid_out', MONEY, server_default='0', nullable=False),
        sa.Column('profit', MONEY, server_default='0', nullable=False),
        sa.Column('active_users', sa.Integer(), server_default='0', nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
    )

    op.create_table(
        'referral_earnings',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column(
            'referrer_id', sa.Integer(),
            sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False,
        ),
        sa.Column(
            'referred_id', sa.Integer(),
            sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False,
        ),
        sa.Column('earning', MONEY, nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_referral_earnings_referrer_id', 'referral_earnings', ['referrer_id'])


def downgrade() -> None:
    op.drop_table('referral_earnings')
    op.drop_table('daily_revenue')
    op.drop_index('uq_withdrawals_user_pending', 'withdrawals')
    op.drop_table('withdrawals')
    op.drop_table('ad_views')
    op.drop_table('users')
