from datetime import datetime
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from earnview.db.database import get_db
from earnview.deps import get_current_user_id
from earnview.models.user import User
from earnview.schemas.admin import MessageResponse
from earnview.schemas.user import ProfileResponse, ProfileEnvelope, PaypalUpdate
from earnview.services.ledger_service import LedgerService

router = APIRouter()


@router.get('/profile', response_model=ProfileEnvelope)
async def get_profile(
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Balance, earnings, referral code and today's view count."""
    user = await db.get(User, user_id)
    if not user:
        raise HTTPException(
            status_code=404,
            detail={'reason': 'user_not_found', 'message': 'User not found'},
        )

    watched = await LedgerService(db).count_views_on(user_id, datetime.utcnow().date())

    return ProfileEnvelope(user=ProfileResponse(
        id=user.id,
        username=user.username,
        email=user.email,
        balance=float(user.balance),
        total_earned=float(user.total_earned),
        referral_code=user.referral_code,
        paypal_email=user.paypal_email,
        created_at=user.created_at,
        ads_watched_today=watched,
    ))


@router.post('/paypal', response_model=MessageResponse)
async def update_paypal(
    data: PaypalUpdate,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Save the default payout email."""
    user = await db.get(User, user_id)
    if not user:
        raise HTTPException(
            status_code=404,
            detail={'reason': 'user_not_found', 'message': 'User not found'},
        )

    user.paypal_email = data.paypal_email.strip().lower()
    await db.commit()
    return MessageResponse(message='PayPal email updated')
