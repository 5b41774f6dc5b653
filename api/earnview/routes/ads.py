"""Ad view crediting."""
import logging
from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from earnview.config import Settings
from earnview.db.database import get_db
from earnview.deps import get_current_user_id, get_settings, http_error
from earnview.schemas.ads import AdCreditRequest, AdCreditResponse
from earnview.services.ledger_service import LedgerService, LedgerError

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post('/credit', response_model=AdCreditResponse)
async def credit_ad(
    request: Request,
    data: AdCreditRequest | None = None,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    config: Settings = Depends(get_settings),
):
    """Credit the caller for one watched ad.

    Rejected with 403 for inactive accounts and 429 inside the cooldown or
    past the daily limit. A rejection leaves no trace in the database.
    """
    ad_type = (data.ad_type if data else None) or 'video'

    svc = LedgerService(db, config)
    try:
        credit = await svc.credit_ad_view(
            user_id,
            ad_type=ad_type,
            ip_address=request.client.host if request.client else None,
            user_agent=request.headers.get('user-agent'),
        )
    except LedgerError as e:
        logger.debug(f'Ad credit rejected for user {user_id}: {e.reason}')
        raise http_error(e)
    await db.commit()

    return AdCreditResponse(
        earned=float(credit.earned),
        balance=float(credit.balance),
        total_earned=float(credit.total_earned),
        ads_watched_today=credit.ads_watched_today,
        daily_limit=credit.daily_limit,
    )
