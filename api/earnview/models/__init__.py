from earnview.models.user import User, UserStatus
from earnview.models.ad_view import AdView
from earnview.models.withdrawal import Withdrawal, WithdrawalStatus, WithdrawalMethod
from earnview.models.revenue import DailyRevenue
from earnview.models.referral import ReferralEarning

__all__ = [
    'User',
    'UserStatus',
    'AdView',
    'Withdrawal',
    'WithdrawalStatus',
    'WithdrawalMethod',
    'DailyRevenue',
    'ReferralEarning',
]
