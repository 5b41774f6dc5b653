from earnview.schemas.auth import RegisterRequest, LoginRequest, AuthUser, TokenResponse
from earnview.schemas.user import ProfileResponse, ProfileEnvelope, PaypalUpdate
from earnview.schemas.ads import AdCreditRequest, AdCreditResponse
from earnview.schemas.withdrawal import (
    WithdrawalCreate,
    WithdrawalCreated,
    WithdrawalEntry,
    WithdrawalHistory,
    WithdrawalProcess,
    PendingWithdrawal,
    PendingWithdrawalList,
)
from earnview.schemas.admin import AdminStats, MessageResponse

__all__ = [
    'RegisterRequest',
    'LoginRequest',
    'AuthUser',
    'TokenResponse',
    'ProfileResponse',
    'ProfileEnvelope',
    'PaypalUpdate',
    'AdCreditRequest',
    'AdCreditResponse',
    'WithdrawalCreate',
    'WithdrawalCreated',
    'WithdrawalEntry',
    'WithdrawalHistory',
    'WithdrawalProcess',
    'PendingWithdrawal',
    'PendingWithdrawalList',
    'AdminStats',
    'MessageResponse',
]
