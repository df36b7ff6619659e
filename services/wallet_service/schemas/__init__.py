"""Wallet Service schemas package."""

from services.wallet_service.schemas.recharge import (  # noqa: F401
    RechargeCreate,
    RechargeListResponse,
    RechargeReject,
    RechargeResponse,
)
from services.wallet_service.schemas.transaction import (  # noqa: F401
    AdjustBalanceRequest,
    AdjustBalanceResponse,
    TransactionListResponse,
    TransactionResponse,
    WalletSummaryResponse,
)

__all__ = [
    "AdjustBalanceRequest",
    "AdjustBalanceResponse",
    "RechargeCreate",
    "RechargeListResponse",
    "RechargeReject",
    "RechargeResponse",
    "TransactionListResponse",
    "TransactionResponse",
    "WalletSummaryResponse",
]
