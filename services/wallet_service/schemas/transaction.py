"""Ledger request/response schemas."""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from libs.common.money import Money
from pydantic import BaseModel, ConfigDict, Field, field_validator
from services.wallet_service.models.enums import TransactionDirection, TransactionType


class TransactionResponse(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    idempotency_key: str
    transaction_type: TransactionType
    direction: TransactionDirection
    amount: Money
    balance_before: Money
    balance_after: Money
    description: str
    reference_type: Optional[str] = None
    reference_id: Optional[str] = None
    initiated_by: Optional[uuid.UUID] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class TransactionListResponse(BaseModel):
    transactions: list[TransactionResponse]
    total: int
    skip: int
    limit: int


class WalletSummaryResponse(BaseModel):
    balance: Money
    recent_transactions: list[TransactionResponse]


class AdjustBalanceRequest(BaseModel):
    """Signed amount: positive credits, negative debits."""

    amount: Decimal = Field(..., max_digits=12, decimal_places=2)
    reason: str = Field(..., min_length=1, max_length=500)

    @field_validator("amount")
    @classmethod
    def non_zero(cls, value: Decimal) -> Decimal:
        if value == 0:
            raise ValueError("Amount must not be zero")
        return value


class AdjustBalanceResponse(BaseModel):
    balance: Money
    transaction: TransactionResponse
