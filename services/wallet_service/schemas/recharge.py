"""Recharge request/response schemas."""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from libs.common.money import Money
from pydantic import BaseModel, ConfigDict, Field
from services.accounts_service.schemas import UserSummary
from services.wallet_service.models.enums import RechargeStatus


class RechargeCreate(BaseModel):
    amount: Decimal = Field(
        ..., gt=0, le=10000, max_digits=12, decimal_places=2, description="USD (0-10,000]"
    )
    payment_method: Optional[str] = Field(None, max_length=50)
    payment_reference: Optional[str] = Field(None, max_length=255)
    payment_proof: Optional[str] = None


class RechargeReject(BaseModel):
    reason: str = Field(..., min_length=1, max_length=500)


class RechargeResponse(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    amount: Money
    status: RechargeStatus
    payment_method: Optional[str] = None
    payment_reference: Optional[str] = None
    payment_proof: Optional[str] = None
    approved_by: Optional[uuid.UUID] = None
    approved_at: Optional[datetime] = None
    rejected_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    user: Optional[UserSummary] = None

    model_config = ConfigDict(from_attributes=True)


class RechargeListResponse(BaseModel):
    recharges: list[RechargeResponse]
    total: int
    skip: int
    limit: int
