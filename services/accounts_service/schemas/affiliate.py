"""Affiliate program schemas."""

import uuid
from datetime import datetime
from typing import Optional

from libs.common.money import Money
from pydantic import BaseModel, ConfigDict, Field
from services.accounts_service.models.enums import UserStatus
from services.accounts_service.schemas.user import UserResponse


class AffiliateResponse(UserResponse):
    referrals_count: int = 0


class AffiliateListResponse(BaseModel):
    affiliates: list[AffiliateResponse]
    total: int


class ReferralResponse(BaseModel):
    id: uuid.UUID
    name: str
    email: str
    status: UserStatus
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AffiliateCommissionEntry(BaseModel):
    id: uuid.UUID
    order_id: uuid.UUID
    order_number: Optional[str] = None
    order_total: Money
    commission_rate: Money
    amount: Money
    status: str
    paid_at: Optional[datetime] = None
    created_at: datetime


class AffiliateDetailResponse(BaseModel):
    affiliate: AffiliateResponse
    referrals: list[ReferralResponse]
    commissions: list[AffiliateCommissionEntry]


class AffiliateUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    status: Optional[UserStatus] = None


class AffiliateDashboardResponse(BaseModel):
    referral_code: Optional[str] = None
    referral_link: Optional[str] = None
    referrals_count: int
    total_commissions: Money
    pending_commissions: Money
    recent_commissions: list[AffiliateCommissionEntry]
