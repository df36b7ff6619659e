"""User request/response schemas."""

import uuid
from datetime import datetime
from typing import Optional

from libs.common.money import Money
from pydantic import BaseModel, ConfigDict, Field
from services.accounts_service.models.enums import UserRole, UserStatus


class UserResponse(BaseModel):
    id: uuid.UUID
    email: str
    name: str
    phone: Optional[str] = None
    role: UserRole
    status: UserStatus
    wallet: Money
    referral_code: Optional[str] = None
    referred_by_id: Optional[uuid.UUID] = None
    total_commissions: Money
    pending_commissions: Money
    last_login_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class UserSummary(BaseModel):
    id: uuid.UUID
    email: str
    name: str

    model_config = ConfigDict(from_attributes=True)


class UserDetailResponse(UserResponse):
    orders_count: int = 0
    referrals_count: int = 0


class UserListResponse(BaseModel):
    users: list[UserResponse]
    total: int
    skip: int
    limit: int


class UserUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    role: Optional[UserRole] = None
    status: Optional[UserStatus] = None
