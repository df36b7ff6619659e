"""Accounts Service schemas package."""

from services.accounts_service.schemas.admin import (  # noqa: F401
    AuditLogListResponse,
    AuditLogResponse,
    ConfigEntry,
    ConfigListResponse,
    ConfigUpdate,
)
from services.accounts_service.schemas.affiliate import (  # noqa: F401
    AffiliateCommissionEntry,
    AffiliateDashboardResponse,
    AffiliateDetailResponse,
    AffiliateListResponse,
    AffiliateResponse,
    AffiliateUpdate,
    ReferralResponse,
)
from services.accounts_service.schemas.auth import (  # noqa: F401
    AuthResponse,
    LoginRequest,
    MessageResponse,
    RegisterRequest,
)
from services.accounts_service.schemas.user import (  # noqa: F401
    UserDetailResponse,
    UserListResponse,
    UserResponse,
    UserSummary,
    UserUpdate,
)

__all__ = [
    "AffiliateCommissionEntry",
    "AffiliateDashboardResponse",
    "AffiliateDetailResponse",
    "AffiliateListResponse",
    "AffiliateResponse",
    "AffiliateUpdate",
    "AuditLogListResponse",
    "AuditLogResponse",
    "AuthResponse",
    "ConfigEntry",
    "ConfigListResponse",
    "ConfigUpdate",
    "LoginRequest",
    "MessageResponse",
    "ReferralResponse",
    "RegisterRequest",
    "UserDetailResponse",
    "UserListResponse",
    "UserResponse",
    "UserSummary",
    "UserUpdate",
]
