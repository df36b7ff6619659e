"""Accounts Service models package.

Re-exports all models and enums so that:
  - ``from services.accounts_service.models import User`` works
  - SQLAlchemy's mapper registry sees every model class on import
"""

from services.accounts_service.models.audit import AuditLog  # noqa: F401
from services.accounts_service.models.enums import (  # noqa: F401
    AuditAction,
    UserRole,
    UserStatus,
)
from services.accounts_service.models.system_config import SystemConfig  # noqa: F401
from services.accounts_service.models.user import User  # noqa: F401

__all__ = [
    # Enums
    "AuditAction",
    "UserRole",
    "UserStatus",
    # Models
    "AuditLog",
    "SystemConfig",
    "User",
]
