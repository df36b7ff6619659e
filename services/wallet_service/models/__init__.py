"""Wallet Service models package.

Re-exports all models and enums so that:
  - ``from services.wallet_service.models import Recharge`` works
  - Alembic env.py imports see every table
  - SQLAlchemy's mapper registry sees every model class on import

When adding a new model, add both its import and its __all__ entry.
"""

from services.wallet_service.models.enums import (  # noqa: F401
    RechargeStatus,
    TransactionDirection,
    TransactionType,
)
from services.wallet_service.models.recharge import Recharge  # noqa: F401
from services.wallet_service.models.transaction import WalletTransaction  # noqa: F401

__all__ = [
    # Enums
    "RechargeStatus",
    "TransactionDirection",
    "TransactionType",
    # Models
    "Recharge",
    "WalletTransaction",
]
