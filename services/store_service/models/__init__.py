"""Store Service models package.

Re-exports all models and enums so that:
  - ``from services.store_service.models import Order`` works
  - Alembic env.py imports see every table
  - SQLAlchemy's mapper registry sees every model class on import
"""

from services.store_service.models.catalog import (  # noqa: F401
    Product,
    ProductAccount,
)
from services.store_service.models.commerce import (  # noqa: F401
    Commission,
    Order,
    OrderItem,
)
from services.store_service.models.enums import (  # noqa: F401
    AccountStatus,
    CommissionStatus,
    DeliveryType,
    OrderStatus,
    PaymentStatus,
    ProductStatus,
)

__all__ = [
    # Enums
    "AccountStatus",
    "CommissionStatus",
    "DeliveryType",
    "OrderStatus",
    "PaymentStatus",
    "ProductStatus",
    # Catalog
    "Product",
    "ProductAccount",
    # Commerce
    "Commission",
    "Order",
    "OrderItem",
]
