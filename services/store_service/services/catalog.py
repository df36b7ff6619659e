"""Product catalog and credential pool management."""

import re
import unicodedata
import uuid
from typing import Any, Optional

from fastapi import HTTPException, status
from libs.common.logging import get_logger
from libs.common.money import to_money, usd_to_pen
from services.accounts_service.services.system_config import get_usd_to_pen_rate
from services.store_service.models import (
    AccountStatus,
    OrderItem,
    Product,
    ProductAccount,
    ProductStatus,
)
from services.store_service.schemas import ProductCreate, ProductUpdate
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

# Columns a partial update may not null out
REQUIRED_FIELDS = frozenset(
    {
        "name",
        "slug",
        "provider",
        "price_usd",
        "price_pen",
        "stock",
        "delivery_type",
        "status",
        "featured",
    }
)


def slugify(value: str) -> str:
    """``"Netflix Premium 4K"`` -> ``"netflix-premium-4k"``."""
    value = unicodedata.normalize("NFKD", value).encode("ascii", "ignore").decode()
    value = re.sub(r"[^a-z0-9]+", "-", value.lower())
    return value.strip("-")


async def get_product_or_404(db: AsyncSession, product_id: uuid.UUID) -> Product:
    product = await db.get(Product, product_id)
    if not product:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Product not found"
        )
    return product


async def _ensure_unique_slug(
    db: AsyncSession, slug: str, exclude_id: Optional[uuid.UUID] = None
) -> str:
    if not slug:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid product slug"
        )
    query = select(Product.id).where(Product.slug == slug)
    if exclude_id:
        query = query.where(Product.id != exclude_id)
    if (await db.execute(query)).scalar_one_or_none():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"A product with slug '{slug}' already exists",
        )
    return slug


async def create_product(db: AsyncSession, data: ProductCreate) -> Product:
    slug = await _ensure_unique_slug(db, slugify(data.slug or data.name))
    price_usd = to_money(data.price_usd)
    if data.price_pen is not None:
        price_pen = to_money(data.price_pen)
    else:
        price_pen = usd_to_pen(price_usd, await get_usd_to_pen_rate(db))

    product = Product(
        **data.model_dump(exclude={"slug", "price_usd", "price_pen"}),
        slug=slug,
        price_usd=price_usd,
        price_pen=price_pen,
        sold=0,
    )
    db.add(product)
    await db.flush()
    logger.info("Created product %s (%s)", product.slug, product.id)
    return product


async def update_product(
    db: AsyncSession, product: Product, data: ProductUpdate
) -> dict[str, Any]:
    """Apply a partial update and return the changed fields."""
    changes = data.model_dump(exclude_unset=True)
    if changes.get("slug"):
        changes["slug"] = await _ensure_unique_slug(
            db, slugify(changes["slug"]), exclude_id=product.id
        )
    if changes.get("price_usd") is not None:
        changes["price_usd"] = to_money(changes["price_usd"])
        if changes.get("price_pen") is None:
            changes["price_pen"] = usd_to_pen(
                changes["price_usd"], await get_usd_to_pen_rate(db)
            )

    for field, value in changes.items():
        if value is None and field in REQUIRED_FIELDS:
            continue
        setattr(product, field, value)
    await db.flush()
    return changes


async def delete_or_archive(db: AsyncSession, product: Product) -> bool:
    """Archive products that appear on orders, delete the rest.

    Returns True when the product was archived.
    """
    ordered = (
        await db.execute(
            select(func.count())
            .select_from(OrderItem)
            .where(OrderItem.product_id == product.id)
        )
    ).scalar() or 0

    if ordered:
        product.status = ProductStatus.INACTIVE
        await db.flush()
        logger.info("Archived product %s (on %d order items)", product.slug, ordered)
        return True

    await db.delete(product)
    await db.flush()
    logger.info("Deleted product %s", product.slug)
    return False


async def add_accounts(
    db: AsyncSession, product: Product, credentials: list[str]
) -> list[ProductAccount]:
    """Add credentials to the pool; stock grows by the number added."""
    cleaned = [c.strip() for c in credentials if c and c.strip()]
    if not cleaned:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="At least one credential is required",
        )

    accounts = [
        ProductAccount(
            product_id=product.id,
            credentials=value,
            status=AccountStatus.AVAILABLE,
        )
        for value in cleaned
    ]
    db.add_all(accounts)
    product.stock += len(accounts)
    await db.flush()

    logger.info("Added %d accounts to product %s", len(accounts), product.slug)
    return accounts
