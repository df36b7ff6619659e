"""Store catalog router: public product listing and detail."""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from libs.db.session import get_async_db
from services.accounts_service.dependencies import get_optional_account
from services.accounts_service.models import User
from services.store_service.models import Product, ProductStatus
from services.store_service.schemas import ProductListResponse, ProductResponse
from sqlalchemy import desc, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(tags=["store"])


@router.get("/products", response_model=ProductListResponse)
async def list_products(
    category: Optional[str] = None,
    featured: Optional[bool] = None,
    search: Optional[str] = None,
    product_status: Optional[ProductStatus] = Query(None, alias="status"),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=200),
    account: Optional[User] = Depends(get_optional_account),
    db: AsyncSession = Depends(get_async_db),
):
    """List products. Only admins see (and may filter by) inactive products."""
    filters = []
    if account is not None and account.is_admin:
        if product_status:
            filters.append(Product.status == product_status)
    else:
        filters.append(Product.status == ProductStatus.ACTIVE)

    if category:
        filters.append(Product.category == category)
    if featured is not None:
        filters.append(Product.featured.is_(featured))
    if search:
        pattern = f"%{search.strip()}%"
        filters.append(
            or_(
                Product.name.ilike(pattern),
                Product.provider.ilike(pattern),
                Product.description.ilike(pattern),
            )
        )

    query = select(Product).where(*filters)
    total = (
        await db.execute(select(func.count()).select_from(Product).where(*filters))
    ).scalar() or 0
    result = await db.execute(
        query.order_by(desc(Product.featured), Product.name).offset(skip).limit(limit)
    )
    return ProductListResponse(
        products=[ProductResponse.model_validate(p) for p in result.scalars().all()],
        total=total,
    )


@router.get("/products/{product_id}", response_model=ProductResponse)
async def get_product(
    product_id: uuid.UUID,
    account: Optional[User] = Depends(get_optional_account),
    db: AsyncSession = Depends(get_async_db),
):
    product = await db.get(Product, product_id)
    is_admin = account is not None and account.is_admin
    if not product or (product.status != ProductStatus.ACTIVE and not is_admin):
        raise HTTPException(status_code=404, detail="Product not found")
    return product
