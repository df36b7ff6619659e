"""Admin store catalog router: product management and credential pool."""

import uuid

from fastapi import APIRouter, Depends, Request, status
from libs.db.session import get_async_db
from services.accounts_service.dependencies import require_admin
from services.accounts_service.models import AuditAction, User
from services.accounts_service.services.audit import record_audit
from services.store_service.models import AccountStatus, ProductAccount
from services.store_service.schemas import (
    ProductAccountListResponse,
    ProductAccountResponse,
    ProductAccountsCreate,
    ProductCreate,
    ProductDeleteResponse,
    ProductResponse,
    ProductUpdate,
)
from services.store_service.services.catalog import (
    add_accounts,
    create_product,
    delete_or_archive,
    get_product_or_404,
    update_product,
)
from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(tags=["admin-store"])


# ============================================================================
# PRODUCTS
# ============================================================================


@router.post(
    "/products", response_model=ProductResponse, status_code=status.HTTP_201_CREATED
)
async def create(
    payload: ProductCreate,
    request: Request,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Create a product. Slug and PEN price are derived when omitted."""
    product = await create_product(db, payload)
    await record_audit(
        db,
        AuditAction.PRODUCT_CREATED,
        "product",
        product.id,
        user_id=admin.id,
        details={"slug": product.slug, "price_usd": str(product.price_usd)},
        request=request,
    )
    await db.commit()
    await db.refresh(product)
    return product


@router.put("/products/{product_id}", response_model=ProductResponse)
async def update(
    product_id: uuid.UUID,
    payload: ProductUpdate,
    request: Request,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    product = await get_product_or_404(db, product_id)
    changes = await update_product(db, product, payload)
    await record_audit(
        db,
        AuditAction.PRODUCT_UPDATED,
        "product",
        product.id,
        user_id=admin.id,
        details={k: str(getattr(v, "value", v)) for k, v in changes.items()},
        request=request,
    )
    await db.commit()
    await db.refresh(product)
    return product


@router.delete("/products/{product_id}", response_model=ProductDeleteResponse)
async def delete(
    product_id: uuid.UUID,
    request: Request,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Delete a product, or archive it when it has already been ordered."""
    product = await get_product_or_404(db, product_id)
    slug = product.slug
    archived = await delete_or_archive(db, product)
    await record_audit(
        db,
        AuditAction.PRODUCT_DELETED,
        "product",
        product_id,
        user_id=admin.id,
        details={"slug": slug, "archived": archived},
        request=request,
    )
    await db.commit()

    if archived:
        return ProductDeleteResponse(
            message="Product has orders and was archived (INACTIVE)", archived=True
        )
    return ProductDeleteResponse(message="Product deleted", archived=False)


# ============================================================================
# CREDENTIAL POOL
# ============================================================================


@router.post(
    "/products/{product_id}/accounts",
    response_model=ProductAccountListResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_product_accounts(
    product_id: uuid.UUID,
    payload: ProductAccountsCreate,
    request: Request,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    product = await get_product_or_404(db, product_id)
    accounts = await add_accounts(db, product, payload.credentials)
    await record_audit(
        db,
        AuditAction.PRODUCT_ACCOUNTS_ADDED,
        "product",
        product.id,
        user_id=admin.id,
        details={"count": len(accounts), "stock": product.stock},
        request=request,
    )
    await db.commit()
    return ProductAccountListResponse(
        accounts=[ProductAccountResponse.model_validate(a) for a in accounts],
        total=len(accounts),
        available=len(accounts),
    )


@router.get(
    "/products/{product_id}/accounts", response_model=ProductAccountListResponse
)
async def list_product_accounts(
    product_id: uuid.UUID,
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    await get_product_or_404(db, product_id)
    result = await db.execute(
        select(ProductAccount)
        .where(ProductAccount.product_id == product_id)
        .order_by(desc(ProductAccount.created_at))
    )
    accounts = list(result.scalars().all())
    return ProductAccountListResponse(
        accounts=[ProductAccountResponse.model_validate(a) for a in accounts],
        total=len(accounts),
        available=sum(1 for a in accounts if a.status == AccountStatus.AVAILABLE),
    )
