"""Store orders router: checkout and order history."""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from libs.common.logging import get_logger
from libs.db.session import get_async_db
from services.accounts_service.dependencies import get_active_account
from services.accounts_service.models import AuditAction, User
from services.accounts_service.schemas import UserSummary
from services.accounts_service.services.audit import record_audit
from services.store_service.models import Order, OrderStatus
from services.store_service.schemas import (
    OrderCreate,
    OrderListResponse,
    OrderResponse,
)
from services.store_service.services.orders import get_order_or_404, place_order
from sqlalchemy import desc, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)
router = APIRouter(tags=["store"])


async def serialize_orders(db: AsyncSession, orders: list[Order]) -> list[OrderResponse]:
    """Order responses with the customer summary attached."""
    user_ids = {o.user_id for o in orders}
    users: dict[uuid.UUID, User] = {}
    if user_ids:
        result = await db.execute(select(User).where(User.id.in_(user_ids)))
        users = {u.id: u for u in result.scalars().all()}

    responses = []
    for order in orders:
        resp = OrderResponse.model_validate(order)
        customer = users.get(order.user_id)
        resp.user = UserSummary.model_validate(customer) if customer else None
        responses.append(resp)
    return responses


# ============================================================================
# CHECKOUT
# ============================================================================


@router.post("/orders", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
async def create_order(
    payload: OrderCreate,
    request: Request,
    user: User = Depends(get_active_account),
    db: AsyncSession = Depends(get_async_db),
):
    """Place an order paid from the wallet, delivering automatic items at once."""
    try:
        order = await place_order(db, user, payload.items, notes=payload.notes)
    except IntegrityError:
        # A concurrent checkout took the same order number
        logger.warning("Order number collision for %s, retrying checkout", user.email)
        await db.rollback()
        await db.refresh(user)
        order = await place_order(db, user, payload.items, notes=payload.notes)
    await record_audit(
        db,
        AuditAction.ORDER_CREATED,
        "order",
        order.id,
        user_id=user.id,
        details={
            "order_number": order.order_number,
            "total": str(order.total),
            "status": order.status.value,
        },
        request=request,
    )
    await db.commit()

    order = await get_order_or_404(db, order.id)
    return (await serialize_orders(db, [order]))[0]


# ============================================================================
# ORDER HISTORY
# ============================================================================


@router.get("/orders", response_model=OrderListResponse)
async def list_orders(
    order_status: Optional[OrderStatus] = Query(None, alias="status"),
    search: Optional[str] = None,
    user_id: Optional[uuid.UUID] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=100),
    user: User = Depends(get_active_account),
    db: AsyncSession = Depends(get_async_db),
):
    """All orders for admins (filterable), the caller's own for everyone else."""
    query = select(Order)
    count_query = select(func.count()).select_from(Order)

    filters = []
    if user.is_admin:
        if user_id:
            filters.append(Order.user_id == user_id)
        if search:
            pattern = f"%{search.strip()}%"
            matching_users = select(User.id).where(User.email.ilike(pattern))
            filters.append(
                or_(Order.order_number.ilike(pattern), Order.user_id.in_(matching_users))
            )
    else:
        filters.append(Order.user_id == user.id)
    if order_status:
        filters.append(Order.status == order_status)

    if filters:
        query = query.where(*filters)
        count_query = count_query.where(*filters)

    total = (await db.execute(count_query)).scalar() or 0
    result = await db.execute(
        query.order_by(desc(Order.created_at)).offset(skip).limit(limit)
    )
    orders = list(result.scalars().all())
    return OrderListResponse(
        orders=await serialize_orders(db, orders), total=total, skip=skip, limit=limit
    )


@router.get("/orders/{order_id}", response_model=OrderResponse)
async def get_order(
    order_id: uuid.UUID,
    user: User = Depends(get_active_account),
    db: AsyncSession = Depends(get_async_db),
):
    order = await db.get(Order, order_id)
    if not order or (not user.is_admin and order.user_id != user.id):
        raise HTTPException(status_code=404, detail="Order not found")
    return (await serialize_orders(db, [order]))[0]
