"""Admin order management: manual delivery and status changes."""

import uuid

from fastapi import APIRouter, Depends, Request
from libs.db.session import get_async_db
from services.accounts_service.dependencies import require_admin
from services.accounts_service.models import AuditAction, User
from services.accounts_service.services.audit import record_audit
from services.store_service.routers.orders import serialize_orders
from services.store_service.schemas import (
    DeliverItemRequest,
    OrderResponse,
    OrderStatusUpdate,
)
from services.store_service.services.orders import (
    change_status,
    deliver_item,
    get_order_or_404,
)
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(tags=["admin-store"])


@router.put("/orders/{order_id}/items/{item_id}/deliver", response_model=OrderResponse)
async def deliver_order_item(
    order_id: uuid.UUID,
    item_id: uuid.UUID,
    payload: DeliverItemRequest,
    request: Request,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Deliver one item by hand. The last delivery completes the order."""
    order = await get_order_or_404(db, order_id)
    await deliver_item(db, order, item_id, payload.delivery_data)
    await record_audit(
        db,
        AuditAction.ORDER_ITEM_DELIVERED,
        "order",
        order.id,
        user_id=admin.id,
        details={"item_id": str(item_id), "order_status": order.status.value},
        request=request,
    )
    await db.commit()

    order = await get_order_or_404(db, order_id)
    return (await serialize_orders(db, [order]))[0]


@router.put("/orders/{order_id}/status", response_model=OrderResponse)
async def update_order_status(
    order_id: uuid.UUID,
    payload: OrderStatusUpdate,
    request: Request,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Move an order along its lifecycle. Cancel/refund returns the money."""
    order = await get_order_or_404(db, order_id)
    previous = order.status
    await change_status(
        db, order, payload.status, admin_id=admin.id, admin_notes=payload.admin_notes
    )
    await record_audit(
        db,
        AuditAction.ORDER_STATUS_CHANGED,
        "order",
        order.id,
        user_id=admin.id,
        details={"from": previous.value, "to": payload.status.value},
        request=request,
    )
    await db.commit()

    order = await get_order_or_404(db, order_id)
    return (await serialize_orders(db, [order]))[0]
