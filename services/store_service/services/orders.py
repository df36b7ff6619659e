"""Checkout, fulfillment and order status transitions."""

import uuid
from datetime import datetime
from typing import Optional

from fastapi import HTTPException, status
from libs.common.datetime_utils import utc_now
from libs.common.logging import get_logger
from libs.common.money import ZERO, to_money
from services.accounts_service.models import User
from services.store_service.models import (
    AccountStatus,
    DeliveryType,
    Order,
    OrderItem,
    OrderStatus,
    PaymentStatus,
    Product,
    ProductAccount,
    ProductStatus,
)
from services.store_service.schemas import OrderItemCreate
from services.store_service.services.commissions import (
    cancel_pending_for_order,
    create_commission_for_order,
)
from services.wallet_service.models import TransactionType
from services.wallet_service.services.wallet_ops import credit_wallet, debit_wallet
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

ORDER_PREFIX = "LFS"

ALLOWED_TRANSITIONS: dict[OrderStatus, set[OrderStatus]] = {
    OrderStatus.PENDING: {OrderStatus.PROCESSING, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {
        OrderStatus.COMPLETED,
        OrderStatus.CANCELLED,
        OrderStatus.REFUNDED,
    },
    OrderStatus.COMPLETED: {OrderStatus.REFUNDED},
    OrderStatus.CANCELLED: set(),
    OrderStatus.REFUNDED: set(),
}

CLOSED_STATUSES = (OrderStatus.CANCELLED, OrderStatus.REFUNDED)


# ============================================================================
# LOOKUPS
# ============================================================================


async def get_order_or_404(db: AsyncSession, order_id: uuid.UUID) -> Order:
    result = await db.execute(
        select(Order)
        .where(Order.id == order_id)
        .execution_options(populate_existing=True)
    )
    order = result.scalar_one_or_none()
    if not order:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Order not found"
        )
    return order


async def next_order_number(db: AsyncSession, now: Optional[datetime] = None) -> str:
    """``LFS-<year>-<seq:04d>``, sequence restarting every year."""
    prefix = f"{ORDER_PREFIX}-{(now or utc_now()).year}-"
    result = await db.execute(
        select(Order.order_number).where(Order.order_number.like(f"{prefix}%"))
    )
    highest = 0
    for number in result.scalars().all():
        suffix = number[len(prefix):]
        if suffix.isdigit():
            highest = max(highest, int(suffix))
    return f"{prefix}{highest + 1:04d}"


# ============================================================================
# CHECKOUT
# ============================================================================


def merge_items(items: list[OrderItemCreate]) -> dict[uuid.UUID, int]:
    """Collapse repeated products into one line, keeping first-seen order."""
    merged: dict[uuid.UUID, int] = {}
    for item in items:
        merged[item.product_id] = merged.get(item.product_id, 0) + item.quantity
    return merged


async def _lock_products(
    db: AsyncSession, product_ids: list[uuid.UUID]
) -> dict[uuid.UUID, Product]:
    result = await db.execute(
        select(Product)
        .where(Product.id.in_(product_ids))
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    return {p.id: p for p in result.scalars().all()}


async def auto_deliver(db: AsyncSession, item: OrderItem) -> bool:
    """Assign pool accounts to an AUTOMATIC item. False if the pool is short."""
    if item.delivery_type != DeliveryType.AUTOMATIC or item.delivered:
        return item.delivered

    result = await db.execute(
        select(ProductAccount)
        .where(
            ProductAccount.product_id == item.product_id,
            ProductAccount.status == AccountStatus.AVAILABLE,
        )
        .order_by(ProductAccount.created_at)
        .limit(item.quantity)
        .with_for_update()
    )
    accounts = list(result.scalars().all())
    if len(accounts) < item.quantity:
        logger.warning(
            "Credential pool short for product %s (%d/%d); item %s left for manual delivery",
            item.product_id,
            len(accounts),
            item.quantity,
            item.id,
        )
        return False

    now = utc_now()
    for account in accounts:
        account.status = AccountStatus.ASSIGNED
        account.order_item_id = item.id
        account.assigned_at = now

    item.delivery_data = "\n\n".join(a.credentials for a in accounts)
    item.delivered = True
    item.delivered_at = now
    return True


async def place_order(
    db: AsyncSession,
    buyer: User,
    items: list[OrderItemCreate],
    notes: Optional[str] = None,
) -> Order:
    """Validate, pay from the wallet, fulfil and attribute an order.

    Does not commit. A 402 from the wallet debit leaves nothing staged.
    """
    wanted = merge_items(items)
    products = await _lock_products(db, list(wanted))

    lines: list[tuple[Product, int]] = []
    for product_id, quantity in wanted.items():
        product = products.get(product_id)
        if product is None or product.status != ProductStatus.ACTIVE:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Product {product_id} is not available",
            )
        if product.stock < quantity:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Only {product.stock} left of {product.name}",
            )
        lines.append((product, quantity))

    subtotal = to_money(sum((p.price_usd * q for p, q in lines), ZERO))
    discount = ZERO
    total = to_money(subtotal - discount)

    order_id = uuid.uuid4()
    order_number = await next_order_number(db)

    # Pay first so an insufficient balance stages nothing
    if total > ZERO:
        await debit_wallet(
            db,
            user_id=buyer.id,
            amount=total,
            idempotency_key=f"order-{order_id}",
            transaction_type=TransactionType.PURCHASE,
            description=f"Order {order_number}",
            reference_type="order",
            reference_id=str(order_id),
            initiated_by=buyer.id,
        )

    now = utc_now()
    order = Order(
        id=order_id,
        order_number=order_number,
        user_id=buyer.id,
        subtotal=subtotal,
        discount=discount,
        total=total,
        status=OrderStatus.PENDING,
        payment_status=PaymentStatus.PAID,
        paid_at=now,
        commission_paid=False,
        notes=notes,
        items=[],
    )
    db.add(order)

    for product, quantity in lines:
        product.stock -= quantity
        product.sold += quantity
        order.items.append(
            OrderItem(
                id=uuid.uuid4(),
                product_id=product.id,
                quantity=quantity,
                price_usd=product.price_usd,
                price_pen=product.price_pen,
                subtotal=to_money(product.price_usd * quantity),
                product_name=product.name,
                product_provider=product.provider,
                delivery_type=product.delivery_type,
                delivered=False,
            )
        )
    await db.flush()

    for item in order.items:
        await auto_deliver(db, item)

    if all(item.delivered for item in order.items):
        order.status = OrderStatus.COMPLETED
        order.completed_at = now
    else:
        order.status = OrderStatus.PROCESSING
    await db.flush()

    await create_commission_for_order(db, order, buyer)

    logger.info(
        "Order %s placed by %s: total=%s status=%s",
        order.order_number,
        buyer.email,
        order.total,
        order.status.value,
    )
    return order


# ============================================================================
# FULFILLMENT
# ============================================================================


async def deliver_item(
    db: AsyncSession, order: Order, item_id: uuid.UUID, delivery_data: str
) -> OrderItem:
    """Manually deliver one item; completes the order when it was the last."""
    if order.status in CLOSED_STATUSES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Order is {order.status.value}",
        )

    item = next((i for i in order.items if i.id == item_id), None)
    if item is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Order item not found"
        )
    if item.delivered:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Item already delivered"
        )

    now = utc_now()
    item.delivered = True
    item.delivered_at = now
    item.delivery_data = delivery_data.strip()

    if all(i.delivered for i in order.items):
        order.status = OrderStatus.COMPLETED
        order.completed_at = now
    await db.flush()
    return item


async def change_status(
    db: AsyncSession,
    order: Order,
    new_status: OrderStatus,
    *,
    admin_id: uuid.UUID,
    admin_notes: Optional[str] = None,
) -> Order:
    """Apply an admin status transition, refunding paid orders on cancel/refund."""
    if new_status not in ALLOWED_TRANSITIONS[order.status]:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Cannot change order from {order.status.value} to {new_status.value}",
        )
    if new_status == OrderStatus.COMPLETED and not all(
        i.delivered for i in order.items
    ):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="All items must be delivered before completing the order",
        )

    now = utc_now()
    if new_status in CLOSED_STATUSES:
        if order.payment_status == PaymentStatus.PAID:
            await _refund(db, order, admin_id)
        order.cancelled_at = now
    elif new_status == OrderStatus.COMPLETED:
        order.completed_at = now

    previous = order.status
    order.status = new_status
    if admin_notes is not None:
        order.admin_notes = admin_notes
    await db.flush()

    logger.info(
        "Order %s moved %s -> %s", order.order_number, previous.value, new_status.value
    )
    return order


async def _refund(db: AsyncSession, order: Order, admin_id: uuid.UUID) -> None:
    if order.total > ZERO:
        await credit_wallet(
            db,
            user_id=order.user_id,
            amount=order.total,
            idempotency_key=f"refund-order-{order.id}",
            transaction_type=TransactionType.REFUND,
            description=f"Refund for order {order.order_number}",
            reference_type="order",
            reference_id=str(order.id),
            initiated_by=admin_id,
        )

    undelivered = [i for i in order.items if not i.delivered]
    if undelivered:
        products = await _lock_products(db, [i.product_id for i in undelivered])
        for item in undelivered:
            product = products.get(item.product_id)
            if product is None:
                continue
            product.stock += item.quantity
            product.sold = max(0, product.sold - item.quantity)

    order.payment_status = PaymentStatus.REFUNDED
    await cancel_pending_for_order(db, order)
