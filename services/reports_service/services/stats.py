"""Aggregates for the admin dashboard."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from libs.common.datetime_utils import day_start, ensure_utc, month_start, utc_now
from libs.common.money import ZERO, to_money
from services.accounts_service.models import User, UserRole, UserStatus
from services.reports_service.schemas import (
    AdminDashboardResponse,
    AdminStats,
    MonthlySales,
    RecentOrder,
    TopProduct,
)
from services.store_service.models import (
    Commission,
    CommissionStatus,
    Order,
    PaymentStatus,
    Product,
)
from services.wallet_service.models import Recharge, RechargeStatus
from sqlalchemy import desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

SALES_MONTHS = 6


async def _scalar(db: AsyncSession, query) -> int:
    return (await db.execute(query)).scalar() or 0


async def _sales_since(db: AsyncSession, since: Optional[datetime] = None) -> Decimal:
    query = select(func.coalesce(func.sum(Order.total), 0)).where(
        Order.payment_status == PaymentStatus.PAID
    )
    if since is not None:
        query = query.where(Order.created_at >= since)
    return to_money((await db.execute(query)).scalar() or ZERO)


def month_keys(now: datetime, count: int = SALES_MONTHS) -> list[str]:
    """The last ``count`` months as ``YYYY-MM``, oldest first, ending with ``now``."""
    year, month = now.year, now.month
    keys = []
    for _ in range(count):
        keys.append(f"{year:04d}-{month:02d}")
        month -= 1
        if month == 0:
            year, month = year - 1, 12
    return list(reversed(keys))


async def sales_by_month(db: AsyncSession, now: datetime) -> list[MonthlySales]:
    keys = month_keys(now)
    first_year, first_month = (int(part) for part in keys[0].split("-"))
    since = month_start(now).replace(year=first_year, month=first_month)

    rows = await db.execute(
        select(Order.created_at, Order.total).where(
            Order.payment_status == PaymentStatus.PAID,
            Order.created_at >= since,
        )
    )
    totals = {key: ZERO for key in keys}
    for created_at, total in rows.all():
        key = ensure_utc(created_at).strftime("%Y-%m")
        if key in totals:
            totals[key] = to_money(totals[key] + total)
    return [MonthlySales(month=key, amount=totals[key]) for key in keys]


async def build_dashboard(db: AsyncSession) -> AdminDashboardResponse:
    """Counters, recent orders, monthly sales and best sellers.

    Sales count only orders whose payment is still PAID, so refunded and
    cancelled orders drop out.
    """
    now = utc_now()

    stats = AdminStats(
        total_users=await _scalar(db, select(func.count()).select_from(User)),
        total_products=await _scalar(db, select(func.count()).select_from(Product)),
        total_orders=await _scalar(db, select(func.count()).select_from(Order)),
        pending_recharges=await _scalar(
            db,
            select(func.count())
            .select_from(Recharge)
            .where(Recharge.status == RechargeStatus.PENDING),
        ),
        active_affiliates=await _scalar(
            db,
            select(func.count())
            .select_from(User)
            .where(User.role == UserRole.AFFILIATE, User.status == UserStatus.ACTIVE),
        ),
        total_sales=await _sales_since(db),
        today_sales=await _sales_since(db, day_start(now)),
        month_sales=await _sales_since(db, month_start(now)),
        pending_commissions=to_money(
            await _scalar(
                db,
                select(func.coalesce(func.sum(Commission.amount), 0)).where(
                    Commission.status == CommissionStatus.PENDING
                ),
            )
        ),
    )

    rows = await db.execute(
        select(Order, User.name, User.email)
        .join(User, User.id == Order.user_id)
        .order_by(desc(Order.created_at))
        .limit(5)
    )
    recent_orders = [
        RecentOrder(
            id=order.id,
            order_number=order.order_number,
            total=order.total,
            status=order.status,
            payment_status=order.payment_status,
            created_at=order.created_at,
            customer_name=name,
            customer_email=email,
        )
        for order, name, email in rows.all()
    ]

    result = await db.execute(
        select(Product).where(Product.sold > 0).order_by(desc(Product.sold)).limit(5)
    )
    top_products = [TopProduct.model_validate(p) for p in result.scalars().all()]

    return AdminDashboardResponse(
        stats=stats,
        recent_orders=recent_orders,
        sales_by_month=await sales_by_month(db, now),
        top_products=top_products,
    )
