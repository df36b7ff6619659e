"""Admin dashboard schemas."""

import uuid
from datetime import datetime
from typing import Optional

from libs.common.money import Money
from pydantic import BaseModel, ConfigDict
from services.store_service.models import OrderStatus, PaymentStatus


class AdminStats(BaseModel):
    total_users: int
    total_products: int
    total_orders: int
    pending_recharges: int
    active_affiliates: int
    total_sales: Money
    today_sales: Money
    month_sales: Money
    pending_commissions: Money


class RecentOrder(BaseModel):
    id: uuid.UUID
    order_number: str
    total: Money
    status: OrderStatus
    payment_status: PaymentStatus
    created_at: datetime
    customer_name: Optional[str] = None
    customer_email: Optional[str] = None


class MonthlySales(BaseModel):
    month: str
    amount: Money


class TopProduct(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    provider: str
    sold: int
    price_usd: Money


class AdminDashboardResponse(BaseModel):
    stats: AdminStats
    recent_orders: list[RecentOrder]
    sales_by_month: list[MonthlySales]
    top_products: list[TopProduct]
