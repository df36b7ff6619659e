"""Pydantic schemas for store service."""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from libs.common.money import Money
from pydantic import BaseModel, ConfigDict, Field
from services.accounts_service.schemas import UserSummary
from services.store_service.models import (
    AccountStatus,
    CommissionStatus,
    DeliveryType,
    OrderStatus,
    PaymentStatus,
    ProductStatus,
)

# ============================================================================
# PRODUCT SCHEMAS
# ============================================================================


class ProductBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    provider: str = Field(..., min_length=1, max_length=100)
    category: Optional[str] = Field(None, max_length=100)
    delivery_type: DeliveryType = DeliveryType.MANUAL
    featured: bool = False
    image: Optional[str] = Field(None, max_length=500)
    meta_title: Optional[str] = Field(None, max_length=255)
    meta_description: Optional[str] = Field(None, max_length=500)


class ProductCreate(ProductBase):
    slug: Optional[str] = Field(None, max_length=255)
    price_usd: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)
    price_pen: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)
    stock: int = Field(0, ge=0)
    status: ProductStatus = ProductStatus.ACTIVE


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    slug: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    provider: Optional[str] = Field(None, min_length=1, max_length=100)
    category: Optional[str] = Field(None, max_length=100)
    price_usd: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)
    price_pen: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)
    stock: Optional[int] = Field(None, ge=0)
    delivery_type: Optional[DeliveryType] = None
    status: Optional[ProductStatus] = None
    featured: Optional[bool] = None
    image: Optional[str] = Field(None, max_length=500)
    meta_title: Optional[str] = Field(None, max_length=255)
    meta_description: Optional[str] = Field(None, max_length=500)


class ProductResponse(ProductBase):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    slug: str
    price_usd: Money
    price_pen: Money
    stock: int
    sold: int
    status: ProductStatus
    created_at: datetime
    updated_at: datetime


class ProductListResponse(BaseModel):
    products: list[ProductResponse]
    total: int


class ProductAccountsCreate(BaseModel):
    credentials: list[str] = Field(..., min_length=1)


class ProductAccountResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    product_id: uuid.UUID
    credentials: str
    status: AccountStatus
    order_item_id: Optional[uuid.UUID] = None
    assigned_at: Optional[datetime] = None
    created_at: datetime


class ProductAccountListResponse(BaseModel):
    accounts: list[ProductAccountResponse]
    total: int
    available: int


class ProductDeleteResponse(BaseModel):
    message: str
    archived: bool


# ============================================================================
# ORDER SCHEMAS
# ============================================================================


class OrderItemCreate(BaseModel):
    product_id: uuid.UUID
    quantity: int = Field(1, ge=1, le=100)


class OrderCreate(BaseModel):
    items: list[OrderItemCreate] = Field(..., min_length=1)
    notes: Optional[str] = Field(None, max_length=1000)


class OrderItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    product_id: uuid.UUID
    quantity: int
    price_usd: Money
    price_pen: Money
    subtotal: Money
    product_name: str
    product_provider: str
    delivery_type: DeliveryType
    delivered: bool
    delivered_at: Optional[datetime] = None
    delivery_data: Optional[str] = None


class OrderSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    order_number: str
    user_id: uuid.UUID
    total: Money
    status: OrderStatus
    payment_status: PaymentStatus
    created_at: datetime


class OrderResponse(OrderSummary):
    subtotal: Money
    discount: Money
    affiliate_id: Optional[uuid.UUID] = None
    commission_amount: Optional[Money] = None
    commission_paid: bool
    notes: Optional[str] = None
    admin_notes: Optional[str] = None
    paid_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    updated_at: datetime
    items: list[OrderItemResponse] = []
    user: Optional[UserSummary] = None


class OrderListResponse(BaseModel):
    orders: list[OrderResponse]
    total: int
    skip: int
    limit: int


class DeliverItemRequest(BaseModel):
    delivery_data: str = Field(..., min_length=1)


class OrderStatusUpdate(BaseModel):
    status: OrderStatus
    admin_notes: Optional[str] = None


# ============================================================================
# COMMISSION SCHEMAS
# ============================================================================


class CommissionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    affiliate_id: uuid.UUID
    order_id: uuid.UUID
    order_total: Money
    commission_rate: Money
    amount: Money
    status: CommissionStatus
    paid_at: Optional[datetime] = None
    created_at: datetime
    order_number: Optional[str] = None
    affiliate_name: Optional[str] = None


class CommissionListResponse(BaseModel):
    commissions: list[CommissionResponse]
    total: int
    skip: int
    limit: int
