"""Enums for the Accounts Service models."""

import enum


def enum_values(enum_cls):
    """Return persistent DB values for SAEnum mappings."""
    return [member.value for member in enum_cls]


class UserRole(str, enum.Enum):
    USER = "USER"
    ADMIN = "ADMIN"
    AFFILIATE = "AFFILIATE"


class UserStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    PENDING = "PENDING"
    BANNED = "BANNED"


class AuditAction(str, enum.Enum):
    LOGIN = "LOGIN"
    LOGIN_FAILED = "LOGIN_FAILED"
    REGISTER = "REGISTER"
    USER_UPDATED = "USER_UPDATED"
    USER_DELETED = "USER_DELETED"
    AFFILIATE_APPROVED = "AFFILIATE_APPROVED"
    CONFIG_UPDATED = "CONFIG_UPDATED"
    PRODUCT_CREATED = "PRODUCT_CREATED"
    PRODUCT_UPDATED = "PRODUCT_UPDATED"
    PRODUCT_DELETED = "PRODUCT_DELETED"
    PRODUCT_ACCOUNTS_ADDED = "PRODUCT_ACCOUNTS_ADDED"
    ORDER_CREATED = "ORDER_CREATED"
    ORDER_STATUS_CHANGED = "ORDER_STATUS_CHANGED"
    ORDER_ITEM_DELIVERED = "ORDER_ITEM_DELIVERED"
    RECHARGE_CREATED = "RECHARGE_CREATED"
    RECHARGE_APPROVED = "RECHARGE_APPROVED"
    RECHARGE_REJECTED = "RECHARGE_REJECTED"
    WALLET_ADJUSTED = "WALLET_ADJUSTED"
    COMMISSION_PAID = "COMMISSION_PAID"
    COMMISSION_CANCELLED = "COMMISSION_CANCELLED"
