"""Enums for the Wallet Service models."""

import enum

from services.accounts_service.models.enums import enum_values  # noqa: F401


class RechargeStatus(str, enum.Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class TransactionType(str, enum.Enum):
    RECHARGE = "RECHARGE"
    PURCHASE = "PURCHASE"
    REFUND = "REFUND"
    COMMISSION = "COMMISSION"
    ADMIN_ADJUSTMENT = "ADMIN_ADJUSTMENT"


class TransactionDirection(str, enum.Enum):
    CREDIT = "CREDIT"
    DEBIT = "DEBIT"
