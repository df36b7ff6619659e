"""Typed access to runtime configuration stored in ``system_config``."""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Callable, Optional

from fastapi import HTTPException, status
from libs.common.config import get_settings
from libs.common.logging import get_logger
from services.accounts_service.models import SystemConfig
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

SITE_NAME = "SITE_NAME"
COMMISSION_RATE = "COMMISSION_RATE"
USD_TO_PEN_RATE = "USD_TO_PEN_RATE"
WHATSAPP_NUMBER = "WHATSAPP_NUMBER"
MAX_LOGIN_ATTEMPTS = "MAX_LOGIN_ATTEMPTS"
LOGIN_LOCK_DURATION = "LOGIN_LOCK_DURATION"


@dataclass(frozen=True)
class ConfigKey:
    key: str
    description: str
    default: Callable[[], str]
    validator: Optional[Callable[[str], str]] = None


def _decimal(value: str) -> Decimal:
    try:
        number = Decimal(value)
    except InvalidOperation:
        raise ValueError("must be a decimal number")
    # NaN and Infinity parse but cannot be compared or quantized
    if not number.is_finite():
        raise ValueError("must be a finite number")
    return number


def _rate(value: str) -> str:
    rate = _decimal(value)
    if not (Decimal("0") <= rate <= Decimal("1")):
        raise ValueError("must be between 0 and 1")
    return str(rate)


def _positive_decimal(value: str) -> str:
    number = _decimal(value)
    if number <= 0:
        raise ValueError("must be greater than 0")
    return str(number)


def _positive_int(value: str) -> str:
    try:
        number = int(value)
    except ValueError:
        raise ValueError("must be an integer")
    if number <= 0:
        raise ValueError("must be greater than 0")
    return str(number)


def _settings_default(attr: str) -> Callable[[], str]:
    return lambda: str(getattr(get_settings(), attr))


KNOWN_KEYS: dict[str, ConfigKey] = {
    item.key: item
    for item in (
        ConfigKey(SITE_NAME, "Site display name", _settings_default("DEFAULT_SITE_NAME")),
        ConfigKey(
            COMMISSION_RATE,
            "Affiliate commission rate (0-1)",
            _settings_default("DEFAULT_COMMISSION_RATE"),
            _rate,
        ),
        ConfigKey(
            USD_TO_PEN_RATE,
            "USD to PEN exchange rate",
            _settings_default("DEFAULT_USD_TO_PEN_RATE"),
            _positive_decimal,
        ),
        ConfigKey(
            WHATSAPP_NUMBER,
            "WhatsApp number for customer contact",
            _settings_default("DEFAULT_WHATSAPP_NUMBER"),
        ),
        ConfigKey(
            MAX_LOGIN_ATTEMPTS,
            "Failed logins before a temporary lock",
            _settings_default("DEFAULT_MAX_LOGIN_ATTEMPTS"),
            _positive_int,
        ),
        ConfigKey(
            LOGIN_LOCK_DURATION,
            "Login lock duration in minutes",
            _settings_default("DEFAULT_LOGIN_LOCK_DURATION"),
            _positive_int,
        ),
    )
}


async def get_config_value(db: AsyncSession, key: str) -> str:
    """Stored value for ``key``, or its settings default when no row exists."""
    known = KNOWN_KEYS.get(key)
    row = await db.get(SystemConfig, key)
    if row is not None:
        return row.value
    if known is None:
        raise KeyError(key)
    return known.default()


async def get_decimal(db: AsyncSession, key: str) -> Decimal:
    return Decimal(await get_config_value(db, key))


async def get_int(db: AsyncSession, key: str) -> int:
    return int(await get_config_value(db, key))


async def get_commission_rate(db: AsyncSession) -> Decimal:
    return await get_decimal(db, COMMISSION_RATE)


async def get_usd_to_pen_rate(db: AsyncSession) -> Decimal:
    return await get_decimal(db, USD_TO_PEN_RATE)


async def list_config(db: AsyncSession) -> list[dict]:
    """Effective values for every known key."""
    result = await db.execute(select(SystemConfig))
    rows = {row.key: row for row in result.scalars().all()}
    entries = []
    for key, known in KNOWN_KEYS.items():
        row = rows.get(key)
        entries.append(
            {
                "key": key,
                "value": row.value if row else known.default(),
                "description": (row.description if row and row.description else known.description),
                "is_default": row is None,
                "updated_at": row.updated_at if row else None,
            }
        )
    return entries


async def set_config_value(db: AsyncSession, key: str, value: str) -> SystemConfig:
    """Validate and upsert a config value. Does not commit."""
    known = KNOWN_KEYS.get(key)
    if known is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail=f"Unknown config key {key}"
        )

    value = value.strip()
    if known.validator:
        try:
            value = known.validator(value)
        except ValueError as exc:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail=f"{key} {exc}"
            )

    row = await db.get(SystemConfig, key)
    if row is None:
        row = SystemConfig(key=key, value=value, description=known.description)
        db.add(row)
    else:
        row.value = value
    await db.flush()

    logger.info("System config %s set to %s", key, value)
    return row
