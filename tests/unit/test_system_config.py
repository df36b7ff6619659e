"""Unit tests for runtime configuration lookups and validation."""

from decimal import Decimal

import pytest
from fastapi import HTTPException
from services.accounts_service.services import system_config


@pytest.mark.asyncio
@pytest.mark.unit
async def test_defaults_come_from_settings(db_session):
    assert await system_config.get_commission_rate(db_session) == Decimal("0.10")
    assert await system_config.get_usd_to_pen_rate(db_session) == Decimal("3.66")
    assert await system_config.get_int(db_session, system_config.MAX_LOGIN_ATTEMPTS) == 5


@pytest.mark.asyncio
@pytest.mark.unit
async def test_stored_value_overrides_default(db_session):
    await system_config.set_config_value(db_session, system_config.COMMISSION_RATE, "0.15")
    await db_session.commit()

    assert await system_config.get_commission_rate(db_session) == Decimal("0.15")

    entries = {e["key"]: e for e in await system_config.list_config(db_session)}
    assert entries["COMMISSION_RATE"]["value"] == "0.15"
    assert entries["COMMISSION_RATE"]["is_default"] is False
    assert entries["USD_TO_PEN_RATE"]["is_default"] is True


@pytest.mark.asyncio
@pytest.mark.unit
async def test_set_twice_updates_same_row(db_session):
    await system_config.set_config_value(db_session, system_config.SITE_NAME, "One")
    await db_session.commit()
    row = await system_config.set_config_value(db_session, system_config.SITE_NAME, "Two")
    await db_session.commit()

    assert row.value == "Two"
    assert await system_config.get_config_value(db_session, "SITE_NAME") == "Two"


@pytest.mark.asyncio
@pytest.mark.unit
@pytest.mark.parametrize(
    "key,value",
    [
        ("COMMISSION_RATE", "1.5"),
        ("COMMISSION_RATE", "abc"),
        ("COMMISSION_RATE", "NaN"),
        ("COMMISSION_RATE", "sNaN"),
        ("USD_TO_PEN_RATE", "Infinity"),
        ("USD_TO_PEN_RATE", "NaN"),
        ("USD_TO_PEN_RATE", "0"),
        ("MAX_LOGIN_ATTEMPTS", "-1"),
        ("LOGIN_LOCK_DURATION", "ten"),
    ],
)
async def test_invalid_values_rejected(db_session, key, value):
    with pytest.raises(HTTPException) as exc_info:
        await system_config.set_config_value(db_session, key, value)
    assert exc_info.value.status_code == 400


@pytest.mark.asyncio
@pytest.mark.unit
async def test_unknown_key_rejected(db_session):
    with pytest.raises(HTTPException) as exc_info:
        await system_config.set_config_value(db_session, "FAVOURITE_COLOUR", "blue")
    assert exc_info.value.status_code == 404

    with pytest.raises(KeyError):
        await system_config.get_config_value(db_session, "FAVOURITE_COLOUR")
