"""Admin system configuration and audit log endpoints."""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from libs.db.session import get_async_db
from services.accounts_service.dependencies import require_admin
from services.accounts_service.models import AuditAction, AuditLog, User
from services.accounts_service.schemas import (
    AuditLogListResponse,
    AuditLogResponse,
    ConfigEntry,
    ConfigListResponse,
    ConfigUpdate,
)
from services.accounts_service.services import system_config
from services.accounts_service.services.audit import record_audit
from sqlalchemy import desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(tags=["admin"])


# ---------------------------------------------------------------------------
# System configuration
# ---------------------------------------------------------------------------


@router.get("/config", response_model=ConfigListResponse)
async def get_config(
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    entries = await system_config.list_config(db)
    return ConfigListResponse(config=[ConfigEntry(**e) for e in entries])


@router.put("/config/{key}", response_model=ConfigEntry)
async def update_config(
    key: str,
    payload: ConfigUpdate,
    request: Request,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Set one known key. Numeric keys are range-checked."""
    key = key.upper()
    previous = None
    if key in system_config.KNOWN_KEYS:
        previous = await system_config.get_config_value(db, key)
    row = await system_config.set_config_value(db, key, payload.value)
    await record_audit(
        db,
        AuditAction.CONFIG_UPDATED,
        "system_config",
        key,
        user_id=admin.id,
        details={"from": previous, "to": row.value},
        request=request,
    )
    await db.commit()
    await db.refresh(row)
    return ConfigEntry(
        key=row.key,
        value=row.value,
        description=row.description,
        is_default=False,
        updated_at=row.updated_at,
    )


# ---------------------------------------------------------------------------
# Audit log
# ---------------------------------------------------------------------------


@router.get("/audit-logs", response_model=AuditLogListResponse)
async def list_audit_logs(
    action: Optional[AuditAction] = None,
    entity: Optional[str] = None,
    user_id: Optional[uuid.UUID] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    filters = []
    if action:
        filters.append(AuditLog.action == action)
    if entity:
        filters.append(AuditLog.entity == entity)
    if user_id:
        filters.append(AuditLog.user_id == user_id)

    total = (
        await db.execute(select(func.count()).select_from(AuditLog).where(*filters))
    ).scalar() or 0
    result = await db.execute(
        select(AuditLog)
        .where(*filters)
        .order_by(desc(AuditLog.created_at))
        .offset(skip)
        .limit(limit)
    )
    return AuditLogListResponse(
        logs=[AuditLogResponse.model_validate(log) for log in result.scalars().all()],
        total=total,
        skip=skip,
        limit=limit,
    )
