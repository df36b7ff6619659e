"""Audit log writer shared by every service."""

import uuid
from typing import Any, Optional, Union

from fastapi import Request
from services.accounts_service.models import AuditAction, AuditLog
from sqlalchemy.ext.asyncio import AsyncSession


def _client_ip(request: Request) -> Optional[str]:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


async def record_audit(
    db: AsyncSession,
    action: AuditAction,
    entity: str,
    entity_id: Union[uuid.UUID, str, None] = None,
    user_id: Optional[uuid.UUID] = None,
    details: Optional[dict[str, Any]] = None,
    request: Optional[Request] = None,
) -> AuditLog:
    """Stage an audit entry in the caller's transaction."""
    entry = AuditLog(
        user_id=user_id,
        action=action,
        entity=entity,
        entity_id=str(entity_id) if entity_id is not None else None,
        details=details,
        ip_address=_client_ip(request) if request else None,
        user_agent=request.headers.get("User-Agent") if request else None,
    )
    db.add(entry)
    return entry
