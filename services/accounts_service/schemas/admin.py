"""System configuration and audit log schemas."""

import uuid
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from services.accounts_service.models.enums import AuditAction


class ConfigEntry(BaseModel):
    key: str
    value: str
    description: Optional[str] = None
    is_default: bool = False
    updated_at: Optional[datetime] = None


class ConfigListResponse(BaseModel):
    config: list[ConfigEntry]


class ConfigUpdate(BaseModel):
    value: str = Field(..., max_length=500)


class AuditLogResponse(BaseModel):
    id: uuid.UUID
    user_id: Optional[uuid.UUID] = None
    action: AuditAction
    entity: str
    entity_id: Optional[str] = None
    details: Optional[dict[str, Any]] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AuditLogListResponse(BaseModel):
    logs: list[AuditLogResponse]
    total: int
    skip: int
    limit: int
