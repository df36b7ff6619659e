"""Auth request/response schemas."""

from typing import Optional

from pydantic import BaseModel, EmailStr, Field
from services.accounts_service.models.enums import UserRole
from services.accounts_service.schemas.user import UserResponse


class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    role: UserRole = UserRole.USER
    referral_code: Optional[str] = Field(None, max_length=20)
    phone: Optional[str] = Field(None, max_length=50)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class AuthResponse(BaseModel):
    message: str
    user: UserResponse


class MessageResponse(BaseModel):
    message: str
