"""Registration, login and session endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from libs.auth.tokens import create_access_token
from libs.common.config import get_settings
from libs.common.logging import get_logger
from libs.common.rate_limit import auth_limit
from libs.db.session import get_async_db
from services.accounts_service.dependencies import get_current_account
from services.accounts_service.models import AuditAction, User, UserRole
from services.accounts_service.schemas import (
    AuthResponse,
    LoginRequest,
    MessageResponse,
    RegisterRequest,
    UserResponse,
)
from services.accounts_service.services.accounts import authenticate, register_user
from services.accounts_service.services.audit import record_audit
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)
router = APIRouter(prefix="/auth", tags=["auth"])


def _set_session_cookie(response: Response, token: str) -> None:
    settings = get_settings()
    response.set_cookie(
        key=settings.AUTH_COOKIE_NAME,
        value=token,
        httponly=True,
        samesite="lax",
        secure=settings.ENVIRONMENT not in ("local", "test"),
        max_age=settings.ACCESS_TOKEN_EXPIRE_DAYS * 24 * 60 * 60,
        path="/",
    )


@router.post(
    "/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED
)
@auth_limit
async def register(
    request: Request,
    payload: RegisterRequest,
    db: AsyncSession = Depends(get_async_db),
):
    """Create a USER account, or a PENDING AFFILIATE awaiting approval."""
    fields = payload.model_dump(
        include={"name", "email", "password", "role", "phone", "referral_code"}
    )
    try:
        user = await register_user(db, **fields)
    except IntegrityError:
        # A concurrent sign-up took the same email or referral code
        logger.warning("Registration conflict for %s, retrying", payload.email)
        await db.rollback()
        user = await register_user(db, **fields)
    await record_audit(
        db,
        AuditAction.REGISTER,
        "user",
        user.id,
        user_id=user.id,
        details={"role": user.role.value},
        request=request,
    )
    await db.commit()
    await db.refresh(user)

    message = (
        "Affiliate account created. An administrator must approve it"
        if user.role == UserRole.AFFILIATE
        else "Account created"
    )
    return AuthResponse(message=message, user=UserResponse.model_validate(user))


@router.post("/login", response_model=AuthResponse)
@auth_limit
async def login(
    request: Request,
    response: Response,
    payload: LoginRequest,
    db: AsyncSession = Depends(get_async_db),
):
    """Check credentials and set the session cookie."""
    try:
        user = await authenticate(db, payload.email, payload.password)
    except HTTPException as exc:
        if exc.status_code == status.HTTP_401_UNAUTHORIZED:
            await record_audit(
                db,
                AuditAction.LOGIN_FAILED,
                "user",
                details={"email": payload.email},
                request=request,
            )
            # Persist the failed-attempt counter
            await db.commit()
        raise

    await record_audit(db, AuditAction.LOGIN, "user", user.id, user_id=user.id, request=request)
    await db.commit()
    await db.refresh(user)

    token = create_access_token(str(user.id), user.role.value, email=user.email)
    _set_session_cookie(response, token)
    logger.info("User %s logged in", user.email)
    return AuthResponse(message="Login successful", user=UserResponse.model_validate(user))


@router.post("/logout", response_model=MessageResponse)
async def logout(response: Response):
    settings = get_settings()
    response.delete_cookie(key=settings.AUTH_COOKIE_NAME, path="/")
    return MessageResponse(message="Logged out")


@router.get("/me", response_model=UserResponse)
async def me(user: User = Depends(get_current_account)):
    """Current user's profile, including wallet balance and referral code."""
    return user
