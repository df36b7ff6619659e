"""Session token minting and verification (HS256 JWT)."""

from datetime import timedelta
from typing import Any, Optional

from jose import JWTError, jwt

from libs.common.config import get_settings
from libs.common.datetime_utils import utc_now


class InvalidTokenError(Exception):
    """Raised when a session token is malformed, expired or badly signed."""


def create_access_token(
    user_id: str,
    role: str,
    email: Optional[str] = None,
    expires_delta: Optional[timedelta] = None,
) -> str:
    settings = get_settings()
    now = utc_now()
    expire = now + (expires_delta or timedelta(days=settings.ACCESS_TOKEN_EXPIRE_DAYS))
    payload: dict[str, Any] = {
        "sub": user_id,
        "role": role,
        "iat": int(now.timestamp()),
        "exp": int(expire.timestamp()),
    }
    if email:
        payload["email"] = email
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> dict[str, Any]:
    settings = get_settings()
    try:
        return jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
            options={"require_sub": True, "require_exp": True},
        )
    except JWTError as exc:
        raise InvalidTokenError(str(exc)) from exc
