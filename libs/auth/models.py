from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class AuthUser(BaseModel):
    """
    Claims carried by the session token.

    ``role`` reflects the role at login time; routes that need the live role
    or status load the user row (see accounts_service.dependencies).
    """

    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(..., alias="sub")
    role: str = "USER"
    email: Optional[str] = None
