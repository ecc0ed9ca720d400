"""Auth domain type definitions for type safety."""

from typing import Optional

from pydantic import BaseModel, Field


class PrincipalClaims(BaseModel):
    """Access token payload structure."""

    # Standard JWT claims
    sub: Optional[str] = Field(None, description="Subject (user ID)")
    iss: Optional[str] = Field(None, description="Token issuer")
    exp: Optional[int] = Field(None, description="Expiration timestamp")
    iat: Optional[int] = Field(None, description="Issued at timestamp")

    # Authorization claims
    role: Optional[str] = Field(None, description="Assigned role name")
    role_priority: Optional[int] = Field(
        None, ge=0, description="Role priority resolved when the token was issued"
    )

    model_config = {"extra": "allow"}
