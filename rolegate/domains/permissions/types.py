"""Response types for the permissions endpoints."""

from typing import Optional

from pydantic import BaseModel, Field


class ResourceAccess(BaseModel):
    """Operations a principal may perform on one resource."""

    resource: str = Field(..., description="Resource key")
    operations: list[str] = Field(
        default_factory=list, description="Allowed CRUD operations, sorted"
    )
    row_level_security: Optional[str] = Field(
        None, description="RLS policy applied to reads"
    )


class PrincipalAccessSummary(BaseModel):
    """Everything the frontend needs to gate its UI for the caller."""

    role: Optional[str] = Field(None, description="Caller's role name")
    priority: int = Field(..., description="Resolved priority, 0 if none")
    resources: list[ResourceAccess] = Field(default_factory=list)
