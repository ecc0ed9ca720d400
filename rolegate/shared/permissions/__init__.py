"""
Shared permission system for role-priority access control.

Roles carry unique integer priorities; each resource operation has a minimum
priority. Configuration lives in one JSON document shared by every runtime.

Usage:
    from rolegate.shared.permissions import CrudOperation, PermissionContext
    from rolegate.shared.permissions.dependencies import require_permission

    @router.get("/work-orders")
    async def list_work_orders(
        context: PermissionContext = Depends(
            require_permission("work_orders", CrudOperation.READ)
        )
    ):
        pass
"""

from .loader import PermissionConfigLoader, parse_permission_config
from .models import (
    CRUD_OPERATIONS,
    CrudOperation,
    PermissionConfig,
    PermissionContext,
    PermissionDecision,
    Principal,
)
from .rls import build_rls_filter
from .services import PermissionEvaluator, has_permission

__all__ = [
    "CRUD_OPERATIONS",
    "CrudOperation",
    "PermissionConfig",
    "PermissionConfigLoader",
    "PermissionContext",
    "PermissionDecision",
    "PermissionEvaluator",
    "Principal",
    "build_rls_filter",
    "has_permission",
    "parse_permission_config",
]
