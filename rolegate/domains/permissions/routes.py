from fastapi import APIRouter, Depends

from rolegate.domains.auth.dependencies import get_current_principal
from rolegate.shared.permissions.dependencies import get_permission_evaluator
from rolegate.shared.permissions.models import PermissionDecision, Principal
from rolegate.shared.permissions.services import PermissionEvaluator

from .types import PrincipalAccessSummary, ResourceAccess

router = APIRouter(prefix="/permissions", tags=["Permissions"])


@router.get("/me", response_model=PrincipalAccessSummary)
async def get_my_permissions(
    principal: Principal = Depends(get_current_principal),
    evaluator: PermissionEvaluator = Depends(get_permission_evaluator),
) -> PrincipalAccessSummary:
    """
    Summarize the caller's access to every configured resource.
    """
    resources = [
        ResourceAccess(
            resource=key,
            operations=sorted(evaluator.allowed_operations(principal, key)),
            row_level_security=evaluator.row_level_security_for(principal, key),
        )
        for key in sorted(evaluator.config.resources)
    ]
    return PrincipalAccessSummary(
        role=principal.role,
        priority=evaluator.priority_of(principal),
        resources=resources,
    )


@router.get("/check", response_model=PermissionDecision)
async def check_permission(
    resource: str,
    operation: str,
    principal: Principal = Depends(get_current_principal),
    evaluator: PermissionEvaluator = Depends(get_permission_evaluator),
) -> PermissionDecision:
    """
    Explain whether the caller may perform an operation on a resource.

    Unknown resources and operations come back as denied decisions with a
    reason rather than as request validation errors.
    """
    return evaluator.check_permission(principal, resource, operation)
