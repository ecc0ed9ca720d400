import logging
from typing import Awaitable, Callable

from fastapi import Depends, FastAPI, Request

from rolegate.domains.auth.dependencies import get_current_principal
from rolegate.shared.exceptions import (
    InsufficientPermissionsError,
    PermissionsNotConfiguredError,
)

from .loader import PermissionConfigLoader
from .models import CrudOperation, OperationLike, PermissionContext, Principal
from .services import PermissionEvaluator

logger = logging.getLogger(__name__)


def install_permissions(app: FastAPI, loader: PermissionConfigLoader) -> None:
    """
    Attach a permission loader to the application and load it once.

    Fails fast: an invalid document raises here, during startup.

    Args:
        app: FastAPI application
        loader: Loader owning the permission document cache

    Raises:
        PermissionConfigError: If the document cannot be loaded
    """
    loader.load()
    app.state.permission_loader = loader


def get_permission_loader(request: Request) -> PermissionConfigLoader:
    loader = getattr(request.app.state, "permission_loader", None)
    if loader is None:
        raise PermissionsNotConfiguredError()
    return loader


def get_permission_evaluator(
    loader: PermissionConfigLoader = Depends(get_permission_loader),
) -> PermissionEvaluator:
    return PermissionEvaluator(loader.load())


def require_permission(
    resource: str, operation: OperationLike
) -> Callable[..., Awaitable[PermissionContext]]:
    """
    Dependency factory for resource/operation authorization.

    Creates a dependency that validates the current principal may perform
    the operation on the resource.

    Args:
        resource: Resource name (e.g. 'users', 'work_orders')
        operation: CRUD operation required to access the endpoint

    Returns:
        Async dependency function that validates permission and returns
        the permission context, including the RLS policy for reads
    """
    crud_operation = CrudOperation(operation)

    async def check_permission(
        request: Request,
        principal: Principal = Depends(get_current_principal),
        evaluator: PermissionEvaluator = Depends(get_permission_evaluator),
    ) -> PermissionContext:
        """
        Validate principal has permission for the resource operation.

        Raises:
            HTTPException: 403 with the denial reason if not permitted
        """
        decision = evaluator.check_permission(principal, resource, crud_operation)
        if not decision.allowed:
            logger.warning(
                f"Permission denied for {request.method} {request.url.path}: "
                f"role={principal.role} {crud_operation.value} {resource} "
                f"({decision.denial_reason})"
            )
            raise InsufficientPermissionsError(
                decision.denial_reason or "Insufficient permissions"
            )

        return PermissionContext(
            principal=principal,
            resource=resource,
            operation=crud_operation,
            priority=evaluator.priority_of(principal),
            rls_policy=evaluator.row_level_security_for(principal, resource),
        )

    return check_permission


def require_minimum_role(
    role_name: str,
) -> Callable[..., Awaitable[Principal]]:
    """
    Dependency factory for minimum-role authorization.

    Higher roles pass: an admin can access manager-only routes.
    """

    async def check_minimum_role(
        request: Request,
        principal: Principal = Depends(get_current_principal),
        evaluator: PermissionEvaluator = Depends(get_permission_evaluator),
    ) -> Principal:
        if not evaluator.has_minimum_role(principal, role_name):
            logger.warning(
                f"Minimum role {role_name} not met for {request.method} "
                f"{request.url.path}: role={principal.role}"
            )
            raise InsufficientPermissionsError(f"Minimum role required: {role_name}")
        return principal

    return check_minimum_role
