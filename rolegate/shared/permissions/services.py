from typing import Any, Optional

from .models import (
    CRUD_OPERATIONS,
    OperationLike,
    PermissionConfig,
    PermissionDecision,
    Principal,
    normalize_role_name,
    operation_key,
)


class PermissionEvaluator:
    """
    Computes access decisions over a loaded PermissionConfig.

    Every method is a pure read over the config snapshot and returns a
    deny outcome instead of raising. Principals may be passed as a
    Principal, a mapping with role/role_priority keys, or None.
    """

    def __init__(self, config: PermissionConfig) -> None:
        self.config = config

    def priority_of(self, principal: Any) -> int:
        """
        Resolve a principal's priority.

        A present priority (including 0) is trusted as already resolved.
        Otherwise the role is looked up in the hierarchy.

        Args:
            principal: The requesting principal, or None

        Returns:
            The priority, or 0 for absent principals and unknown roles
        """
        resolved = Principal.coerce(principal)
        if resolved is None:
            return 0
        if resolved.priority is not None:
            return resolved.priority
        if resolved.role:
            return self.config.role_priority(resolved.role) or 0
        return 0

    def can_access(
        self, principal: Any, resource_key: str, operation: OperationLike
    ) -> bool:
        """
        Check if principal may perform operation on resource.

        Args:
            principal: The requesting principal, or None
            resource_key: Resource name (e.g. 'users', 'work_orders')
            operation: CRUD operation

        Returns:
            True if the principal's priority meets the rule's minimum
        """
        user_priority = self.priority_of(principal)
        if user_priority <= 0:
            return False

        required_priority = self.config.minimum_priority(resource_key, operation)
        if required_priority is None:
            return False

        return user_priority >= required_priority

    def check_permission(
        self, principal: Any, resource_key: str, operation: OperationLike
    ) -> PermissionDecision:
        """
        Check permission and explain a denial.

        Checks short-circuit in order: principal/role presence, role known,
        resource known, operation known, priority sufficient.

        Args:
            principal: The requesting principal, or None
            resource_key: Resource name
            operation: CRUD operation

        Returns:
            PermissionDecision with denial reason and the minimum role when denied
        """
        resolved = Principal.coerce(principal)
        if resolved is None:
            return PermissionDecision.denied("No role assigned")

        if resolved.priority is not None:
            user_priority = resolved.priority
        elif resolved.role:
            role_priority = self.config.role_priority(resolved.role)
            if role_priority is None:
                return PermissionDecision.denied(f"Unknown role: {resolved.role}")
            user_priority = role_priority
        else:
            user_priority = 0

        if user_priority <= 0:
            return PermissionDecision.denied("No role assigned")

        resource = self.config.resources.get(resource_key)
        if resource is None:
            return PermissionDecision.denied(f"Unknown resource: {resource_key}")

        op = operation_key(operation)
        rule = resource.permissions.get(op)
        if rule is None:
            return PermissionDecision.denied(f"Unknown operation: {op}")

        if user_priority >= rule.minimum_priority:
            return PermissionDecision.granted()

        minimum_role = self.config.minimum_required_role(resource_key, op)
        if minimum_role is None:
            return PermissionDecision.denied(
                f"Requires priority {rule.minimum_priority} or higher"
            )
        return PermissionDecision.denied(
            f"Requires {minimum_role.name} role or higher", minimum_role
        )

    def has_minimum_role(self, principal: Any, required_role_name: str) -> bool:
        """
        Check if principal's role is at or above a required role.

        Useful for broad checks like "is manager or above?"
        """
        required_priority = self.config.role_priority(required_role_name)
        if required_priority is None:
            return False

        user_priority = self.priority_of(principal)
        if user_priority <= 0:
            return False

        return user_priority >= required_priority

    def allowed_operations(self, principal: Any, resource_key: str) -> frozenset[str]:
        """Operations the principal may perform on a resource."""
        return frozenset(
            op for op in CRUD_OPERATIONS if self.can_access(principal, resource_key, op)
        )

    def row_level_security_for(
        self, principal: Any, resource_key: str
    ) -> Optional[str]:
        """
        Get the RLS policy tag applying to principal's reads on a resource.

        Resolved by role name, so a priority-only principal has no policy.
        """
        resolved = Principal.coerce(principal)
        if resolved is None:
            return None
        return self.config.row_level_security_policy(resolved.role, resource_key)


def has_permission(
    config: PermissionConfig,
    role_name: Optional[str],
    resource_key: str,
    operation: OperationLike,
) -> bool:
    """
    Check if a role name has permission for operation on resource.

    Args:
        config: Loaded permission configuration
        role_name: User's role name (case-insensitive)
        resource_key: Resource name
        operation: CRUD operation

    Returns:
        True if the role has the permission, False otherwise
    """
    if normalize_role_name(role_name) is None:
        return False
    return PermissionEvaluator(config).can_access(
        Principal(role=role_name), resource_key, operation
    )
