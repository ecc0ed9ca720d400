from enum import Enum
from typing import Any, Mapping, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictInt,
    ValidationError,
    field_validator,
)


class CrudOperation(str, Enum):
    """
    The closed set of operations gated on every resource.

    Adding an operation is a schema change: every resource in the permission
    document must define a rule for each member.
    """

    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"


CRUD_OPERATIONS: tuple[str, ...] = tuple(op.value for op in CrudOperation)

OperationLike = Union[CrudOperation, str]


def operation_key(operation: OperationLike) -> str:
    """Return the document key for an operation given as enum or string."""
    if isinstance(operation, CrudOperation):
        return operation.value
    return operation


def normalize_role_name(role_name: Any) -> Optional[str]:
    """Lowercase a role name for lookup; None for empty or non-string input."""
    if not role_name or not isinstance(role_name, str):
        return None
    return role_name.lower()


def _text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


class RoleDefinition(BaseModel):
    """A named privilege level with a unique priority."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Lowercase role identifier")
    priority: int = Field(..., ge=1, description="Higher value = more privilege")
    description: str = Field("", description="Cosmetic description")


class RoleReference(BaseModel):
    """Minimal role identity reported back in denial decisions."""

    model_config = ConfigDict(frozen=True)

    name: str
    priority: int


class PermissionRule(BaseModel):
    """Minimum priority (and its role name) required for one operation."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    operation: CrudOperation
    minimum_priority: int = Field(..., alias="minimumPriority", ge=1)
    minimum_role: Optional[str] = Field(None, alias="minimumRole")
    description: str = ""


class ResourceDefinition(BaseModel):
    """A protected entity type with one rule per CRUD operation."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    key: str
    description: str = ""
    permissions: dict[str, PermissionRule]
    row_level_security: dict[str, str] = Field(
        default_factory=dict, alias="rowLevelSecurity"
    )


class PermissionConfig(BaseModel):
    """
    Validated snapshot of the permission document.

    Instances are built by the configuration loader and never mutated
    afterwards. All accessors fail closed: a lookup miss returns None.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    version: str = "1.0.0"
    last_modified: Optional[str] = Field(None, alias="lastModified")
    roles: dict[str, RoleDefinition]
    resources: dict[str, ResourceDefinition]

    @classmethod
    def from_document(cls, document: Mapping[str, Any]) -> "PermissionConfig":
        """
        Build a config from an already validated JSON document.

        Role and resource names are injected from their mapping keys and
        row-level-security role keys are lowercased. Cosmetic fields
        (version, lastModified, descriptions) are kept as text whatever their
        JSON type.

        Raises:
            pydantic.ValidationError: If a field has an unexpected type
        """
        roles = {
            name: RoleDefinition(
                name=name,
                priority=role["priority"],
                description=_text(role.get("description")),
            )
            for name, role in document["roles"].items()
        }

        resources = {}
        for key, resource in document["resources"].items():
            permissions = {
                op: PermissionRule(
                    operation=op,
                    minimumPriority=rule["minimumPriority"],
                    minimumRole=rule.get("minimumRole"),
                    description=_text(rule.get("description")),
                )
                for op, rule in resource["permissions"].items()
                if op in CRUD_OPERATIONS
            }
            rls = resource.get("rowLevelSecurity") or {}
            resources[key] = ResourceDefinition(
                key=key,
                description=_text(resource.get("description")),
                permissions=permissions,
                rowLevelSecurity={role.lower(): policy for role, policy in rls.items()},
            )

        return cls(
            version=_text(document.get("version")) or "1.0.0",
            lastModified=_text(document.get("lastModified")) or None,
            roles=roles,
            resources=resources,
        )

    def _rule(
        self, resource_key: str, operation: OperationLike
    ) -> Optional[PermissionRule]:
        resource = self.resources.get(resource_key)
        if resource is None:
            return None
        return resource.permissions.get(operation_key(operation))

    def role_priority(self, role_name: Optional[str]) -> Optional[int]:
        """
        Get role priority by name (case-insensitive).

        Args:
            role_name: Role name as supplied by the caller

        Returns:
            The role's priority, or None if the name is empty or unknown
        """
        normalized = normalize_role_name(role_name)
        if normalized is None:
            return None
        role = self.roles.get(normalized)
        return role.priority if role else None

    def minimum_priority(
        self, resource_key: str, operation: OperationLike
    ) -> Optional[int]:
        """Get minimum priority required for operation on resource."""
        rule = self._rule(resource_key, operation)
        return rule.minimum_priority if rule else None

    def minimum_role_name(
        self, resource_key: str, operation: OperationLike
    ) -> Optional[str]:
        """Get the role name recorded as the minimum for operation on resource."""
        role = self.minimum_required_role(resource_key, operation)
        return role.name if role else None

    def minimum_required_role(
        self, resource_key: str, operation: OperationLike
    ) -> Optional[RoleDefinition]:
        """
        Resolve the role that satisfies a rule.

        Uses the rule's recorded minimumRole; for rules without one, the
        lowest-priority role that still meets the minimum. None when the
        rule is unknown or no configured role can reach it.
        """
        rule = self._rule(resource_key, operation)
        if rule is None:
            return None
        if rule.minimum_role:
            return self.roles.get(rule.minimum_role)
        for role in self.roles_by_priority():
            if role.priority >= rule.minimum_priority:
                return role
        return None

    def row_level_security_policy(
        self, role_name: Optional[str], resource_key: str
    ) -> Optional[str]:
        """Get row-level security policy tag for role and resource."""
        normalized = normalize_role_name(role_name)
        if normalized is None:
            return None
        resource = self.resources.get(resource_key)
        if resource is None:
            return None
        return resource.row_level_security.get(normalized)

    def role_hierarchy(self) -> dict[str, int]:
        """Map of role name -> priority."""
        return {name: role.priority for name, role in self.roles.items()}

    def permission_matrix(self) -> dict[str, dict[str, int]]:
        """Map of resource -> operation -> minimum priority."""
        return {
            key: {op: rule.minimum_priority for op, rule in resource.permissions.items()}
            for key, resource in self.resources.items()
        }

    def roles_by_priority(self) -> list[RoleDefinition]:
        """Roles ordered from lowest to highest priority."""
        return sorted(self.roles.values(), key=lambda role: role.priority)

    def role_for_priority(self, priority: int) -> Optional[RoleDefinition]:
        """Get the role holding an exact priority value."""
        for role in self.roles.values():
            if role.priority == priority:
                return role
        return None


class Principal(BaseModel):
    """
    Resolved identity making a request.

    `priority` is the fast path: when present (including 0) it is trusted as
    already resolved, e.g. from a signed token claim. Otherwise the role name
    is looked up in the hierarchy. Integral floats (5.0) are accepted as the
    same priority; strings, booleans and fractional values are not.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    role: Optional[str] = None
    priority: Optional[StrictInt] = Field(None, alias="role_priority", ge=0)

    @field_validator("priority", mode="before")
    @classmethod
    def integral_float_priority(cls, v: Any) -> Any:
        """Normalize 5.0 to 5; JSON clients do not distinguish them."""
        if isinstance(v, float) and v.is_integer():
            return int(v)
        return v

    @classmethod
    def coerce(cls, value: Any) -> Optional["Principal"]:
        """
        Accept a Principal, a mapping with role/role_priority keys, or None.

        Anything that does not validate is treated as an absent principal.
        """
        if value is None or isinstance(value, Principal):
            return value
        if isinstance(value, Mapping):
            try:
                return cls.model_validate(dict(value))
            except ValidationError:
                return None
        return None


class PermissionDecision(BaseModel):
    """Outcome of a permission check, with the reason when denied."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    allowed: bool
    denial_reason: Optional[str] = Field(None, alias="denialReason")
    minimum_required: Optional[RoleReference] = Field(None, alias="minimumRequired")

    @classmethod
    def granted(cls) -> "PermissionDecision":
        return cls(allowed=True)

    @classmethod
    def denied(
        cls, reason: str, minimum_required: Optional[RoleDefinition] = None
    ) -> "PermissionDecision":
        reference = None
        if minimum_required is not None:
            reference = RoleReference(
                name=minimum_required.name, priority=minimum_required.priority
            )
        return cls(allowed=False, denialReason=reason, minimumRequired=reference)


class PermissionContext(BaseModel):
    """
    What a request handler learns after passing a permission gate.

    `rls_policy` is resolved by role name. A principal that carries only a
    priority gets None, which means no policy was resolved, not that rows
    are unrestricted. Handlers building row filters for such principals must
    decide their own scope (build_rls_filter(None, ...) applies no filter).
    """

    model_config = ConfigDict(frozen=True)

    principal: Principal
    resource: str
    operation: CrudOperation
    priority: int
    rls_policy: Optional[str] = None
