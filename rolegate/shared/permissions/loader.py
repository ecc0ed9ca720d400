"""
Permission configuration loader.

Reads the shared permission document, validates its structural invariants and
caches the parsed snapshot for a freshness window. The same document is the
source of truth for every runtime that evaluates permissions.
"""

import json
import logging
import threading
import time
from pathlib import Path
from typing import Any, Callable, Optional, Union

from pydantic import ValidationError

from rolegate.core.settings import settings
from rolegate.shared.exceptions import (
    ConfigParseError,
    ConfigSourceError,
    ConfigStructureError,
    ConfigValidationError,
)

from .models import CRUD_OPERATIONS, PermissionConfig

logger = logging.getLogger(__name__)

BUNDLED_CONFIG_FILENAME = "permissions.json"


def bundled_config_path() -> Path:
    """Path of the reference permission document shipped with the package."""
    return Path(__file__).resolve().parents[2] / "config" / BUNDLED_CONFIG_FILENAME


def _is_int(value: Any) -> bool:
    # bool is an int subclass; JSON true/false must not pass as a priority
    return isinstance(value, int) and not isinstance(value, bool)


def validate_permission_config(document: Any) -> None:
    """
    Validate permission document structure.

    Args:
        document: Parsed JSON document

    Raises:
        ConfigStructureError: If top-level keys are missing or not objects
        ConfigValidationError: If roles or resources break an invariant
    """
    if not isinstance(document, dict):
        raise ConfigStructureError("Permission document must be a JSON object")

    roles = document.get("roles")
    if not isinstance(roles, dict):
        raise ConfigStructureError('Missing or invalid "roles" object')
    resources = document.get("resources")
    if not isinstance(resources, dict):
        raise ConfigStructureError('Missing or invalid "resources" object')

    if not roles:
        raise ConfigValidationError("At least one role must be defined")

    priorities: set[int] = set()
    for role_name, role in roles.items():
        if role_name != role_name.lower():
            raise ConfigValidationError(f'Role name "{role_name}" must be lowercase')
        if not isinstance(role, dict):
            raise ConfigValidationError(f'Invalid definition for role "{role_name}"')
        priority = role.get("priority")
        if not _is_int(priority) or priority < 1:
            raise ConfigValidationError(f'Invalid priority for role "{role_name}"')
        if priority in priorities:
            raise ConfigValidationError(
                f"Duplicate priority {priority} - each role must have unique priority"
            )
        priorities.add(priority)

    for resource_key, resource in resources.items():
        if not isinstance(resource, dict):
            raise ConfigValidationError(
                f'Invalid definition for resource "{resource_key}"'
            )
        permissions = resource.get("permissions")
        if not isinstance(permissions, dict):
            raise ConfigValidationError(
                f'Missing permissions for resource "{resource_key}"'
            )

        for op in CRUD_OPERATIONS:
            if op not in permissions:
                raise ConfigValidationError(
                    f'Missing "{op}" permission for resource "{resource_key}"'
                )
            _validate_rule(roles, resource_key, op, permissions[op])

        rls = resource.get("rowLevelSecurity")
        if rls is None:
            continue
        if not isinstance(rls, dict) or not all(
            isinstance(policy, str) for policy in rls.values()
        ):
            raise ConfigValidationError(
                f'Invalid rowLevelSecurity for resource "{resource_key}"'
            )
        seen: set[str] = set()
        for role_name in rls:
            normalized = role_name.lower()
            if normalized in seen:
                raise ConfigValidationError(
                    f'Duplicate rowLevelSecurity entry for role "{normalized}" '
                    f'in resource "{resource_key}"'
                )
            seen.add(normalized)
            if normalized not in roles:
                logger.warning(
                    f'rowLevelSecurity for "{resource_key}" names unknown role '
                    f'"{role_name}"'
                )


def _validate_rule(
    roles: dict[str, Any], resource_key: str, op: str, rule: Any
) -> None:
    if not isinstance(rule, dict):
        raise ConfigValidationError(f"Invalid rule for {resource_key}.{op}")

    minimum_priority = rule.get("minimumPriority")
    if not _is_int(minimum_priority) or minimum_priority < 1:
        raise ConfigValidationError(f"Invalid minimumPriority for {resource_key}.{op}")

    minimum_role = rule.get("minimumRole")
    if minimum_role is None:
        # Only an unreachable rule may omit its role name
        if any(role["priority"] >= minimum_priority for role in roles.values()):
            raise ConfigValidationError(
                f"Missing minimumRole for {resource_key}.{op}"
            )
        return

    if not isinstance(minimum_role, str) or minimum_role not in roles:
        raise ConfigValidationError(
            f'Invalid minimumRole "{minimum_role}" for {resource_key}.{op}'
        )

    expected_priority = roles[minimum_role]["priority"]
    if minimum_priority != expected_priority:
        raise ConfigValidationError(
            f"Priority mismatch for {resource_key}.{op}: "
            f"minimumPriority={minimum_priority} but "
            f'role "{minimum_role}" has priority={expected_priority}'
        )


def parse_permission_config(raw: Union[str, bytes]) -> PermissionConfig:
    """
    Parse and validate a permission document.

    Args:
        raw: JSON text or UTF-8 bytes

    Returns:
        Validated PermissionConfig snapshot

    Raises:
        ConfigParseError: If the input is not valid JSON
        ConfigStructureError: If required top-level keys are missing
        ConfigValidationError: If an invariant is violated
    """
    try:
        document = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ConfigParseError(f"Malformed permission document: {e}") from e

    validate_permission_config(document)

    try:
        return PermissionConfig.from_document(document)
    except ValidationError as e:
        raise ConfigValidationError(f"Invalid permission document: {e}") from e


class PermissionConfigLoader:
    """
    Loads and caches one permission document.

    Owned by whichever component performs startup; tests create independent
    instances. Reloads are single-writer: concurrent callers that find a stale
    cache wait on the lock and return the winner's snapshot.
    """

    def __init__(
        self,
        source: Optional[Union[str, Path]] = None,
        cache_ttl_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if source is None:
            source = settings.PERMISSIONS_CONFIG_PATH or bundled_config_path()
        if cache_ttl_seconds is None:
            cache_ttl_seconds = settings.PERMISSIONS_CACHE_TTL_SECONDS

        self.source = Path(source)
        self.cache_ttl_seconds = cache_ttl_seconds
        self._clock = clock
        self._lock = threading.Lock()
        # (config, loaded_at) swapped as one value
        self._cache: Optional[tuple[PermissionConfig, float]] = None

    @property
    def is_loaded(self) -> bool:
        return self._cache is not None

    @property
    def loaded_at(self) -> Optional[float]:
        cache = self._cache
        return cache[1] if cache else None

    def _fresh(self) -> Optional[PermissionConfig]:
        cache = self._cache
        if cache is None:
            return None
        config, loaded_at = cache
        if self._clock() - loaded_at < self.cache_ttl_seconds:
            return config
        return None

    def load(self, force_reload: bool = False) -> PermissionConfig:
        """
        Load permission configuration, using the cache while it is fresh.

        Args:
            force_reload: Skip the cache and re-read the document

        Returns:
            Validated PermissionConfig snapshot

        Raises:
            PermissionConfigError: If the document cannot be read or is invalid.
                Any previously cached snapshot is left in place.
        """
        if not force_reload:
            cached = self._fresh()
            if cached is not None:
                return cached

        with self._lock:
            if not force_reload:
                cached = self._fresh()
                if cached is not None:
                    logger.debug("Permission config loaded by concurrent caller")
                    return cached

            try:
                config = parse_permission_config(self._read_source())
            except Exception as e:
                logger.error(f"Failed to load permissions from {self.source}: {e}")
                raise

            self._cache = (config, self._clock())

        logger.info(
            f"Loaded permission config v{config.version} from {self.source} "
            f"({len(config.roles)} roles, {len(config.resources)} resources)"
        )
        return config

    def reload(self) -> PermissionConfig:
        """Reload permissions from the source, bypassing the cache."""
        logger.info("Hot-reloading permissions")
        return self.load(force_reload=True)

    def clear_cache(self) -> None:
        """Drop the cached snapshot (useful for testing)."""
        with self._lock:
            self._cache = None

    def _read_source(self) -> bytes:
        try:
            return self.source.read_bytes()
        except OSError as e:
            raise ConfigSourceError(
                f"Cannot read permission document {self.source}: {e}"
            ) from e
