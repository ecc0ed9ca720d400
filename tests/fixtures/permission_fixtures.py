"""
Test fixtures and factories for permission documents, loaders and apps.

The reference document is read from the bundled permissions.json so tests
and runtime share one source of truth.
"""

import copy
import json
from pathlib import Path
from typing import Any, Callable, Dict

import pytest
from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient

from rolegate.domains.permissions.routes import router as permissions_router
from rolegate.shared.permissions.dependencies import (
    install_permissions,
    require_minimum_role,
    require_permission,
)
from rolegate.shared.permissions.loader import (
    PermissionConfigLoader,
    bundled_config_path,
    parse_permission_config,
)
from rolegate.shared.permissions.models import (
    CrudOperation,
    PermissionConfig,
    PermissionContext,
    Principal,
)
from rolegate.shared.permissions.services import PermissionEvaluator

_REFERENCE_DOCUMENT: Dict[str, Any] = json.loads(
    bundled_config_path().read_text(encoding="utf-8")
)


class FakeClock:
    """Monotonic clock stand-in that tests advance by hand."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def permission_document() -> Dict[str, Any]:
    """Fresh copy of the reference permission document for mutation."""
    return copy.deepcopy(_REFERENCE_DOCUMENT)


@pytest.fixture
def write_permission_document(tmp_path: Path) -> Callable[[Any], Path]:
    """Factory that writes a document (dict or raw text) and returns its path."""

    def _write(document: Any, name: str = "permissions.json") -> Path:
        path = tmp_path / name
        if isinstance(document, (str, bytes)):
            raw = document if isinstance(document, bytes) else document.encode()
            path.write_bytes(raw)
        else:
            path.write_text(json.dumps(document), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def permission_config(permission_document: Dict[str, Any]) -> PermissionConfig:
    """Parsed reference configuration."""
    return parse_permission_config(json.dumps(permission_document))


@pytest.fixture
def evaluator(permission_config: PermissionConfig) -> PermissionEvaluator:
    """Evaluator over the reference configuration."""
    return PermissionEvaluator(permission_config)


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def permission_loader(
    permission_document: Dict[str, Any],
    write_permission_document: Callable[[Any], Path],
    fake_clock: FakeClock,
) -> PermissionConfigLoader:
    """Loader reading the reference document from a temp file."""
    path = write_permission_document(permission_document)
    return PermissionConfigLoader(source=path, cache_ttl_seconds=300, clock=fake_clock)


@pytest.fixture
def permission_app(permission_loader: PermissionConfigLoader) -> FastAPI:
    """Small app exercising the permission dependencies and router."""
    app = FastAPI()
    install_permissions(app, permission_loader)
    app.include_router(permissions_router, prefix="/api/v1")

    @app.get("/work-orders")
    async def list_work_orders(
        context: PermissionContext = Depends(
            require_permission("work_orders", CrudOperation.READ)
        ),
    ) -> Dict[str, Any]:
        return {
            "role": context.principal.role,
            "priority": context.priority,
            "rls_policy": context.rls_policy,
        }

    @app.post("/work-orders")
    async def create_work_order(
        context: PermissionContext = Depends(
            require_permission("work_orders", "create")
        ),
    ) -> Dict[str, Any]:
        return {"created": True}

    @app.delete("/users/{user_id}")
    async def delete_user(
        user_id: str,
        context: PermissionContext = Depends(require_permission("users", "delete")),
    ) -> Dict[str, Any]:
        return {"deleted": user_id}

    @app.get("/reports")
    async def get_reports(
        principal: Principal = Depends(require_minimum_role("manager")),
    ) -> Dict[str, Any]:
        return {"role": principal.role}

    return app


@pytest.fixture
def permission_client(permission_app: FastAPI) -> TestClient:
    """FastAPI test client for the permission test app."""
    return TestClient(permission_app)
