"""
Tests for the permissions router (/permissions/me and /permissions/check).
"""

from typing import Callable, Dict

from fastapi.testclient import TestClient


class TestGetMyPermissions:
    """Test GET /api/v1/permissions/me."""

    def test_manager_summary(
        self,
        permission_client: TestClient,
        auth_headers: Callable[..., Dict[str, str]],
    ):
        response = permission_client.get(
            "/api/v1/permissions/me", headers=auth_headers(role="manager")
        )

        assert response.status_code == 200
        data = response.json()
        assert data["role"] == "manager"
        assert data["priority"] == 4

        by_resource = {item["resource"]: item for item in data["resources"]}
        assert by_resource["roles"]["operations"] == ["read"]
        assert by_resource["users"]["operations"] == ["create", "read", "update"]
        assert by_resource["users"]["row_level_security"] == "all_records"
        assert by_resource["audit_logs"]["operations"] == []

    def test_client_summary(
        self,
        permission_client: TestClient,
        auth_headers: Callable[..., Dict[str, str]],
    ):
        response = permission_client.get(
            "/api/v1/permissions/me", headers=auth_headers(role="client")
        )

        by_resource = {item["resource"]: item for item in response.json()["resources"]}
        assert by_resource["invoices"]["operations"] == ["read"]
        assert by_resource["invoices"]["row_level_security"] == "own_invoices_only"

    def test_requires_token(self, permission_client: TestClient):
        assert permission_client.get("/api/v1/permissions/me").status_code == 401


class TestCheckPermission:
    """Test GET /api/v1/permissions/check."""

    def test_allowed(
        self,
        permission_client: TestClient,
        auth_headers: Callable[..., Dict[str, str]],
    ):
        response = permission_client.get(
            "/api/v1/permissions/check",
            params={"resource": "users", "operation": "delete"},
            headers=auth_headers(role="admin"),
        )

        assert response.status_code == 200
        assert response.json() == {
            "allowed": True,
            "denialReason": None,
            "minimumRequired": None,
        }

    def test_denied_with_minimum_role(
        self,
        permission_client: TestClient,
        auth_headers: Callable[..., Dict[str, str]],
    ):
        response = permission_client.get(
            "/api/v1/permissions/check",
            params={"resource": "users", "operation": "delete"},
            headers=auth_headers(role="client"),
        )

        assert response.status_code == 200
        assert response.json() == {
            "allowed": False,
            "denialReason": "Requires admin role or higher",
            "minimumRequired": {"name": "admin", "priority": 5},
        }

    def test_unknown_resource(
        self,
        permission_client: TestClient,
        auth_headers: Callable[..., Dict[str, str]],
    ):
        response = permission_client.get(
            "/api/v1/permissions/check",
            params={"resource": "widgets", "operation": "read"},
            headers=auth_headers(role="admin"),
        )

        assert response.json()["denialReason"] == "Unknown resource: widgets"

    def test_unknown_operation_returns_decision(
        self,
        permission_client: TestClient,
        auth_headers: Callable[..., Dict[str, str]],
    ):
        response = permission_client.get(
            "/api/v1/permissions/check",
            params={"resource": "users", "operation": "archive"},
            headers=auth_headers(role="admin"),
        )

        assert response.status_code == 200
        assert response.json() == {
            "allowed": False,
            "denialReason": "Unknown operation: archive",
            "minimumRequired": None,
        }
