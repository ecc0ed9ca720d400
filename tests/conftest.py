"""
Global pytest configuration and fixtures for the rolegate test suite.
"""

import os

# Set test environment variables before settings are imported
os.environ["JWT_SECRET"] = "test-secret-key-for-testing-only-32-chars"
os.environ.pop("PERMISSIONS_CONFIG_PATH", None)

from typing import Any, Callable, Dict  # noqa: E402

import jwt  # noqa: E402
import pytest  # noqa: E402

# Import fixtures from fixture modules
from tests.fixtures.permission_fixtures import *  # noqa: F403, F401, E402


@pytest.fixture
def test_jwt_secret() -> str:
    """JWT secret for generating test tokens."""
    return "test-secret-key-for-testing-only-32-chars"


@pytest.fixture
def make_token(test_jwt_secret: str) -> Callable[..., str]:
    """Factory for signed access tokens carrying role claims."""

    def _make_token(**claims: Any) -> str:
        payload: Dict[str, Any] = {"sub": "test-user-id-123", **claims}
        return jwt.encode(payload, test_jwt_secret, algorithm="HS256")

    return _make_token


@pytest.fixture
def auth_headers(make_token: Callable[..., str]) -> Callable[..., Dict[str, str]]:
    """Factory for Authorization headers with a valid token."""

    def _auth_headers(**claims: Any) -> Dict[str, str]:
        return {"Authorization": f"Bearer {make_token(**claims)}"}

    return _auth_headers
