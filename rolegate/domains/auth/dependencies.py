# rolegate/domains/auth/dependencies.py
import jwt
from fastapi import Depends, Header
from pydantic import ValidationError

from rolegate.core.settings import settings
from rolegate.shared.exceptions import (
    InvalidTokenError,
    TokenVerificationNotConfiguredError,
)
from rolegate.shared.permissions.models import Principal

from .types import PrincipalClaims


def decode_access_token(token: str) -> PrincipalClaims:
    """
    Verifies an access token against JWT_SECRET and returns its claims.
    """
    if not settings.JWT_SECRET:
        raise TokenVerificationNotConfiguredError()

    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
            options={"verify_aud": False},
        )
        return PrincipalClaims(**dict(payload))
    except (jwt.PyJWTError, ValidationError):
        raise InvalidTokenError("Invalid or expired token")


def get_token_claims(authorization: str = Header(None)) -> PrincipalClaims:
    """
    Extracts and validates the bearer token from the Authorization header.
    """
    if not authorization or not authorization.startswith("Bearer "):
        raise InvalidTokenError("Missing token")

    token = authorization.split(" ", 1)[1]
    return decode_access_token(token)


def get_current_principal(
    claims: PrincipalClaims = Depends(get_token_claims),
) -> Principal:
    """
    Builds the request principal from token claims.

    A role_priority claim is carried through as the fast-path priority.
    """
    return Principal(role=claims.role, role_priority=claims.role_priority)
