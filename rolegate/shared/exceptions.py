# rolegate/shared/exceptions.py
from fastapi import HTTPException, status


# Permission Configuration Exceptions
class PermissionConfigError(Exception):
    """Base exception for permission documents that cannot be loaded."""

    def __init__(self, message: str = "Invalid permission configuration") -> None:
        self.message = message
        super().__init__(self.message)


class ConfigSourceError(PermissionConfigError):
    """Raised when the permission document cannot be read."""


class ConfigParseError(PermissionConfigError):
    """Raised when the permission document is not valid JSON."""


class ConfigStructureError(PermissionConfigError):
    """Raised when required top-level keys are missing or malformed."""


class ConfigValidationError(PermissionConfigError):
    """Raised when roles or resources violate hierarchy invariants."""


# Authentication & Authorization Exceptions
class InvalidTokenError(HTTPException):
    def __init__(self, detail: str = "Missing or invalid token") -> None:
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class InsufficientPermissionsError(HTTPException):
    def __init__(self, detail: str = "Insufficient permissions") -> None:
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class TokenVerificationNotConfiguredError(HTTPException):
    def __init__(self) -> None:
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Token verification not configured",
        )


class PermissionsNotConfiguredError(HTTPException):
    def __init__(self) -> None:
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Permission configuration not loaded",
        )
