"""Custom exceptions for the GeneratePress abilities service.

Structural failures (unknown ability, missing capability, bad input) are
raised as exceptions and rendered by the HTTP layer. Semantic failures stay
inside the ability payload as ``success: false``.
"""

from typing import Any


class GpAbilitiesException(Exception):
    """Base exception class for the service."""

    def __init__(
        self,
        message: str,
        error_code: str,
        status_code: int = 500,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Render as the ``{"error": {...}}`` envelope shared by the API and CLI."""
        return {"error": {"code": self.error_code, "message": self.message, "details": self.details}}


# Ability Exceptions
class AbilityNotFoundError(GpAbilitiesException):
    """Raised when no ability is registered under the requested name."""

    def __init__(self, name: str, details: dict[str, Any] | None = None):
        super().__init__(
            message=f"Ability '{name}' not found",
            error_code="ABILITY_NOT_FOUND",
            status_code=404,
            details=details or {"name": name},
        )


class AbilityPermissionError(GpAbilitiesException):
    """Raised when the caller lacks the capability an ability requires."""

    def __init__(self, name: str, permission: str, details: dict[str, Any] | None = None):
        super().__init__(
            message=f"Sorry, you are not allowed to execute '{name}' (requires '{permission}')",
            error_code="ABILITY_PERMISSION_DENIED",
            status_code=403,
            details=details or {"name": name, "permission": permission},
        )


class AbilityValidationError(GpAbilitiesException):
    """Raised when ability input does not match its input schema."""

    def __init__(self, name: str, reason: str, details: dict[str, Any] | None = None):
        super().__init__(
            message=f"Invalid input for '{name}': {reason}",
            error_code="ABILITY_INVALID_INPUT",
            status_code=422,
            details=details or {"name": name, "reason": reason},
        )


class AbilityOutputValidationError(GpAbilitiesException):
    """Raised when an ability returns a payload that breaks its output schema."""

    def __init__(self, name: str, reason: str, details: dict[str, Any] | None = None):
        super().__init__(
            message=f"Ability '{name}' returned invalid output: {reason}",
            error_code="ABILITY_INVALID_OUTPUT",
            status_code=500,
            details=details or {"name": name, "reason": reason},
        )


# Registry Exceptions
class DuplicateAbilityError(GpAbilitiesException):
    """Raised when two providers register the same ability name."""

    def __init__(self, name: str, provider: str, existing_provider: str):
        super().__init__(
            message=f"Ability '{name}' from '{provider}' is already registered by '{existing_provider}'",
            error_code="ABILITY_ALREADY_REGISTERED",
            status_code=500,
            details={"name": name, "provider": provider, "existing_provider": existing_provider},
        )


class ProviderLoadError(GpAbilitiesException):
    """Raised when an ability provider cannot be imported or fails its contract."""

    def __init__(self, provider: str, reason: str):
        super().__init__(
            message=f"Failed to load ability provider '{provider}': {reason}",
            error_code="PROVIDER_LOAD_ERROR",
            status_code=500,
            details={"provider": provider, "reason": reason},
        )


# Authentication Exceptions
class AuthenticationError(GpAbilitiesException):
    """Raised when a request carries a missing or wrong API key."""

    def __init__(self, message: str = "Invalid or missing API key"):
        super().__init__(message=message, error_code="AUTHENTICATION_ERROR", status_code=401)


# Store Exceptions
class StoreError(GpAbilitiesException):
    """Raised when the WordPress store cannot complete an operation."""

    def __init__(self, operation: str, reason: str, details: dict[str, Any] | None = None):
        super().__init__(
            message=f"Store operation '{operation}' failed: {reason}",
            error_code="STORE_ERROR",
            status_code=502,
            details=details or {"operation": operation, "reason": reason},
        )
