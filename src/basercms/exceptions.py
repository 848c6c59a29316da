"""
baserCMS Exception Hierarchy

All baserCMS-specific exceptions inherit from BaserCMSError.

Categories that reach tool callers:
- InvalidArgumentError: caller input failed validation; nothing was sent.
- EntityNotFoundError: a get call named an id that does not exist.
- WriteFailure: the remote create/edit/delete call failed; not retried.
- RemoteServiceError: any other remote failure (read calls, login).

Lookup failures during reference resolution are not exceptions at all;
they surface as ``NotFound`` results and are absorbed by the resolver.

Usage:
    from src.basercms.exceptions import WriteFailure

    try:
        await session.create(EntityKind.BLOG_POST, payload)
    except RemoteServiceError as e:
        raise WriteFailure(EntityKind.BLOG_POST, "create", str(e)) from e
"""

from __future__ import annotations


class BaserCMSError(Exception):
    """
    Base exception for all baserCMS errors.

    Attributes:
        message: Human-readable error description
        code: Optional machine-readable error code for programmatic handling
    """

    def __init__(self, message: str, code: str | None = None) -> None:
        self.message = message
        self.code = code
        super().__init__(message)

    def __str__(self) -> str:
        if self.code:
            return f"[{self.code}] {self.message}"
        return self.message

    def to_dict(self) -> dict[str, str | None]:
        """Structured error payload returned to tool callers."""
        return {"error": self.message, "code": self.code}


# =============================================================================
# Input Errors
# =============================================================================


class InvalidArgumentError(BaserCMSError, ValueError):
    """Caller input failed validation. The remote write is never attempted."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message, code="INVALID_ARGUMENT")
        self.field = field


class EntityNotFoundError(BaserCMSError):
    """A get call named an id the remote service does not have."""

    def __init__(self, entity: str, entity_id: int) -> None:
        super().__init__(f"{entity} {entity_id} not found", code="NOT_FOUND")
        self.entity = entity
        self.entity_id = entity_id


# =============================================================================
# Remote Service Errors
# =============================================================================


class RemoteServiceError(BaserCMSError):
    """The baserCMS API could not be reached or answered with an error."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        code: str = "REMOTE_ERROR",
    ) -> None:
        super().__init__(message, code=code)
        self.status_code = status_code


class AuthenticationError(RemoteServiceError):
    """Login failed or the access token was rejected."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message, status_code=status_code, code="AUTHENTICATION_FAILED")


class WriteFailure(RemoteServiceError):
    """A create, edit or delete call on the remote service failed."""

    def __init__(
        self,
        entity: str,
        operation: str,
        reason: str,
        status_code: int | None = None,
    ) -> None:
        super().__init__(
            f"Failed to {operation} {entity}: {reason}",
            status_code=status_code,
            code="WRITE_FAILED",
        )
        self.entity = entity
        self.operation = operation
        self.reason = reason


# =============================================================================
# Configuration Errors
# =============================================================================


class MissingConfigError(BaserCMSError):
    """Required configuration is missing."""

    def __init__(self, field: str, hint: str | None = None) -> None:
        message = f"Missing required configuration: '{field}'"
        if hint:
            message += f". {hint}"
        super().__init__(message, code="CONFIG_MISSING")
        self.field = field
