"""
Error types for the Memory MCP Server.

This module defines the MethodError base class and subclasses for domain errors.
Method handlers and the store raise these instead of building JSON-RPC error
objects directly; the dispatcher maps them to JSON-RPC errors.
"""

from __future__ import annotations

from typing import Any


class MethodError(Exception):
    """
    Base exception class for method errors.

    MethodError instances are caught at the dispatcher boundary and mapped to
    JSON-RPC errors using the codes in ``mcp_memory.protocol``.

    Attributes:
        error_code: Internal error code string (e.g., "invalid_argument",
            "method_not_found", "resource_exhausted", "internal").
        message: Human-readable error message.
        details: Optional structured details (e.g., offending field, method).

    Example:
        >>> raise MethodError(
        ...     error_code="invalid_argument",
        ...     message="missing required field: key",
        ...     details={"field": "key"},
        ... )
    """

    def __init__(
        self,
        error_code: str,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize a MethodError.

        Args:
            error_code: Internal error code string identifying the error category.
            message: Human-readable error message.
            details: Optional dictionary with structured error details.
        """
        super().__init__(message)
        self.error_code = error_code
        self.message = message
        self.details = details or {}

    def __repr__(self) -> str:
        """Return a detailed string representation."""
        return (
            f"{self.__class__.__name__}("
            f"error_code={self.error_code!r}, "
            f"message={self.message!r}, "
            f"details={self.details!r})"
        )

    def to_dict(self) -> dict[str, Any]:
        """
        Convert the error to a dictionary for serialization.

        Returns:
            Dictionary with error_code, message, and details.
        """
        return {
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class InvalidArgumentError(MethodError):
    """
    Error raised when a method receives invalid or missing parameters.

    Maps to the "invalid_argument" error code.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize an InvalidArgumentError."""
        super().__init__(
            error_code="invalid_argument", message=message, details=details
        )


class MethodNotFoundError(MethodError):
    """
    Error raised when the requested method is not in the method table.

    Maps to the "method_not_found" error code.
    """

    def __init__(self, method: str) -> None:
        """Initialize a MethodNotFoundError for the given method name."""
        super().__init__(
            error_code="method_not_found",
            message="Unknown method",
            details={"method": method},
        )


class ResourceExhaustedError(MethodError):
    """
    Error raised when the store has reached its configured key limit.

    Maps to the "resource_exhausted" error code.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize a ResourceExhaustedError."""
        super().__init__(
            error_code="resource_exhausted", message=message, details=details
        )


class InternalError(MethodError):
    """
    Error raised for unexpected internal errors.

    Maps to the "internal" error code. The original exception should be
    logged with its stack trace where this is raised.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize an InternalError."""
        super().__init__(error_code="internal", message=message, details=details)
