"""
Tests for the errors module.

This test module validates:
- MethodError base class functionality
- Error subclasses and their error codes
- Error serialization (to_dict)
"""

from __future__ import annotations

import pytest

from mcp_memory.errors import (
    InternalError,
    InvalidArgumentError,
    MethodError,
    MethodNotFoundError,
    ResourceExhaustedError,
)

# =============================================================================
# Tests for MethodError Base Class
# =============================================================================


class TestMethodError:
    """Tests for MethodError base class."""

    def test_init_with_all_args(self) -> None:
        """Test MethodError initialization with all arguments."""
        error = MethodError(
            error_code="test_error",
            message="Test error message",
            details={"key": "value"},
        )

        assert error.error_code == "test_error"
        assert error.message == "Test error message"
        assert error.details == {"key": "value"}

    def test_details_default_to_empty_dict(self) -> None:
        """Test MethodError initialization without details."""
        error = MethodError(error_code="test_error", message="Test message")
        assert error.details == {}

    def test_str_representation(self) -> None:
        """Test that str() gives the message."""
        error = MethodError(error_code="test_error", message="Test error message")
        assert str(error) == "Test error message"

    def test_repr_representation(self) -> None:
        """Test the detailed repr."""
        error = InvalidArgumentError("bad key", details={"field": "key"})

        assert repr(error) == (
            "InvalidArgumentError(error_code='invalid_argument', "
            "message='bad key', details={'field': 'key'})"
        )

    def test_to_dict(self) -> None:
        """Test serialization to a dictionary."""
        error = MethodError(error_code="x", message="y", details={"z": 1})
        assert error.to_dict() == {"error_code": "x", "message": "y", "details": {"z": 1}}

    def test_can_be_raised_and_caught(self) -> None:
        """Test that subclasses are caught as MethodError."""
        with pytest.raises(MethodError):
            raise InternalError("boom")


# =============================================================================
# Tests for Subclasses
# =============================================================================


class TestErrorSubclasses:
    """Tests for the MethodError subclasses."""

    @pytest.mark.parametrize(
        ("error", "expected_code"),
        [
            (InvalidArgumentError("m"), "invalid_argument"),
            (ResourceExhaustedError("m"), "resource_exhausted"),
            (InternalError("m"), "internal"),
            (MethodNotFoundError("nope"), "method_not_found"),
        ],
    )
    def test_error_codes(self, error: MethodError, expected_code: str) -> None:
        """Test that each subclass carries its error code."""
        assert error.error_code == expected_code

    def test_method_not_found_message_and_details(self) -> None:
        """Test that MethodNotFoundError reports the unknown method."""
        error = MethodNotFoundError("nonexistent")

        assert error.message == "Unknown method"
        assert error.details == {"method": "nonexistent"}
