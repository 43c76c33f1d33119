"""
JSON-RPC 2.0 envelope handling for the Memory MCP Server.

This module validates decoded request envelopes and formats response
envelopes.

Differences from strict JSON-RPC 2.0, kept for compatibility with existing
callers:
- The "jsonrpc" field is optional on requests (validated when present).
- A request without an id (or with a null id) is answered with the default
  id 1 instead of being treated as a notification. Every request gets a reply.
- Responses carry the version under both "protocolVersion" and "jsonrpc".

Error Code Mapping:
- -32700: Parse error (malformed JSON)
- -32600: Invalid Request (missing/invalid method, wrong jsonrpc version)
- -32601: Method not found ("Unknown method")
- -32602: Invalid params (parameter validation failed)
- -32603: Internal error (unexpected handler failure)
- -32005: Resource exhausted (store key limit reached)
- -32000: Any other server error
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

from mcp_memory.errors import MethodError

# =============================================================================
# JSON-RPC Constants
# =============================================================================

JSONRPC_VERSION = "2.0"

# Correlation id used when a request carries none
DEFAULT_REQUEST_ID = 1

# Standard JSON-RPC 2.0 error codes
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603

ERROR_CODE_MAP: dict[str, int] = {
    "invalid_argument": INVALID_PARAMS,
    "method_not_found": METHOD_NOT_FOUND,
    "resource_exhausted": -32005,
    "internal": INTERNAL_ERROR,
}

# Server error code for unmapped error codes
DEFAULT_SERVER_ERROR = -32000


# =============================================================================
# Data Classes
# =============================================================================


class JSONRPCError(Exception):
    """
    Represents a JSON-RPC 2.0 error object.

    This class is both an Exception (so it can be raised while parsing) and a
    data container for the error member of a response.

    Attributes:
        code: Integer error code.
        message: Human-readable error message.
        data: Optional structured error data.
    """

    def __init__(
        self,
        code: int,
        message: str,
        data: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.data = data

    def to_dict(self) -> dict[str, Any]:
        """
        Convert the error to a dictionary for JSON serialization.

        Returns:
            Dictionary with code, message, and optionally data.
        """
        result: dict[str, Any] = {
            "code": self.code,
            "message": self.message,
        }
        if self.data is not None:
            result["data"] = self.data
        return result

    def __repr__(self) -> str:
        """Return a detailed string representation."""
        return (
            f"JSONRPCError(code={self.code}, "
            f"message={self.message!r}, "
            f"data={self.data!r})"
        )


@dataclass
class JSONRPCRequest:
    """
    Represents a validated request envelope.

    Attributes:
        jsonrpc: Protocol version (always "2.0" after parsing).
        id: Correlation id (DEFAULT_REQUEST_ID when the caller sent none).
        method: The method name as sent by the caller.
        params: Parameters for the method (always an object).
    """

    jsonrpc: str
    id: Any
    method: str
    params: dict[str, Any] = field(default_factory=dict)


@dataclass
class JSONRPCResponse:
    """
    Represents a response envelope.

    Exactly one of result or error is serialized.

    Attributes:
        jsonrpc: Protocol version (always "2.0"), serialized under both
            "protocolVersion" and "jsonrpc".
        id: Correlation id echoed from the request.
        result: Success result (if not an error).
        error: Error object (if an error occurred).
    """

    jsonrpc: str
    id: Any
    result: Any | None = None
    error: JSONRPCError | None = None

    def to_dict(self) -> dict[str, Any]:
        """
        Convert the response to a dictionary for JSON serialization.

        Returns:
            Dictionary with protocolVersion, jsonrpc, id, and either result
            or error.
        """
        response: dict[str, Any] = {
            "protocolVersion": self.jsonrpc,
            "jsonrpc": self.jsonrpc,
            "id": self.id,
        }
        if self.error is not None:
            response["error"] = self.error.to_dict()
        else:
            response["result"] = self.result
        return response

    def to_json(self) -> str:
        """
        Serialize the response to a JSON string.

        Values that are not JSON-native are serialized with ``str``.

        Returns:
            JSON string representation of the response.
        """
        return json.dumps(self.to_dict(), separators=(",", ":"), default=str)


# =============================================================================
# Request Parsing
# =============================================================================


def extract_request_id(data: Any) -> Any:
    """
    Return the correlation id of a decoded envelope.

    Works on anything, so that even an invalid envelope can be answered with
    the caller's id.

    Args:
        data: Decoded request body.

    Returns:
        The id field, or DEFAULT_REQUEST_ID when absent, null, or when data is
        not an object.
    """
    if not isinstance(data, dict):
        return DEFAULT_REQUEST_ID
    request_id = data.get("id")
    return DEFAULT_REQUEST_ID if request_id is None else request_id


def parse_envelope(data: Any) -> JSONRPCRequest:
    """
    Validate a decoded request envelope.

    Args:
        data: Decoded JSON value (expected to be an object).

    Returns:
        Parsed JSONRPCRequest object.

    Raises:
        JSONRPCError: If the envelope is malformed.

    Example:
        >>> request = parse_envelope({"method": "store.list"})
        >>> request.id, request.params
        (1, {})
    """
    if not isinstance(data, dict):
        raise JSONRPCError(
            code=INVALID_REQUEST,
            message="Invalid Request: Request must be a JSON object",
        )

    jsonrpc = data.get("jsonrpc", JSONRPC_VERSION)
    if jsonrpc != JSONRPC_VERSION:
        raise JSONRPCError(
            code=INVALID_REQUEST,
            message=f"Invalid Request: jsonrpc must be '2.0', got '{jsonrpc}'",
        )

    method = data.get("method")
    if method is None:
        raise JSONRPCError(
            code=INVALID_REQUEST,
            message="Invalid Request: Missing 'method' field",
        )
    if not isinstance(method, str) or not method:
        raise JSONRPCError(
            code=INVALID_REQUEST,
            message="Invalid Request: 'method' must be a non-empty string",
        )

    params = data.get("params")
    if params is None:
        params = {}
    if not isinstance(params, dict):
        raise JSONRPCError(
            code=INVALID_PARAMS,
            message="Invalid params: 'params' must be an object",
            data={
                "error_code": "invalid_argument",
                "message": "'params' must be an object",
                "details": {"type": type(params).__name__},
            },
        )

    return JSONRPCRequest(
        jsonrpc=JSONRPC_VERSION,
        id=extract_request_id(data),
        method=method,
        params=params,
    )


def decode_request(request_json: str | bytes) -> Any:
    """
    Decode raw JSON text into a Python value.

    Args:
        request_json: Raw JSON text.

    Returns:
        The decoded value.

    Raises:
        JSONRPCError: With PARSE_ERROR if the text is not valid JSON, bytes
            are not valid UTF-8, or nesting exceeds the interpreter's
            recursion limit.
    """
    try:
        return json.loads(request_json)
    except json.JSONDecodeError as e:
        raise JSONRPCError(
            code=PARSE_ERROR,
            message=f"Parse error: Invalid JSON - {e.msg}",
        ) from e
    except UnicodeDecodeError as e:
        raise JSONRPCError(
            code=PARSE_ERROR,
            message="Parse error: Invalid encoding - UTF-8 required",
        ) from e
    except RecursionError as e:
        raise JSONRPCError(
            code=PARSE_ERROR,
            message="Parse error: JSON nested too deeply",
        ) from e


# =============================================================================
# Response Formatting
# =============================================================================


def format_success_response(request_id: Any, result: Any) -> JSONRPCResponse:
    """
    Format a successful response.

    Args:
        request_id: The request ID to include in the response.
        result: The result value to include in the response.

    Returns:
        JSONRPCResponse object representing a success response.

    Example:
        >>> response = format_success_response(7, {"success": True})
        >>> print(response.to_json())
        {"protocolVersion":"2.0","jsonrpc":"2.0","id":7,"result":{"success":true}}
    """
    return JSONRPCResponse(
        jsonrpc=JSONRPC_VERSION,
        id=request_id,
        result=result,
        error=None,
    )


def format_error_response(request_id: Any, error: JSONRPCError) -> JSONRPCResponse:
    """
    Format an error response.

    Args:
        request_id: The request ID to include in the response.
        error: The JSONRPCError object describing the error.

    Returns:
        JSONRPCResponse object representing an error response.
    """
    return JSONRPCResponse(
        jsonrpc=JSONRPC_VERSION,
        id=request_id,
        result=None,
        error=error,
    )


# =============================================================================
# MethodError to JSON-RPC Error Mapping
# =============================================================================


def method_error_to_jsonrpc_error(method_error: MethodError) -> JSONRPCError:
    """
    Convert a MethodError to a JSONRPCError.

    Args:
        method_error: The MethodError to convert.

    Returns:
        JSONRPCError with the mapped code and the error's fields as data.

    Example:
        >>> from mcp_memory.errors import InvalidArgumentError
        >>> err = InvalidArgumentError("missing required field: key")
        >>> method_error_to_jsonrpc_error(err).code
        -32602
    """
    jsonrpc_code = ERROR_CODE_MAP.get(method_error.error_code, DEFAULT_SERVER_ERROR)

    return JSONRPCError(
        code=jsonrpc_code,
        message=method_error.message,
        data=method_error.to_dict(),
    )


def create_internal_error(
    message: str, details: dict[str, Any] | None = None
) -> JSONRPCError:
    """
    Create an internal error for unexpected exceptions.

    Args:
        message: Error message describing what went wrong.
        details: Optional additional details.

    Returns:
        JSONRPCError with code -32603.
    """
    return JSONRPCError(
        code=INTERNAL_ERROR,
        message=message,
        data={
            "error_code": "internal",
            "message": message,
            "details": details or {},
        },
    )
