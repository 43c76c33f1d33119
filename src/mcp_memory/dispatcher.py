"""
Request dispatcher for the Memory MCP Server.

The Dispatcher is the boundary between a transport and the store. It takes a
decoded envelope (or raw JSON text), resolves the method against the closed
method table, invokes the handler, and always returns a well-formed response
envelope carrying the caller's id. No exception escapes ``handle``.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from mcp_memory.config import AppConfig
from mcp_memory.context import RequestContext
from mcp_memory.errors import MethodError, MethodNotFoundError
from mcp_memory.logging import get_logger
from mcp_memory.methods.system import build_health_result
from mcp_memory.protocol import (
    DEFAULT_REQUEST_ID,
    JSONRPCError,
    JSONRPCResponse,
    create_internal_error,
    decode_request,
    extract_request_id,
    format_error_response,
    format_success_response,
    method_error_to_jsonrpc_error,
    parse_envelope,
)
from mcp_memory.routing import MethodRegistry, build_registry
from mcp_memory.store import MemoryStore

logger = get_logger(__name__)


class Dispatcher:
    """
    Routes request envelopes to method handlers.

    The dispatcher holds no per-request state; all durable state lives in the
    store it was given.

    Attributes:
        store: The store handlers operate on.
        registry: Method table used for routing.
        config: Application configuration.
        started_at: When the dispatcher was created (UTC).

    Example:
        >>> dispatcher = Dispatcher()
        >>> response = await dispatcher.handle(
        ...     {"method": "store.set", "params": {"key": "a", "value": 1}, "id": 7}
        ... )
        >>> response.to_dict()
        {'protocolVersion': '2.0', 'jsonrpc': '2.0', 'id': 7, 'result': {'success': True, 'key': 'a'}}
    """

    def __init__(
        self,
        store: MemoryStore | None = None,
        registry: MethodRegistry | None = None,
        config: AppConfig | None = None,
    ) -> None:
        """
        Initialize the dispatcher.

        Args:
            store: Store to operate on. Created from config when not provided.
            registry: Method table. Uses the fully populated default registry
                when not provided.
            config: Application configuration. Defaults to AppConfig().
        """
        self.config = config if config is not None else AppConfig()
        self.store = (
            store
            if store is not None
            else MemoryStore(max_keys=self.config.store.max_keys)
        )
        self.registry = registry if registry is not None else build_registry()
        self.started_at = datetime.now(UTC)

    async def handle(
        self,
        envelope: Any,
        metadata: dict[str, Any] | None = None,
    ) -> JSONRPCResponse:
        """
        Handle a decoded request envelope.

        Args:
            envelope: Decoded request object ({method, params, id}).
            metadata: Optional transport metadata attached to the context.

        Returns:
            Response envelope; errors are reported inside it, never raised.
        """
        request_id = extract_request_id(envelope)

        try:
            request = parse_envelope(envelope)

            method = self.registry.resolve(
                request.method,
                allow_aliases=self.config.dispatcher.legacy_aliases,
            )
            if method is None:
                raise MethodNotFoundError(request.method)

            ctx = RequestContext.from_request(
                request,
                method.value,
                store=self.store,
                config=self.config,
                started_at=self.started_at,
                metadata=metadata,
            )
            logger.debug("Dispatching request", extra={"context": ctx.to_dict()})
            result = await self.registry.invoke(method, ctx, request.params)
            return format_success_response(request_id, result)

        except JSONRPCError as e:
            logger.info(
                "Rejected malformed request",
                extra={"request_id": request_id, "code": e.code, "error": e.message},
            )
            return format_error_response(request_id, e)

        except MethodError as e:
            if e.error_code == "internal":
                logger.error(
                    "Method failed",
                    exc_info=e.__cause__ or e,
                    extra={"request_id": request_id, "error": e.message},
                )
            else:
                logger.info(
                    "Method returned an error",
                    extra={
                        "request_id": request_id,
                        "error_code": e.error_code,
                        "error": e.message,
                    },
                )
            return format_error_response(request_id, method_error_to_jsonrpc_error(e))

        except Exception as e:
            logger.exception(
                "Unexpected error dispatching request",
                extra={"request_id": request_id, "error": str(e)},
            )
            jsonrpc_error = create_internal_error(
                message=f"Internal server error: {type(e).__name__}",
                details={"exception": str(e)},
            )
            return format_error_response(request_id, jsonrpc_error)

    async def handle_json(
        self,
        request_json: str | bytes,
        metadata: dict[str, Any] | None = None,
    ) -> str:
        """
        Handle a request given as raw JSON text.

        Args:
            request_json: Raw JSON text of the request.
            metadata: Optional transport metadata.

        Returns:
            The JSON-encoded response envelope. Undecodable input and results
            that cannot be encoded are reported as error envelopes.
        """
        try:
            envelope = decode_request(request_json)
        except JSONRPCError as e:
            logger.info("Rejected unparseable request", extra={"error": e.message})
            return format_error_response(DEFAULT_REQUEST_ID, e).to_json()

        response = await self.handle(envelope, metadata=metadata)
        try:
            return response.to_json()
        except (RecursionError, ValueError) as e:
            logger.exception(
                "Failed to encode response",
                extra={"request_id": response.id, "error": str(e)},
            )
            jsonrpc_error = create_internal_error(
                message=f"Internal server error: {type(e).__name__}",
                details={"exception": "response could not be encoded as JSON"},
            )
            return format_error_response(response.id, jsonrpc_error).to_json()

    def health(self) -> dict[str, Any]:
        """
        Report liveness and store size without going through an envelope.

        Returns:
            The same payload as the 'health' method.
        """
        return build_health_result(
            self.store, self.config.server.service_name, self.started_at
        )
