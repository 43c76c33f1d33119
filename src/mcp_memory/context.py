"""
Request context for the Memory MCP Server.

This module defines the RequestContext dataclass that carries the context of a
single method call: the resolved method, the correlation id, the store the call
operates on, and timestamps.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from mcp_memory.config import AppConfig
    from mcp_memory.protocol import JSONRPCRequest
    from mcp_memory.store import MemoryStore


@dataclass
class RequestContext:
    """
    Encapsulates the context of a single method call.

    This context is passed to every method handler.

    Attributes:
        method: Canonical method name (e.g., "store.set").
        request_id: Correlation id echoed in the response.
        store: The store the call operates on.
        config: Application configuration.
        requested_method: Method name as sent by the caller (differs from
            ``method`` when a legacy alias was used).
        started_at: Dispatcher start time, for uptime reporting.
        timestamp: When the request was received (UTC).
        metadata: Additional context supplied by the transport.
    """

    method: str
    request_id: Any
    store: MemoryStore
    config: AppConfig
    requested_method: str | None = None
    started_at: datetime | None = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert RequestContext to a dictionary for logging.

        Returns:
            Dictionary with context information.
        """
        return {
            "method": self.method,
            "requested_method": self.requested_method or self.method,
            "request_id": self.request_id,
            "timestamp": self.timestamp.isoformat(),
            "metadata": self.metadata,
        }

    @classmethod
    def from_request(
        cls,
        request: JSONRPCRequest,
        method: str,
        *,
        store: MemoryStore,
        config: AppConfig,
        started_at: datetime | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> RequestContext:
        """
        Create a RequestContext from a parsed request.

        Args:
            request: The parsed JSONRPCRequest.
            method: Canonical method name the request resolved to.
            store: The store the call operates on.
            config: Application configuration.
            started_at: Dispatcher start time.
            metadata: Optional additional metadata.

        Returns:
            A RequestContext instance for the request.
        """
        return cls(
            method=method,
            request_id=request.id,
            store=store,
            config=config,
            requested_method=request.method,
            started_at=started_at,
            metadata=metadata or {},
        )
