"""
System methods for the Memory MCP Server.

This module implements the un-namespaced methods:
- echo: Return the request method and params with service and timestamp
- health: Report liveness, version, uptime and the current key count
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict

from mcp_memory.context import RequestContext
from mcp_memory.logging import get_logger
from mcp_memory.routing import Method, method_handler

if TYPE_CHECKING:
    from mcp_memory.store import MemoryStore

logger = get_logger(__name__)


class EmptyParams(BaseModel):
    """Params model for methods that take no parameters; extra keys are ignored."""

    model_config = ConfigDict(extra="ignore")


def build_health_result(
    store: MemoryStore,
    service_name: str,
    started_at: datetime | None = None,
) -> dict[str, Any]:
    """
    Build the health payload.

    Args:
        store: Store whose size is reported.
        service_name: Service name to report.
        started_at: When the dispatcher started; uptime is 0 when unknown.

    Returns:
        Dictionary with:
        - status: Always "healthy" while the process can answer
        - service: Configured service name
        - version: Package version
        - items: Number of keys in the store
        - uptime_seconds: Seconds since the dispatcher started
    """
    from mcp_memory import __version__

    uptime_seconds = 0
    if started_at is not None:
        uptime_seconds = max(0, int((datetime.now(UTC) - started_at).total_seconds()))

    return {
        "status": "healthy",
        "service": service_name,
        "version": __version__,
        "items": store.size,
        "uptime_seconds": uptime_seconds,
    }


@method_handler(Method.ECHO)
async def handle_echo(ctx: RequestContext, params: dict[str, Any]) -> dict[str, Any]:
    """
    Handle the echo method.

    Args:
        ctx: The RequestContext for this request.
        params: Request parameters, returned unchanged.

    Returns:
        Dictionary with method, params, service and an ISO 8601 timestamp.
    """
    return {
        "method": ctx.requested_method or ctx.method,
        "params": params,
        "service": ctx.config.server.echo_service_name,
        "timestamp": ctx.timestamp.isoformat(),
    }


@method_handler(Method.HEALTH, params=EmptyParams)
async def handle_health(ctx: RequestContext, _params: EmptyParams) -> dict[str, Any]:
    """Handle the health method."""
    return build_health_result(
        ctx.store, ctx.config.server.service_name, ctx.started_at
    )
