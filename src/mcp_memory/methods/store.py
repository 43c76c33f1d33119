"""
Store namespace methods for the Memory MCP Server.

This module implements methods in the `store.*` namespace:
- store.set: Store a value under a key (overwrites silently)
- store.get: Return the value under a key, null when absent
- store.list: Return the stored keys in insertion order
- store.clear: Remove every key
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from mcp_memory.context import RequestContext
from mcp_memory.logging import get_logger
from mcp_memory.methods.system import EmptyParams
from mcp_memory.routing import Method, method_handler

logger = get_logger(__name__)


class StoreSetParams(BaseModel):
    """Params for store.set.

    Attributes:
        key: Non-empty string key.
        value: Value to store; required but may be null.
    """

    model_config = ConfigDict(extra="ignore")

    key: str = Field(min_length=1, strict=True)
    value: Any = Field(...)


class StoreGetParams(BaseModel):
    """Params for store.get."""

    model_config = ConfigDict(extra="ignore")

    key: str = Field(strict=True)


@method_handler(Method.STORE_SET, params=StoreSetParams)
async def handle_store_set(
    ctx: RequestContext, params: StoreSetParams
) -> dict[str, Any]:
    """
    Handle the store.set method.

    Args:
        ctx: The RequestContext for this request.
        params: Validated key and value.

    Returns:
        {"success": True, "key": <key>}

    Raises:
        ResourceExhaustedError: If the store is full and the key is new.
    """
    ctx.store.set(params.key, params.value)
    logger.debug(
        "Stored key",
        extra={"key": params.key, "request_id": ctx.request_id},
    )
    return {"success": True, "key": params.key}


@method_handler(Method.STORE_GET, params=StoreGetParams)
async def handle_store_get(
    ctx: RequestContext, params: StoreGetParams
) -> dict[str, Any]:
    """
    Handle the store.get method.

    An absent key is not an error: the result is {"value": None}.
    """
    return {"value": ctx.store.get(params.key)}


@method_handler(Method.STORE_LIST, params=EmptyParams)
async def handle_store_list(
    ctx: RequestContext, _params: EmptyParams
) -> dict[str, Any]:
    """Handle the store.list method."""
    return {"keys": ctx.store.keys()}


@method_handler(Method.STORE_CLEAR, params=EmptyParams)
async def handle_store_clear(
    ctx: RequestContext, _params: EmptyParams
) -> dict[str, Any]:
    """Handle the store.clear method."""
    removed = ctx.store.clear()
    logger.info(
        "Store cleared",
        extra={"removed": removed, "request_id": ctx.request_id},
    )
    return {"success": True}
