"""
Method handlers for the Memory MCP Server.

Importing this package registers every handler in the default registry.

Modules:
- store: store.set, store.get, store.list, store.clear
- system: echo, health
"""

from mcp_memory.methods.store import (
    StoreGetParams,
    StoreSetParams,
    handle_store_clear,
    handle_store_get,
    handle_store_list,
    handle_store_set,
)
from mcp_memory.methods.system import (
    EmptyParams,
    build_health_result,
    handle_echo,
    handle_health,
)

__all__ = [
    # Params models
    "EmptyParams",
    "StoreGetParams",
    "StoreSetParams",
    # Store methods
    "handle_store_set",
    "handle_store_get",
    "handle_store_list",
    "handle_store_clear",
    # System methods
    "handle_echo",
    "handle_health",
    "build_health_result",
]
