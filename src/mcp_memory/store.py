"""
In-memory key/value store for the Memory MCP Server.

The store is owned by a single dispatcher and lives for the lifetime of the
process. Every operation runs under one lock so that set, get, keys and clear
are atomic with respect to each other, whether callers are asyncio tasks or
threads of a threaded transport.

Values are deep-copied on the way in and on the way out: a caller that mutates
its own object after ``set`` (or the object returned by ``get``) never changes
what is stored.
"""

from __future__ import annotations

import copy
from threading import Lock
from typing import Any

from mcp_memory.errors import ResourceExhaustedError
from mcp_memory.logging import get_logger

logger = get_logger(__name__)


def _copy_value(value: Any) -> Any:
    """
    Deep-copy a value without recursing on nested dicts and lists.

    Plain dicts and lists are rebuilt with an explicit stack, so nesting depth
    is bounded by memory rather than the interpreter's recursion limit. Shared
    and self-referencing containers keep their shape. Any other object goes
    through ``copy.deepcopy``.
    """
    memo: dict[int, Any] = {}

    def clone(item: Any) -> Any:
        if type(item) not in (dict, list):
            return copy.deepcopy(item)
        if id(item) in memo:
            return memo[id(item)]
        target: Any = {} if type(item) is dict else []
        memo[id(item)] = target
        pending.append((item, target))
        return target

    pending: list[tuple[Any, Any]] = []
    root = clone(value)
    while pending:
        source, target = pending.pop()
        if type(source) is dict:
            for key, item in source.items():
                target[key] = clone(item)
        else:
            target.extend(clone(item) for item in source)
    return root


class MemoryStore:
    """
    Lock-guarded mapping from string keys to opaque values.

    Keys keep insertion order; overwriting a key keeps its original position.

    Attributes:
        max_keys: Optional bound on the number of distinct keys. None means
            unbounded.

    Example:
        >>> store = MemoryStore()
        >>> store.set("user:1", {"name": "Ana"})
        >>> store.get("user:1")
        {'name': 'Ana'}
        >>> store.keys()
        ['user:1']
    """

    def __init__(self, max_keys: int | None = None) -> None:
        """
        Initialize an empty store.

        Args:
            max_keys: Optional upper bound on distinct keys.

        Raises:
            ValueError: If max_keys is given and smaller than 1.
        """
        if max_keys is not None and max_keys < 1:
            raise ValueError(f"max_keys must be >= 1, got {max_keys}")
        self.max_keys = max_keys
        self._data: dict[str, Any] = {}
        self._lock = Lock()

    def set(self, key: str, value: Any) -> None:
        """
        Store a value under key, overwriting any previous value.

        Args:
            key: Non-empty key.
            value: Value to store (copied).

        Raises:
            ResourceExhaustedError: If the store is full and key is new.
        """
        value = _copy_value(value)
        with self._lock:
            if (
                self.max_keys is not None
                and key not in self._data
                and len(self._data) >= self.max_keys
            ):
                raise ResourceExhaustedError(
                    message=f"Store is full ({self.max_keys} keys)",
                    details={"key": key, "max_keys": self.max_keys},
                )
            self._data[key] = value

    def get(self, key: str, default: Any = None) -> Any:
        """
        Return a copy of the value stored under key, or default if absent.

        Args:
            key: Key to look up.
            default: Value returned when the key is absent.

        Returns:
            The stored value (copied) or default.
        """
        with self._lock:
            if key not in self._data:
                return default
            value = self._data[key]
        return _copy_value(value)

    def keys(self) -> list[str]:
        """Return a snapshot of the keys in insertion order."""
        with self._lock:
            return list(self._data)

    def clear(self) -> int:
        """
        Remove every key.

        Returns:
            Number of keys removed.
        """
        with self._lock:
            removed = len(self._data)
            self._data.clear()
        logger.debug("Store cleared", extra={"removed": removed})
        return removed

    @property
    def size(self) -> int:
        """Number of distinct keys currently stored."""
        with self._lock:
            return len(self._data)

    def __len__(self) -> int:
        return self.size

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._data

    def __repr__(self) -> str:
        return f"MemoryStore(size={self.size}, max_keys={self.max_keys})"
