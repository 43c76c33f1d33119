"""
Tests for the RequestContext module.

This test module validates:
- RequestContext dataclass functionality
- Namespace extraction
- Context creation from a parsed request
"""

from __future__ import annotations

from datetime import UTC, datetime

from mcp_memory.config import AppConfig
from mcp_memory.context import RequestContext
from mcp_memory.protocol import parse_envelope
from mcp_memory.store import MemoryStore


class TestRequestContext:
    """Tests for RequestContext class."""

    def test_creation_defaults(self, store: MemoryStore, config: AppConfig) -> None:
        """Test creating a context with only required fields."""
        before = datetime.now(UTC)
        ctx = RequestContext(method="store.get", request_id="r1", store=store, config=config)

        assert ctx.requested_method is None
        assert ctx.started_at is None
        assert ctx.metadata == {}
        assert ctx.timestamp >= before
        assert ctx.timestamp.tzinfo is UTC

    def test_to_dict(self, store: MemoryStore, config: AppConfig) -> None:
        """Test serialization for logging."""
        timestamp = datetime(2026, 1, 2, 3, 4, 5, tzinfo=UTC)
        ctx = RequestContext(
            method="store.get",
            request_id=9,
            store=store,
            config=config,
            requested_method="retrieve",
            timestamp=timestamp,
            metadata={"transport": "stdio"},
        )

        assert ctx.to_dict() == {
            "method": "store.get",
            "requested_method": "retrieve",
            "request_id": 9,
            "timestamp": "2026-01-02T03:04:05+00:00",
            "metadata": {"transport": "stdio"},
        }

    def test_to_dict_without_alias(self, store: MemoryStore, config: AppConfig) -> None:
        """Test that requested_method falls back to the method."""
        ctx = RequestContext(method="echo", request_id=1, store=store, config=config)
        assert ctx.to_dict()["requested_method"] == "echo"

    def test_from_request(self, store: MemoryStore, config: AppConfig) -> None:
        """Test building a context from a parsed envelope."""
        request = parse_envelope({"method": "retrieve", "params": {"key": "a"}, "id": "x"})
        started_at = datetime.now(UTC)

        ctx = RequestContext.from_request(
            request,
            "store.get",
            store=store,
            config=config,
            started_at=started_at,
            metadata={"transport": "test"},
        )

        assert ctx.method == "store.get"
        assert ctx.requested_method == "retrieve"
        assert ctx.request_id == "x"
        assert ctx.store is store
        assert ctx.config is config
        assert ctx.started_at is started_at
        assert ctx.metadata == {"transport": "test"}
