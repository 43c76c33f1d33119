"""
Pytest configuration for the Memory MCP Server tests.
"""

from __future__ import annotations

import logging

import pytest

from mcp_memory.config import AppConfig
from mcp_memory.dispatcher import Dispatcher
from mcp_memory.store import MemoryStore


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers",
        "integration: marks tests as integration tests (deselect with '-m \"not integration\"')",
    )


@pytest.fixture(autouse=True)
def _cleanup_loggers() -> None:
    """Reset the package logger after each test."""
    yield
    logger = logging.getLogger("mcp_memory")
    logger.handlers.clear()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def store() -> MemoryStore:
    """Create an empty unbounded store."""
    return MemoryStore()


@pytest.fixture
def config() -> AppConfig:
    """Create a default AppConfig."""
    return AppConfig()


@pytest.fixture
def dispatcher(store: MemoryStore, config: AppConfig) -> Dispatcher:
    """Create a dispatcher over the store fixture with the default method table."""
    return Dispatcher(store=store, config=config)
