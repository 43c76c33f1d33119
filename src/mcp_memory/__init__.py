"""
Memory MCP Server - in-memory key/value store behind a JSON-RPC dispatcher.

This package parses JSON-RPC envelopes, validates parameters, routes requests
to a closed set of methods, and keeps process-lifetime state in a lock-guarded
store.
"""

__version__ = "0.1.0"
