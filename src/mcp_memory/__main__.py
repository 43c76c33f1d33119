"""Allow running the server with ``python -m mcp_memory``."""

from mcp_memory.server import main

if __name__ == "__main__":
    raise SystemExit(main())
