"""
Stdio transport for the Memory MCP Server.

This module implements the MemoryServer class that reads line-delimited
JSON-RPC requests from stdin, passes them to the Dispatcher, and writes one
response line per request to stdout. It also provides the ``mcp-memory``
console entry point.
"""

from __future__ import annotations

import asyncio
import sys
from typing import TextIO

from mcp_memory.config import AppConfig, load_config
from mcp_memory.dispatcher import Dispatcher
from mcp_memory.logging import get_logger, setup_logging
from mcp_memory.protocol import (
    DEFAULT_REQUEST_ID,
    PARSE_ERROR,
    JSONRPCError,
    create_internal_error,
    format_error_response,
)

logger = get_logger(__name__)


class MemoryServer:
    """
    Server that speaks line-delimited JSON-RPC over stdio.

    Example:
        >>> server = MemoryServer()
        >>> await server.run()

    Attributes:
        dispatcher: Dispatcher handling each request.
        running: Whether the server is currently running.
    """

    def __init__(
        self,
        dispatcher: Dispatcher | None = None,
        stdin: TextIO | None = None,
        stdout: TextIO | None = None,
    ) -> None:
        """
        Initialize the server.

        Args:
            dispatcher: Optional Dispatcher. A default one is created if not provided.
            stdin: Optional stdin stream. Uses sys.stdin if not provided.
            stdout: Optional stdout stream. Uses sys.stdout if not provided.
        """
        self.dispatcher = dispatcher if dispatcher is not None else Dispatcher()
        self._stdin = stdin if stdin is not None else sys.stdin
        self._stdout = stdout if stdout is not None else sys.stdout
        self.running = False

    async def handle_request(self, request_json: str) -> str:
        """
        Handle a single request line.

        Args:
            request_json: Raw JSON text of the request.

        Returns:
            JSON text of the response.
        """
        return await self.dispatcher.handle_json(
            request_json, metadata={"transport": "stdio"}
        )

    async def handle_line(self, line: bytes) -> str | None:
        """
        Decode and handle one raw input line.

        Args:
            line: Raw bytes read from stdin.

        Returns:
            JSON text of the response, or None for a blank line.
        """
        try:
            request_json = line.decode("utf-8").strip()
        except UnicodeDecodeError as e:
            logger.warning(
                "Invalid UTF-8 encoding in request",
                extra={"error": str(e)},
            )
            error = JSONRPCError(
                code=PARSE_ERROR,
                message="Parse error: Invalid encoding - UTF-8 required",
            )
            return format_error_response(DEFAULT_REQUEST_ID, error).to_json()

        if not request_json:
            return None

        return await self.handle_request(request_json)

    async def run(self) -> None:
        """
        Run the server, reading from stdin and writing to stdout.

        The server runs until stdin is closed or stop() is called.
        """
        self.running = True
        logger.info(
            "Memory MCP Server starting",
            extra={
                "service": self.dispatcher.config.server.service_name,
                "methods_count": len(self.dispatcher.registry),
            },
        )

        try:
            loop = asyncio.get_running_loop()
            reader = asyncio.StreamReader()
            protocol = asyncio.StreamReaderProtocol(reader)

            await loop.connect_read_pipe(lambda: protocol, self._stdin)

            while self.running:
                line = await reader.readline()
                if not line:
                    # EOF reached
                    break

                try:
                    response = await self.handle_line(line)
                except Exception as e:
                    logger.exception(
                        "Error in server loop",
                        extra={"error": str(e)},
                    )
                    error = create_internal_error(str(e))
                    response = format_error_response(DEFAULT_REQUEST_ID, error).to_json()

                if response is not None:
                    self._write_response(response)

        finally:
            self.running = False
            logger.info("Memory MCP Server stopped")

    def stop(self) -> None:
        """Stop the server after the current request."""
        self.running = False

    def _write_response(self, response_json: str) -> None:
        """Write a response line to stdout."""
        self._stdout.write(response_json + "\n")
        self._stdout.flush()


def create_server(config: AppConfig | None = None) -> MemoryServer:
    """
    Create a MemoryServer with a fresh store and the default method table.

    Args:
        config: Optional application configuration.

    Returns:
        Configured MemoryServer instance.
    """
    return MemoryServer(dispatcher=Dispatcher(config=config))


def main(argv: list[str] | None = None) -> int:
    """
    Console entry point: load configuration, set up logging, serve stdio.

    Args:
        argv: Command-line arguments. If None, uses sys.argv.

    Returns:
        Process exit code.
    """
    config = load_config(cli_args=argv)
    setup_logging(config.logging, service=config.server.service_name)

    server = create_server(config)
    try:
        asyncio.run(server.run())
    except KeyboardInterrupt:
        logger.info("Interrupted")
    return 0
