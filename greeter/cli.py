"""Command line entry point: pick a transport and serve the greeter server."""

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from pydantic import ValidationError

from config.settings import (
    get_http_address,
    get_instructions,
    get_log_level,
    get_server_name,
    get_shutdown_timeout,
    get_sse_address,
    get_use_stdio,
)
from greeter.errors import TransportError
from greeter.mcp.server import GreeterMCPServer, ServerConfig
from greeter.transport import (
    TransportSelector,
    resolve_transport_plan,
    transport_security_for,
)
from greeter.utils.colored_logging import setup_colored_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="greeter-server",
        description="Serve the hello example MCP server over stdio, streamable HTTP or SSE.",
    )
    parser.add_argument(
        "--http",
        default=get_http_address(),
        metavar="ADDR",
        help="if set, use streamable HTTP at this address (empty disables it)",
    )
    parser.add_argument(
        "--sse",
        default=get_sse_address(),
        metavar="ADDR",
        help="if set, use SSE at this address (empty disables it)",
    )
    parser.add_argument(
        "--stdio",
        action=argparse.BooleanOptionalAction,
        default=get_use_stdio(),
        help="use stdin/stdout instead of HTTP/SSE",
    )
    parser.add_argument(
        "--log-level",
        default=get_log_level(),
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        type=str.upper,
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_colored_logging(level=args.log_level)

    try:
        plan = resolve_transport_plan(args.stdio, args.http, args.sse)
    except ValueError as e:
        parser.error(str(e))

    try:
        config = ServerConfig(
            name=get_server_name(),
            instructions=get_instructions(),
            log_level=args.log_level,
            shutdown_timeout=get_shutdown_timeout(),
            transport_security=transport_security_for(plan),
        )
    except ValidationError as e:
        parser.error(f"invalid server configuration: {e}")

    server = GreeterMCPServer(config)
    selector = TransportSelector(server, plan)

    try:
        asyncio.run(selector.run())
    except KeyboardInterrupt:
        logger.info("Received shutdown signal (Ctrl+C)")
    except TransportError as e:
        logger.critical(f"Server exited: {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
