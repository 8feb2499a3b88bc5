#!/usr/bin/env python3
"""
Movies MCP Server
Exposes TMDB movie lookups as MCP tools over stdio (default) or HTTP + SSE
"""
import argparse
import asyncio
import logging
import sys
from typing import List, Optional, Tuple

import mcp.types as types
import uvicorn
from mcp.server import NotificationOptions, Server
from mcp.server.models import InitializationOptions
from mcp.server.stdio import stdio_server

import tools
from config import SERVER_NAME, SERVER_VERSION, Settings
from dispatcher import Dispatcher
from http_server import create_app
from sessions import SessionRegistry
from tmdb_api import TMDBApi

logger = logging.getLogger("movies_mcp")


def create_server(dispatcher: Dispatcher) -> Server:
    """Build a server instance wired to the shared dispatcher"""
    server = Server(SERVER_NAME, version=SERVER_VERSION)

    @server.list_tools()
    async def handle_list_tools() -> List[types.Tool]:
        return tools.list_tools()

    # registered directly: the dispatcher gets the arguments exactly as sent,
    # None when absent, with no schema validation in front of it
    async def handle_call_tool(request: types.CallToolRequest) -> types.ServerResult:
        result = await dispatcher.invoke(request.params.name, request.params.arguments)
        return types.ServerResult(result.to_call_tool_result())

    server.request_handlers[types.CallToolRequest] = handle_call_tool
    return server


async def run_stdio(dispatcher: Dispatcher) -> None:
    server = create_server(dispatcher)
    # Run the server using stdin/stdout streams
    async with stdio_server() as (read_stream, write_stream):
        logger.info("Movies MCP server running on stdio")
        await server.run(
            read_stream,
            write_stream,
            InitializationOptions(
                server_name=SERVER_NAME,
                server_version=SERVER_VERSION,
                capabilities=server.get_capabilities(
                    notification_options=NotificationOptions(),
                    experimental_capabilities={},
                ),
            ),
        )


async def run_sse(dispatcher: Dispatcher, host: str, port: int, log_level: str = "info") -> None:
    registry = SessionRegistry(lambda: create_server(dispatcher))
    app = create_app(registry)
    server = uvicorn.Server(uvicorn.Config(app, host=host, port=port, log_level=log_level))

    logger.info("Movies MCP server running on http://%s:%d", host, port)
    logger.info("SSE endpoint: http://%s:%d/sse", host, port)
    await server.serve()


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Movies MCP Server")
    parser.add_argument("--sse", action="store_true", help="Serve over HTTP + SSE instead of stdio")
    parser.add_argument("--host", default=None, help="Host to bind to in SSE mode (default: $HOST or 0.0.0.0)")
    parser.add_argument("--port", type=int, default=None, help="Port to run on in SSE mode (default: $PORT or 3000)")
    return parser.parse_args(argv)


def bind_address(args: argparse.Namespace, settings: Settings) -> Tuple[str, int]:
    """Command-line host/port, falling back to the configured ones"""
    host = settings.host if args.host is None else args.host
    port = settings.port if args.port is None else args.port
    return host, port


def configure_logging(level: str = "INFO") -> None:
    # stdout carries the protocol in stdio mode, so logs go to stderr
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
        force=True,
    )


async def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    settings = Settings.from_env()
    configure_logging(settings.log_level)

    with TMDBApi(settings.tmdb_api_key, settings.tmdb_base_url, timeout=settings.request_timeout) as movie_api:
        dispatcher = Dispatcher(movie_api)
        if args.sse:
            host, port = bind_address(args, settings)
            await run_sse(dispatcher, host=host, port=port, log_level=settings.log_level.lower())
        else:
            await run_stdio(dispatcher)


def run() -> None:
    configure_logging()
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass
    except Exception as e:
        logger.critical("Fatal error: %s", e, exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    run()
