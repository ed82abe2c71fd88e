# -*- coding: utf-8 -*-
"""
Stateless Streamable HTTP dispatch.

Every POST gets its own FastMCP registry and its own transport. A single
shared instance would mix JSON-RPC request IDs from concurrent clients, so
both are built here, used for exactly one request, and dropped.
"""

import logging
import uuid
from typing import Callable

import anyio
from fastmcp import FastMCP
from mcp.server.lowlevel import Server
from mcp.server.streamable_http import StreamableHTTPServerTransport
from starlette.responses import JSONResponse
from starlette.types import Message, Receive, Scope, Send

logger = logging.getLogger("weather_mcp.dispatcher")

METHOD_NOT_ALLOWED = {
    "jsonrpc": "2.0",
    "error": {"code": -32000, "message": "Method not allowed."},
    "id": None,
}
INTERNAL_ERROR = {
    "jsonrpc": "2.0",
    "error": {"code": -32603, "message": "Internal server error"},
    "id": None,
}


def lowlevel_server(mcp: FastMCP) -> Server:
    # FastMCP exposes no public accessor for the SDK server it wraps; the transport needs it to run.
    return mcp._mcp_server


class StatelessMCPDispatcher:
    """ASGI app: one inbound request -> one fresh server + transport pair."""

    def __init__(self, server_factory: Callable[[], FastMCP]):
        self.server_factory = server_factory

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        request_id = str(uuid.uuid4())
        started = False

        async def tracking_send(message: Message) -> None:
            nonlocal started
            if message["type"] == "http.response.start":
                started = True
            await send(message)

        try:
            await self._dispatch(request_id, scope, receive, tracking_send)
        except Exception:
            logger.exception(f"[{request_id}] Error handling MCP request")
            if not started:
                await JSONResponse(INTERNAL_ERROR, status_code=500)(scope, receive, send)

    async def _dispatch(self, request_id: str, scope: Scope, receive: Receive, send: Send) -> None:
        server = lowlevel_server(self.server_factory())
        transport = StreamableHTTPServerTransport(mcp_session_id=None, is_json_response_enabled=True)
        logger.debug(f"[{request_id}] Dispatching to fresh server instance {id(server):#x}")

        async def run_server(*, task_status=anyio.TASK_STATUS_IGNORED) -> None:
            async with transport.connect() as (read_stream, write_stream):
                task_status.started()
                await server.run(
                    read_stream,
                    write_stream,
                    server.create_initialization_options(),
                    stateless=True,
                )

        async with anyio.create_task_group() as tg:
            await tg.start(run_server)
            try:
                await transport.handle_request(scope, receive, send)
            finally:
                await transport.terminate()
                tg.cancel_scope.cancel()
                logger.debug(f"[{request_id}] Request closed")
