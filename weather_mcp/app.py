# -*- coding: utf-8 -*-
"""
HTTP front end for the weather MCP server (stateless Streamable HTTP).

  weather-mcp --host 0.0.0.0 --port 3000

Routes:
  POST   /mcp           MCP calls, one fresh server + transport per request
  other  /mcp           405 with a JSON-RPC error body (GET, DELETE, PUT, ...)
  GET    /authcomplete  page shown after granting consent
  GET    /health
"""

import argparse
import dataclasses
import logging
import sys
import traceback
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Callable, Optional

from fastapi import FastAPI, Request
from fastapi.responses import FileResponse, JSONResponse
from fastmcp import FastMCP
from starlette.routing import Route

from .config import Settings, configure_logging, load_settings
from .dispatcher import METHOD_NOT_ALLOWED, StatelessMCPDispatcher
from .server import create_server

logger = logging.getLogger("weather_mcp")

STATIC_DIR = Path(__file__).parent / "static"

# Everything but POST; GET has no SSE stream and DELETE has no session in stateless mode.
UNSUPPORTED_MCP_METHODS = ["GET", "HEAD", "PUT", "PATCH", "DELETE", "OPTIONS"]


def create_app(
    settings: Optional[Settings] = None,
    server_factory: Optional[Callable[[], FastMCP]] = None,
) -> FastAPI:
    settings = settings or load_settings()
    server_factory = server_factory or (lambda: create_server(settings))

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        logger.info(f"Weather MCP Stateless HTTP Server listening on port {settings.port}")
        logger.info(f"MCP endpoint: http://localhost:{settings.port}/mcp")
        yield
        logger.info("Shutting down server...")

    app = FastAPI(title="Weather MCP Server", lifespan=lifespan)

    @app.api_route("/mcp", methods=UNSUPPORTED_MCP_METHODS, include_in_schema=False)
    async def mcp_not_allowed(request: Request):
        logger.info(f"Received {request.method} MCP request")
        return JSONResponse(status_code=405, content=METHOD_NOT_ALLOWED)

    @app.get("/authcomplete")
    async def auth_complete():
        return FileResponse(STATIC_DIR / "authcomplete.html", media_type="text/html")

    @app.get("/health")
    async def health():
        return {"status": "ok", "service": "weather"}

    app.router.routes.append(Route("/mcp", StatelessMCPDispatcher(server_factory), methods=["POST"]))
    return app


# -----------------------------------------------------------------------------
# Entrypoint
# -----------------------------------------------------------------------------
def parse_args(settings: Settings):
    p = argparse.ArgumentParser(description="Weather MCP server (stateless Streamable HTTP).")
    p.add_argument("--host", default=settings.host, help="HTTP host (default: %(default)s).")
    p.add_argument("--port", type=int, default=settings.port, help="HTTP port (default: %(default)s).")
    return p.parse_args()


def main() -> None:
    settings = load_settings()
    configure_logging(settings.log_level)
    args = parse_args(settings)
    settings = dataclasses.replace(settings, host=args.host, port=args.port)
    logger.debug(f"Effective LOG_LEVEL={settings.log_level}")

    try:
        import uvicorn

        app = create_app(settings)
        uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())
    except Exception as e:
        tb = "".join(traceback.format_exception(type(e), e, e.__traceback__))
        logger.critical(f"Failed to start server:\n{tb}")
        sys.exit(1)


if __name__ == "__main__":
    main()
