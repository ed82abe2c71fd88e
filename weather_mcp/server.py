# -*- coding: utf-8 -*-
"""
Tool registry factory.

create_server() builds a brand-new FastMCP instance with the three tools
registered on it. Nothing here is module-level state: the HTTP dispatcher
calls the factory once per request, so concurrent calls never share a
registry.

Each tool:
- Validates its arguments through the signature (pydantic Field constraints).
- Logs entry/outcome with a per-call correlation ID and timing.
- Always returns a ToolResult carrying both text and structured content.
"""

import logging
import time
import traceback
import uuid
from typing import Annotated, Awaitable, Callable, Optional, Tuple

import httpx
from fastmcp import FastMCP
from fastmcp.server.dependencies import get_http_headers
from fastmcp.tools.tool import ToolResult
from pydantic import Field

from .config import Settings, load_settings
from .identity import IdentityExchange, handle_current_user
from .nws import NWSClient
from .results import AlertsOutput, CurrentUserOutput, Envelope, ForecastOutput
from .tools import handle_alerts, handle_forecast

logger = logging.getLogger("weather_mcp.server")

_UNEXPECTED = "An unexpected error occurred while processing the request."
_UNEXPECTED_ALERTS = Envelope.failure("alerts", _UNEXPECTED)
_UNEXPECTED_FORECAST = Envelope.failure("forecast", _UNEXPECTED)
_UNEXPECTED_USER = Envelope.from_model(CurrentUserOutput(authenticated=False, message=_UNEXPECTED), failed=True)


def _time_call() -> Tuple[float, Callable[[], float]]:
    """Simple wall-clock timer for execution duration."""
    start = time.perf_counter()

    def done() -> float:
        return time.perf_counter() - start

    return start, done


async def _run_tool(
    name: str, handler: Callable[[], Awaitable[Envelope]], on_error: Envelope, **params
) -> ToolResult:
    call_id = str(uuid.uuid4())
    logger.debug(f"[{call_id}] {name} invoked with {params}")
    _, done = _time_call()
    try:
        envelope = await handler()
    except Exception as e:
        tb = "".join(traceback.format_exception(type(e), e, e.__traceback__))
        logger.error(f"[{call_id}] {name} unexpected error after {done():.6f}s:\n{tb}")
        envelope = on_error

    if envelope.failed:
        logger.warning(f"[{call_id}] {name} failed after {done():.6f}s: {envelope.structured}")
    else:
        logger.info(f"[{call_id}] {name} success in {done():.6f}s")
    return envelope.to_tool_result()


def create_server(
    settings: Optional[Settings] = None,
    http_transport: Optional[httpx.AsyncBaseTransport] = None,
    identity: Optional[IdentityExchange] = None,
) -> FastMCP:
    """
    Fresh MCP server with get-alerts, get-forecast and get_current_user.

    `http_transport` replaces the network for every outbound httpx call and
    `identity` replaces the credential chain; both exist for tests.
    """
    settings = settings or load_settings()
    nws = NWSClient(
        base_url=settings.nws_api_base,
        user_agent=settings.nws_user_agent,
        timeout=settings.nws_timeout,
        transport=http_transport,
    )
    identity = identity or IdentityExchange(settings, http_transport=http_transport)

    mcp = FastMCP(name="weather", version="1.0.0")

    @mcp.tool(
        name="get-alerts",
        title="Get Weather Alerts",
        description="Get weather alerts for a state",
        output_schema=AlertsOutput.model_json_schema(),
    )
    async def get_alerts(
        state: Annotated[str, Field(min_length=2, max_length=2, description="Two-letter state code (e.g. CA, NY)")],
    ) -> ToolResult:
        return await _run_tool("get-alerts", lambda: handle_alerts(nws, state), _UNEXPECTED_ALERTS, state=state)

    @mcp.tool(
        name="get-forecast",
        title="Get Weather Forecast",
        description="Get weather forecast for a location",
        output_schema=ForecastOutput.model_json_schema(),
    )
    async def get_forecast(
        latitude: Annotated[float, Field(ge=-90, le=90, description="Latitude of the location")],
        longitude: Annotated[float, Field(ge=-180, le=180, description="Longitude of the location")],
    ) -> ToolResult:
        return await _run_tool(
            "get-forecast",
            lambda: handle_forecast(nws, latitude, longitude),
            _UNEXPECTED_FORECAST,
            latitude=latitude,
            longitude=longitude,
        )

    @mcp.tool(
        name="get_current_user",
        title="Get Current User",
        description=(
            "Get current logged-in user information from Microsoft Graph using Azure App Service "
            "authentication headers and On-Behalf-Of flow"
        ),
        output_schema=CurrentUserOutput.model_json_schema(),
    )
    async def get_current_user() -> ToolResult:
        # Authorization is stripped unless include_all is set.
        headers = get_http_headers(include_all=True)
        return await _run_tool("get_current_user", lambda: handle_current_user(identity, headers), _UNEXPECTED_USER)

    return mcp
