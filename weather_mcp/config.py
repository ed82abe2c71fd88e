# -*- coding: utf-8 -*-
"""
Runtime configuration and logging for the weather MCP server.

Env (all optional, see load_settings):
  MCP_LOG_LEVEL = DEBUG|INFO|WARNING|ERROR (default INFO)
  TokenExchangeAudience, OVERRIDE_USE_MI_FIC_ASSERTION_CLIENTID,
  WEBSITE_AUTH_CLIENT_ID, WEBSITE_AUTH_AAD_ALLOWED_TENANTS, WEBSITE_HOSTNAME
"""

import logging
import os
import sys
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

DEFAULT_EXCHANGE_AUDIENCE = "api://AzureADTokenExchange"


@dataclass(frozen=True)
class Settings:
    # NWS upstream
    nws_api_base: str = "https://api.weather.gov"
    nws_user_agent: str = "weather-app/1.0"
    nws_timeout: float = 30.0

    # On-Behalf-Of chain
    token_exchange_audience: str = DEFAULT_EXCHANGE_AUDIENCE
    federated_client_id: Optional[str] = None
    client_id: Optional[str] = None
    tenant_id: Optional[str] = None
    website_hostname: Optional[str] = None
    graph_me_url: str = "https://graph.microsoft.com/v1.0/me"
    graph_scope: str = "https://graph.microsoft.com/.default"

    # HTTP listener
    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"

    @property
    def exchange_scope(self) -> str:
        return f"{self.token_exchange_audience}/.default"


def load_settings() -> Settings:
    """Build Settings from the environment (after loading a local .env, if any)."""
    load_dotenv()
    return Settings(
        nws_api_base=os.getenv("NWS_API_BASE", "https://api.weather.gov").rstrip("/"),
        nws_user_agent=os.getenv("NWS_USER_AGENT", "weather-app/1.0"),
        nws_timeout=float(os.getenv("NWS_TIMEOUT", "30")),
        token_exchange_audience=os.getenv("TokenExchangeAudience") or DEFAULT_EXCHANGE_AUDIENCE,
        federated_client_id=os.getenv("OVERRIDE_USE_MI_FIC_ASSERTION_CLIENTID"),
        client_id=os.getenv("WEBSITE_AUTH_CLIENT_ID"),
        tenant_id=os.getenv("WEBSITE_AUTH_AAD_ALLOWED_TENANTS"),
        website_hostname=os.getenv("WEBSITE_HOSTNAME"),
        graph_me_url=os.getenv("GRAPH_ME_URL", "https://graph.microsoft.com/v1.0/me"),
        graph_scope=os.getenv("GRAPH_SCOPE", "https://graph.microsoft.com/.default"),
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "3000")),
        log_level=os.getenv("MCP_LOG_LEVEL", "INFO").upper(),
    )


# -----------------------------------------------------------------------------
# Logging setup
# -----------------------------------------------------------------------------
def configure_logging(level: str = "INFO") -> logging.Logger:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        stream=sys.stdout,
    )
    return logging.getLogger("weather_mcp")
