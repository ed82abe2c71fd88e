# -*- coding: utf-8 -*-
"""
National Weather Service (api.weather.gov) access and record formatting.

NWSClient.get_json never raises for upstream problems: any non-2xx status,
transport error, undecodable body or non-object payload is logged and
reported as None.
"""

import logging
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional

import httpx

logger = logging.getLogger("weather_mcp.nws")

GEO_JSON = "application/geo+json"


class NWSClient:
    def __init__(
        self,
        base_url: str = "https://api.weather.gov",
        user_agent: str = "weather-app/1.0",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._headers = {"User-Agent": user_agent, "Accept": GEO_JSON}

    def alerts_url(self, state: str) -> str:
        return f"{self.base_url}/alerts?area={state}"

    def points_url(self, latitude: float, longitude: float) -> str:
        return f"{self.base_url}/points/{latitude:.4f},{longitude:.4f}"

    async def get_json(self, url: str) -> Optional[Dict[str, Any]]:
        try:
            async with httpx.AsyncClient(
                headers=self._headers, timeout=self.timeout, transport=self._transport
            ) as client:
                resp = await client.get(url)
                resp.raise_for_status()
                data = resp.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"NWS request to {url} failed with HTTP {e.response.status_code}")
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.error(f"NWS request to {url} failed: {type(e).__name__}: {e}")
        except ValueError as e:
            logger.error(f"NWS response from {url} is not valid JSON: {e}")
        else:
            if isinstance(data, dict):
                return data
            logger.error(f"NWS response from {url} is not a JSON object: {type(data).__name__}")
        return None


# -----------------------------------------------------------------------------
# Formatting
# -----------------------------------------------------------------------------
def _or(value: Any, placeholder: str) -> Any:
    return placeholder if value is None or value == "" else value


def as_mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def as_list(value: Any) -> List[Any]:
    return value if isinstance(value, list) else []


def format_coordinate(value: float) -> str:
    # 40.0 -> "40", 37.7749 -> "37.7749", 1e-05 -> "0.00001"
    value = float(value)
    if value == 0:
        return "0"
    text = format(Decimal(repr(value)), "f")
    return text.rstrip("0").rstrip(".") if "." in text else text


def format_alert(feature: Mapping[str, Any]) -> str:
    props = as_mapping(as_mapping(feature).get("properties"))
    return "\n".join([
        f"Event: {_or(props.get('event'), 'Unknown')}",
        f"Area: {_or(props.get('areaDesc'), 'Unknown')}",
        f"Severity: {_or(props.get('severity'), 'Unknown')}",
        f"Status: {_or(props.get('status'), 'Unknown')}",
        f"Headline: {_or(props.get('headline'), 'No headline')}",
        "---",
    ])


def format_period(period: Mapping[str, Any]) -> str:
    period = as_mapping(period)
    wind = f"Wind: {_or(period.get('windSpeed'), 'Unknown')} {period.get('windDirection') or ''}"
    return "\n".join([
        f"{_or(period.get('name'), 'Unknown')}:",
        f"Temperature: {_or(period.get('temperature'), 'Unknown')}°{_or(period.get('temperatureUnit'), 'F')}",
        wind.rstrip(),
        f"{_or(period.get('shortForecast'), 'No forecast available')}",
        "---",
    ])
