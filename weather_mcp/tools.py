# -*- coding: utf-8 -*-
"""
Weather tool handlers.

Both handlers take already-validated input and always return an Envelope:
every upstream problem is reported as a message naming the step that failed.
"""

from typing import Any, Dict, List

from .nws import NWSClient, as_list, as_mapping, format_alert, format_coordinate, format_period
from .results import Envelope, Step, run_chain


async def handle_alerts(nws: NWSClient, state: str) -> Envelope:
    state_code = state.upper()
    data = await nws.get_json(nws.alerts_url(state_code))
    if not data:
        return Envelope.failure("alerts", "Failed to retrieve alerts data")

    features = as_list(data.get("features"))
    if not features:
        return Envelope.failure("alerts", f"No active alerts for {state_code}")

    formatted = [format_alert(feature) for feature in features]
    return Envelope.text_block("alerts", f"Active alerts for {state_code}:\n\n" + "\n".join(formatted))


async def handle_forecast(nws: NWSClient, latitude: float, longitude: float) -> Envelope:
    lat, lon = format_coordinate(latitude), format_coordinate(longitude)

    async def grid_point(_: Any) -> Step[Dict[str, Any]]:
        points = await nws.get_json(nws.points_url(latitude, longitude))
        if not points:
            return Step.fail(
                f"Failed to retrieve grid point data for coordinates: {lat}, {lon}. "
                "This location may not be supported by the NWS API (only US locations are supported)."
            )
        return Step.success(points)

    async def forecast_url(points: Dict[str, Any]) -> Step[str]:
        url = as_mapping(points.get("properties")).get("forecast")
        if not isinstance(url, str) or not url:
            return Step.fail("Failed to get forecast URL from grid point data")
        return Step.success(url)

    async def forecast_feed(url: str) -> Step[Dict[str, Any]]:
        forecast = await nws.get_json(url)
        if not forecast:
            return Step.fail("Failed to retrieve forecast data")
        return Step.success(forecast)

    async def periods(forecast: Dict[str, Any]) -> Step[List[Dict[str, Any]]]:
        found = as_list(as_mapping(forecast.get("properties")).get("periods"))
        if not found:
            return Step.fail("No forecast periods available")
        return Step.success(found)

    result = await run_chain(None, grid_point, forecast_url, forecast_feed, periods)
    if not result.ok:
        return Envelope.failure("forecast", result.error)

    formatted = [format_period(period) for period in result.value]
    return Envelope.text_block("forecast", f"Forecast for {lat}, {lon}:\n\n" + "\n".join(formatted))
