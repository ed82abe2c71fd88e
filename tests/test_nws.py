import httpx
import pytest

from weather_mcp.nws import NWSClient, format_alert, format_coordinate, format_period
from tests.conftest import NWS, FakeUpstream


def test_alert_missing_fields_render_placeholders():
    text = format_alert({"properties": {"event": "Flood Watch"}})
    assert text == "\n".join([
        "Event: Flood Watch",
        "Area: Unknown",
        "Severity: Unknown",
        "Status: Unknown",
        "Headline: No headline",
        "---",
    ])


def test_alert_without_properties_is_all_placeholders():
    text = format_alert({})
    assert "Event: Unknown" in text
    assert "None" not in text


def test_period_missing_fields_render_placeholders():
    text = format_period({})
    assert text == "\n".join([
        "Unknown:",
        "Temperature: Unknown°F",
        "Wind: Unknown",
        "No forecast available",
        "---",
    ])


def test_period_full_record():
    period = {
        "name": "Tonight",
        "temperature": 0,
        "temperatureUnit": "C",
        "windSpeed": "5 mph",
        "windDirection": "NW",
        "shortForecast": "Clear",
    }
    assert format_period(period) == "Tonight:\nTemperature: 0°C\nWind: 5 mph NW\nClear\n---"


def test_formatting_is_stable_for_same_input():
    feature = {"properties": {"areaDesc": "Marin"}}
    period = {"name": "Today"}
    assert format_alert(feature) == format_alert(feature)
    assert format_period(period) == format_period(period)


@pytest.mark.parametrize("value, expected", [(40.0, "40"), (37.7749, "37.7749"), (-122.4194, "-122.4194"), (0, "0")])
def test_format_coordinate(value, expected):
    assert format_coordinate(value) == expected


def test_points_url_uses_four_decimals():
    nws = NWSClient()
    assert nws.points_url(37.77493, -122.41942) == f"{NWS}/points/37.7749,-122.4194"


@pytest.mark.asyncio
async def test_get_json_sends_identification_headers():
    upstream = FakeUpstream({f"{NWS}/alerts?area=CA": (200, {"features": []})})
    nws = NWSClient(user_agent="weather-app/1.0", transport=upstream.transport)

    assert await nws.get_json(nws.alerts_url("CA")) == {"features": []}
    request = upstream.requests[0]
    assert request.headers["User-Agent"] == "weather-app/1.0"
    assert request.headers["Accept"] == "application/geo+json"


@pytest.mark.asyncio
async def test_get_json_returns_none_on_error_status():
    upstream = FakeUpstream({f"{NWS}/alerts?area=CA": (503, {"title": "Unavailable"})})
    nws = NWSClient(transport=upstream.transport)
    assert await nws.get_json(nws.alerts_url("CA")) is None


@pytest.mark.asyncio
async def test_get_json_returns_none_on_invalid_json():
    upstream = FakeUpstream({f"{NWS}/alerts?area=CA": (200, "<html>not json</html>")})
    nws = NWSClient(transport=upstream.transport)
    assert await nws.get_json(nws.alerts_url("CA")) is None


@pytest.mark.asyncio
async def test_get_json_returns_none_on_network_failure():
    def refuse(request):
        raise httpx.ConnectError("refused", request=request)

    nws = NWSClient(transport=httpx.MockTransport(refuse))
    assert await nws.get_json(nws.alerts_url("CA")) is None


@pytest.mark.parametrize("body", [[1], '"just a string"', 42, True])
@pytest.mark.asyncio
async def test_get_json_returns_none_for_non_object_payload(body):
    upstream = FakeUpstream({f"{NWS}/alerts?area=CA": (200, body)})
    nws = NWSClient(transport=upstream.transport)
    assert await nws.get_json(nws.alerts_url("CA")) is None


@pytest.mark.parametrize("record", [None, 7, "text", [], {"properties": None}, {"properties": ["x"]}])
def test_non_mapping_alert_renders_placeholders(record):
    assert format_alert(record) == format_alert({})


@pytest.mark.parametrize("record", [None, 7, "text", ["Tonight"]])
def test_non_mapping_period_renders_placeholders(record):
    assert format_period(record) == format_period({})


@pytest.mark.parametrize("value, expected", [(1e-05, "0.00001"), (-0.00005, "-0.00005"), (-0.0, "0"), (1.5e-07, "0.00000015")])
def test_format_coordinate_never_uses_exponents(value, expected):
    assert format_coordinate(value) == expected
