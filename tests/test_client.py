from types import SimpleNamespace

import pytest
from mcp.types import TextContent

from weather_mcp.client import build_arg_parser, render_result


def test_render_prefers_text_content():
    result = SimpleNamespace(content=[TextContent(type="text", text="No active alerts for CA")],
                             structured_content={"alerts": "No active alerts for CA"})
    assert render_result(result) == "No active alerts for CA"


def test_render_falls_back_to_structured_content():
    result = SimpleNamespace(content=[], structured_content={"authenticated": False})
    assert render_result(result) == '{\n  "authenticated": false\n}'


def test_render_plain_shapes():
    assert render_result("hello") == "hello"
    assert render_result({"forecast": "x"}) == '{\n  "forecast": "x"\n}'


def test_render_rejects_unknown_shapes():
    with pytest.raises(ValueError):
        render_result(42)


def test_arg_parser_defaults():
    args = build_arg_parser().parse_args([])
    assert args.url == "http://127.0.0.1:3000/mcp"
    assert args.tool == "get-alerts"
    assert args.token is None
