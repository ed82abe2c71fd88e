"""
Call one tool on a running weather MCP server and print its text output.

  weather-mcp-call --tool get-alerts --args '{"state": "CA"}'
  weather-mcp-call --tool get_current_user --token "$ACCESS_TOKEN"
"""

import argparse
import asyncio
import json
import logging
from typing import Any, Dict, Optional

from fastmcp import Client
from fastmcp.client.transports import StreamableHttpTransport

log = logging.getLogger(__name__)


async def call_tool(
    url: str,
    tool: str,
    arguments: Dict[str, Any],
    token: Optional[str] = None,
    timeout_s: float = 30.0,
) -> Any:
    """
    Connect to the MCP server at `url` and call `tool` with `arguments`.
    Returns the raw CallToolResult.
    """
    headers = {"Authorization": f"Bearer {token}"} if token else None
    log.debug("Preparing Client with URL: %s", url)
    client = Client(StreamableHttpTransport(url, headers=headers))

    try:
        async with client:
            log.debug("Client connected. Calling tool %r with %s", tool, arguments)
            result = await asyncio.wait_for(client.call_tool(tool, arguments), timeout=timeout_s)
            log.debug("Raw result received from server: %r", result)
            return result

    except asyncio.TimeoutError:
        log.error("Timed out after %.1f seconds waiting for tool response.", timeout_s)
        raise
    except Exception as e:
        log.exception("Error while calling %r tool: %s", tool, e)
        raise


def render_result(result: Any) -> str:
    """
    Display text from common result shapes:

    - CallToolResult with .content[0].text
    - CallToolResult with only .structured_content
    - plain dict / str
    """
    content = getattr(result, "content", None) or []
    if content:
        first = content[0]
        text = first.get("text") if isinstance(first, dict) else getattr(first, "text", None)
        if isinstance(text, str):
            return text

    structured = getattr(result, "structured_content", None)
    if structured:
        return json.dumps(structured, indent=2)

    if isinstance(result, dict):
        return json.dumps(result, indent=2)
    if isinstance(result, str):
        return result

    raise ValueError(f"Could not find displayable output in server response. Got: {type(result).__name__} -> {result!r}")


async def main_async(args: argparse.Namespace) -> None:
    arguments = json.loads(args.args)
    log.info("Calling MCP %r tool at %s", args.tool, args.url)
    result = await call_tool(args.url, args.tool, arguments, token=args.token, timeout_s=args.timeout)
    print(render_result(result))


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Call a tool on the weather MCP server.")
    parser.add_argument(
        "--url",
        default="http://127.0.0.1:3000/mcp",
        help="MCP server URL (default: %(default)s)",
    )
    parser.add_argument("--tool", default="get-alerts", help="Tool name (default: %(default)s)")
    parser.add_argument("--args", default='{"state": "CA"}', help="Tool arguments as JSON (default: %(default)s)")
    parser.add_argument("--token", default=None, help="Bearer token sent as the Authorization header")
    parser.add_argument(
        "--timeout",
        type=float,
        default=30.0,
        help="Timeout in seconds for the tool call (default: %(default)s)",
    )
    return parser


def run_entry() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s | %(levelname)s | %(message)s",
    )
    asyncio.run(main_async(build_arg_parser().parse_args()))


if __name__ == "__main__":
    run_entry()
