"""Weather MCP server: NWS weather tools and an On-Behalf-Of identity tool over stateless HTTP."""

__version__ = "1.0.0"
