"""
Core server bootstrap for the application summary MCP server.

Wires the FastMCP instance, the control-plane client and the summary actor
together and registers the MCP tools.
"""

import asyncio
import logging

from fastmcp import FastMCP  # type: ignore[import-not-found]

from appsummary.client import CloudControllerClient
from appsummary.settings import Settings
from appsummary.summary import SummaryActor
from appsummary.tools import SummaryToolDependencies, register_summary_tools


class ServerApp:
    """Owns the control-plane client lifecycle for the MCP server."""

    def __init__(self, settings: Settings) -> None:
        self._logger = logging.getLogger(__name__)
        self._settings = settings
        self._client: CloudControllerClient | None = None
        self._tool_dependencies = SummaryToolDependencies()
        self._mcp_app = FastMCP(
            name="Application Summary MCP Server",
            instructions=(
                "Inspect deployed applications: state, instances, routes and runtime stack."
            ),
        )
        register_summary_tools(self._mcp_app, self._tool_dependencies)

    def startup(self) -> None:
        """Prepare resources required to launch the SSE server."""
        self._logger.info("Starting server bootstrap", extra={"cf_api_url": self._settings.cf_api_url})
        self._client = CloudControllerClient.from_settings(self._settings)
        self._tool_dependencies.attach_actor(SummaryActor(self._client))

    def shutdown(self) -> None:
        """Release acquired resources."""
        asyncio.run(self.ashutdown())

    async def ashutdown(self) -> None:
        """Release acquired resources from inside a running event loop."""
        self._logger.info("Shutting down server bootstrap")
        if self._client is not None:
            await self._client.aclose()
            self._client = None
        self._tool_dependencies.detach_actor()

    def serve_forever(self) -> None:
        """Run the FastMCP SSE server until interrupted."""
        host = "0.0.0.0"
        port = self._settings.mcp_sse_port
        self._logger.info("Starting SSE transport", extra={"host": host, "port": port})
        self._mcp_app.run(transport="sse", host=host, port=port)

    async def serve_sse_async(self, host: str = "0.0.0.0") -> None:
        """Async helper for running the SSE transport (used by smoke tests)."""
        await self._mcp_app.run_http_async(
            transport="sse",
            host=host,
            port=self._settings.mcp_sse_port,
        )

    @property
    def mcp(self) -> FastMCP:
        """Expose the configured FastMCP instance."""
        return self._mcp_app


def build_server(settings: Settings) -> ServerApp:
    """Factory used by main.py to create the configured server instance."""
    return ServerApp(settings)
