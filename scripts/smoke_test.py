"""
Integration smoke test for the application summary MCP server.

This script spins up:
1. A mock control-plane API (Starlette) exposing the v2 endpoints the summary
   actor calls: /v2/apps, /v2/apps/{guid}/stats, /v2/apps/{guid}/instances,
   /v2/apps/{guid}/routes and /v2/stacks/{guid}.
2. The MCP SSE server (running in-process via FastMCP's HTTP transport).
3. A FastMCP client that connects over SSE, asks for a summary of a started
   app and of a missing app, and prints the responses.

Usage:
    uv run python scripts/smoke_test.py

The script prints the tool outputs and exits with code 0 if the end-to-end flow
works. Use Ctrl+C to abort.
"""

import asyncio
import contextlib
import os

import uvicorn
from fastmcp.client import Client
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route

from appsummary.server import build_server
from appsummary.settings import Settings

MOCK_SERVICE_HOST = "127.0.0.1"
MOCK_SERVICE_PORT = 9070
SSE_HOST = "127.0.0.1"
SSE_PORT = 18080

APP_GUID = "smoke-app-guid"
STACK_GUID = "smoke-stack-guid"
SPACE_GUID = "smoke-space-guid"


def _warned(payload: object, warning: str, status_code: int = 200) -> JSONResponse:
    return JSONResponse(payload, status_code=status_code, headers={"X-Cf-Warnings": warning})


async def apps_endpoint(request: Request) -> JSONResponse:
    filters = request.query_params.getlist("q")
    resources = []
    if "name:smoke-app" in filters and f"space_guid:{SPACE_GUID}" in filters:
        resources.append(
            {
                "metadata": {"guid": APP_GUID},
                "entity": {
                    "name": "smoke-app",
                    "state": "STARTED",
                    "space_guid": SPACE_GUID,
                    "stack_guid": STACK_GUID,
                    "instances": 2,
                    "memory": 256,
                    "disk_quota": 1024,
                },
            }
        )
    return _warned({"total_results": len(resources), "resources": resources, "next_url": None}, "lookup%20warning")


async def stats_endpoint(request: Request) -> JSONResponse:
    return _warned(
        {
            "0": {
                "state": "RUNNING",
                "isolation_segment": "smoke-segment",
                "stats": {"usage": {"cpu": 0.02, "mem": 1024, "disk": 2048}, "mem_quota": 4096, "disk_quota": 8192, "uptime": 30},
            },
            "1": {
                "state": "STARTING",
                "isolation_segment": "smoke-segment",
                "stats": {"usage": {}, "uptime": 0},
            },
        },
        "stats%20warning",
    )


async def instances_endpoint(request: Request) -> JSONResponse:
    return JSONResponse(
        {
            "0": {"state": "RUNNING", "since": 1700000000.0},
            "1": {"state": "STARTING", "since": 1700000100.0},
        }
    )


async def routes_endpoint(request: Request) -> JSONResponse:
    return JSONResponse(
        {
            "resources": [{"metadata": {"guid": "smoke-route-guid"}, "entity": {"host": "smoke"}}],
            "next_url": None,
        }
    )


async def stack_endpoint(request: Request) -> JSONResponse:
    return JSONResponse({"metadata": {"guid": STACK_GUID}, "entity": {"name": "cflinuxfs4"}})


def build_mock_service() -> Starlette:
    return Starlette(
        routes=[
            Route("/v2/apps", apps_endpoint, methods=["GET"]),
            Route("/v2/apps/{guid:str}/stats", stats_endpoint, methods=["GET"]),
            Route("/v2/apps/{guid:str}/instances", instances_endpoint, methods=["GET"]),
            Route("/v2/apps/{guid:str}/routes", routes_endpoint, methods=["GET"]),
            Route("/v2/stacks/{guid:str}", stack_endpoint, methods=["GET"]),
        ],
    )


async def run_uvicorn_app(app: Starlette, host: str, port: int) -> uvicorn.Server:
    config = uvicorn.Config(app, host=host, port=port, log_level="error")
    server = uvicorn.Server(config)

    async def _serve() -> None:
        await server.serve()

    asyncio.create_task(_serve())
    # Give the server a moment to bind the port.
    await asyncio.sleep(0.3)
    return server


async def run_smoke_flow() -> None:
    print("Starting mock control-plane API...")
    mock_server = await run_uvicorn_app(build_mock_service(), MOCK_SERVICE_HOST, MOCK_SERVICE_PORT)

    os.environ["CF_API_URL"] = f"http://{MOCK_SERVICE_HOST}:{MOCK_SERVICE_PORT}"
    os.environ["MCP_SSE_PORT"] = str(SSE_PORT)
    settings = Settings.load()

    app_server = build_server(settings)
    app_server.startup()

    async def _run_sse() -> None:
        await app_server.serve_sse_async(host=SSE_HOST)

    print("Starting MCP SSE server...")
    sse_task = asyncio.create_task(_run_sse())
    await asyncio.sleep(0.5)

    client = Client(f"http://{SSE_HOST}:{SSE_PORT}/sse", name="smoke-client")

    try:
        async with client:
            print("Calling get_application_summary for a started app...")
            summary_result = await client.call_tool(
                "get_application_summary",
                {"name": "smoke-app", "space_guid": SPACE_GUID},
            )
            print("get_application_summary result:", summary_result)

            print("Calling get_application_summary for a missing app...")
            missing_result = await client.call_tool(
                "get_application_summary",
                {"name": "missing-app", "space_guid": SPACE_GUID},
            )
            print("get_application_summary result:", missing_result)

            print("Smoke test succeeded")
    finally:
        print("Stopping MCP SSE server...")
        sse_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await sse_task
        await app_server.ashutdown()

        print("Stopping mock control-plane API...")
        mock_server.should_exit = True
        await asyncio.sleep(0.2)


if __name__ == "__main__":
    try:
        asyncio.run(run_smoke_flow())
    except KeyboardInterrupt:
        print("Smoke test interrupted.")
