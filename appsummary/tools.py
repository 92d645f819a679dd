"""MCP tool registrations for the application summary server."""

import logging
from dataclasses import asdict, dataclass
from typing import Annotated, Any

from fastmcp import Context, FastMCP
from pydantic import Field

from appsummary.summary import ApplicationSummaryResult, SummaryActor

logger = logging.getLogger(__name__)


@dataclass
class SummaryToolDependencies:
    """Runtime dependencies required by the MCP tools."""

    actor: SummaryActor | None = None

    def attach_actor(self, actor: SummaryActor) -> None:
        self.actor = actor

    def detach_actor(self) -> None:
        self.actor = None

    def require_actor(self) -> SummaryActor:
        if self.actor is None:
            raise RuntimeError("Summary actor is not initialized.")
        return self.actor


def build_summary_payload(result: ApplicationSummaryResult) -> dict[str, Any]:
    """Render an aggregation result as a JSON-ready dictionary."""
    summary = result.summary
    payload: dict[str, Any] = {
        "application": asdict(summary.application),
        "isolation_segment": summary.isolation_segment,
        "instances": [
            {**asdict(instance), "state": instance.state.value}
            for instance in summary.running_instances
        ],
        "starting_or_running_instances": summary.starting_or_running_instance_count(),
        "routes": [asdict(route) for route in summary.routes],
        "stack": asdict(summary.stack),
        "warnings": list(result.warnings),
    }
    if result.error is not None:
        payload["error"] = str(result.error)
    return payload


def register_summary_tools(
    mcp: FastMCP,
    dependencies: SummaryToolDependencies,
) -> None:
    """Register MCP tools that summarize applications on the control plane."""

    def _validate_non_empty(value: str, field_name: str) -> str:
        if not value or not value.strip():
            raise ValueError(f"{field_name} must be a non-empty string.")
        return value.strip()

    def _log_tool_event(tool_name: str, event: str, **fields: object) -> None:
        logger.info(
            "summary_tool_event",
            extra={"tool": tool_name, "event": event, **fields},
        )

    @mcp.tool(
        name="get_application_summary",
        description="Summarizes a deployed application: lifecycle state, running instances with usage, routes, stack and isolation segment. Platform warnings are returned in 'warnings'; failures are reported in 'error' alongside any partial data.",
    )
    async def get_application_summary(
        name: Annotated[str, Field(description="The application name (e.g., 'billing-api').")],
        space_guid: Annotated[str, Field(description="GUID of the space that contains the application.")],
        ctx: Context,
    ) -> dict[str, Any]:
        """Aggregate and return the summary for one application."""

        name_value = _validate_non_empty(name, "name")
        space_value = _validate_non_empty(space_guid, "space_guid")
        actor = dependencies.require_actor()

        try:
            result = await actor.get_application_summary_by_name_and_scope(name_value, space_value)
        except Exception as exc:  # noqa: BLE001
            logger.exception("get_application_summary failed unexpectedly")
            _log_tool_event("get_application_summary", "unexpected_error", error=str(exc))
            return {"error": f"Unexpected error: {exc}"}

        for warning in result.warnings:
            await ctx.warning(warning)

        if result.error is not None:
            logger.warning("get_application_summary failed due to API error", exc_info=result.error)
            _log_tool_event("get_application_summary", "api_error", error=str(result.error))
        else:
            _log_tool_event(
                "get_application_summary",
                "success",
                app_guid=result.summary.application.guid,
                warning_count=len(result.warnings),
            )
        return build_summary_payload(result)

    logger.info("Application summary MCP tools registered.")
