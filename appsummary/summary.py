"""
Application summary aggregation.

``SummaryActor`` walks the control-plane API one call at a time (application
lookup, instance state, routes, stack) and folds the results into a single
``ApplicationSummary``. Warnings from every call are kept in call order, even
for the call that fails.
"""

import logging
from dataclasses import dataclass, field, replace

from appsummary.client import ControlPlaneClient
from appsummary.errors import ApplicationNotFoundError, ControlPlaneError, StatsUnavailableError
from appsummary.models import (
    Application,
    ApplicationInstanceWithStats,
    ApplicationSummary,
    Warnings,
    merge_instances,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ApplicationSummaryResult:
    """Outcome of one aggregation: the summary built so far, all warnings, and the stopping error."""

    summary: ApplicationSummary = field(default_factory=ApplicationSummary)
    warnings: Warnings = field(default_factory=list)
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class SummaryActor:
    """Builds application summaries through an injected control-plane client."""

    def __init__(self, client: ControlPlaneClient) -> None:
        self._client = client

    async def get_application_by_name_and_scope(self, name: str, scope_id: str) -> tuple[Application, Warnings]:
        """Return the first application matching ``name`` in ``scope_id``."""
        applications, warnings = await self._client.lookup_applications(name, scope_id)
        if not applications:
            raise ApplicationNotFoundError(name, warnings=warnings)
        return applications[0], warnings

    async def get_application_instances_with_stats(
        self, app_guid: str, warnings: Warnings
    ) -> tuple[ApplicationInstanceWithStats, ...]:
        """
        Fetch instance status and runtime info and join them by instance id.

        Warnings from each successful call are appended to ``warnings``. A
        failing call raises its error untouched; its own warnings stay on the
        exception for the caller to collect.
        """
        statuses, status_warnings = await self._client.get_instance_statuses(app_guid)
        warnings.extend(status_warnings)
        runtime_info, runtime_warnings = await self._client.get_instance_runtime_info(app_guid)
        warnings.extend(runtime_warnings)
        return merge_instances(statuses, runtime_info)

    async def get_application_summary_by_name_and_scope(self, name: str, scope_id: str) -> ApplicationSummaryResult:
        """
        Assemble the summary for application ``name`` in scope ``scope_id``.

        Instance state is fetched only for started applications, and a
        ``StatsUnavailableError`` there leaves the instance list empty instead
        of failing. Any other client error stops the aggregation and is
        returned unchanged in ``ApplicationSummaryResult.error`` next to the
        partial summary and every warning gathered up to that point.
        """
        all_warnings: Warnings = []

        try:
            application, warnings = await self.get_application_by_name_and_scope(name, scope_id)
        except (ApplicationNotFoundError, ControlPlaneError) as exc:
            all_warnings.extend(exc.warnings)
            logger.debug("Application lookup failed", extra={"app_name": name, "scope_id": scope_id})
            return ApplicationSummaryResult(warnings=all_warnings, error=exc)
        all_warnings.extend(warnings)

        summary = ApplicationSummary(application=application)

        if application.started:
            try:
                instances = await self.get_application_instances_with_stats(application.guid, all_warnings)
            except StatsUnavailableError as exc:
                all_warnings.extend(exc.warnings)
                logger.info(
                    "Instance stats unavailable; continuing without instances",
                    extra={"app_guid": application.guid},
                )
            except ControlPlaneError as exc:
                all_warnings.extend(exc.warnings)
                return ApplicationSummaryResult(summary=summary, warnings=all_warnings, error=exc)
            else:
                summary = replace(
                    summary,
                    running_instances=instances,
                    isolation_segment=instances[0].isolation_segment if instances else "",
                )

        try:
            routes, warnings = await self._client.get_routes(application.guid)
        except ControlPlaneError as exc:
            all_warnings.extend(exc.warnings)
            return ApplicationSummaryResult(summary=summary, warnings=all_warnings, error=exc)
        all_warnings.extend(warnings)
        summary = replace(summary, routes=tuple(routes))

        if application.stack_guid:
            try:
                stack, warnings = await self._client.get_stack(application.stack_guid)
            except ControlPlaneError as exc:
                all_warnings.extend(exc.warnings)
                return ApplicationSummaryResult(summary=summary, warnings=all_warnings, error=exc)
            all_warnings.extend(warnings)
            summary = replace(summary, stack=stack)
        else:
            logger.debug("Application has no stack; skipping stack lookup", extra={"app_guid": application.guid})

        logger.debug(
            "Application summary assembled",
            extra={
                "app_guid": application.guid,
                "instance_count": len(summary.running_instances),
                "route_count": len(summary.routes),
                "warning_count": len(all_warnings),
            },
        )
        return ApplicationSummaryResult(summary=summary, warnings=all_warnings, error=None)
