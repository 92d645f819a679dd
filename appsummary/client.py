"""
Control-plane API client used by the summary actor.

Every call returns its payload together with the warnings the platform sent in
the ``X-Cf-Warnings`` header. Failures raise ``ControlPlaneError`` subclasses
that still carry those warnings.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Protocol
from urllib.parse import unquote_plus

import httpx

from appsummary.errors import ControlPlaneError, ResourceNotFoundError, StatsUnavailableError
from appsummary.http_client import create_control_plane_client
from appsummary.models import (
    Application,
    InstanceRuntimeInfo,
    InstanceState,
    InstanceStatus,
    Route,
    Stack,
    Warnings,
)
from appsummary.settings import Settings

logger = logging.getLogger(__name__)

WARNINGS_HEADER = "X-Cf-Warnings"

# CF-AppStoppedStatsError and CF-InstancesError
STATS_UNAVAILABLE_CODES = frozenset({200003, 220001})


class ControlPlaneClient(Protocol):
    """Calls the summary actor needs from the control-plane API."""

    async def lookup_applications(self, name: str, scope_id: str) -> tuple[list[Application], Warnings]: ...

    async def get_instance_statuses(self, app_guid: str) -> tuple[dict[int, InstanceStatus], Warnings]: ...

    async def get_instance_runtime_info(self, app_guid: str) -> tuple[dict[int, InstanceRuntimeInfo], Warnings]: ...

    async def get_routes(self, app_guid: str) -> tuple[list[Route], Warnings]: ...

    async def get_stack(self, stack_guid: str) -> tuple[Stack, Warnings]: ...


def _require_non_empty(value: str, field_name: str) -> str:
    """Normalize and validate non-empty request arguments."""
    cleaned = value.strip()
    if not cleaned:
        raise ValueError(f"{field_name} must be a non-empty string.")
    return cleaned


def parse_warnings(response: httpx.Response) -> Warnings:
    """Split the form-encoded, comma separated warnings header."""
    raw = response.headers.get(WARNINGS_HEADER, "")
    return [unquote_plus(part).strip() for part in raw.split(",") if part.strip()]


def _application_from_resource(resource: dict[str, Any]) -> Application:
    metadata = resource.get("metadata") or {}
    entity = resource.get("entity") or {}
    return Application(
        guid=metadata.get("guid", ""),
        name=entity.get("name", ""),
        state=entity.get("state") or "",
        space_guid=entity.get("space_guid") or "",
        stack_guid=entity.get("stack_guid") or "",
        instances=entity.get("instances") or 0,
        memory=entity.get("memory") or 0,
        disk_quota=entity.get("disk_quota") or 0,
        buildpack=entity.get("buildpack") or "",
        detected_buildpack=entity.get("detected_buildpack") or "",
        health_check_type=entity.get("health_check_type") or "",
        package_state=entity.get("package_state") or "",
    )


def _route_from_resource(resource: dict[str, Any]) -> Route:
    metadata = resource.get("metadata") or {}
    entity = resource.get("entity") or {}
    return Route(
        guid=metadata.get("guid", ""),
        host=entity.get("host") or "",
        domain_guid=entity.get("domain_guid") or "",
        path=entity.get("path") or "",
        port=entity.get("port"),
    )


def _instance_status(instance_id: int, payload: dict[str, Any]) -> InstanceStatus:
    stats = payload.get("stats") or {}
    usage = stats.get("usage") or {}
    return InstanceStatus(
        id=instance_id,
        state=InstanceState.parse(payload.get("state")),
        isolation_segment=payload.get("isolation_segment") or "",
        cpu=float(usage.get("cpu") or 0.0),
        memory=int(usage.get("mem") or 0),
        memory_quota=int(stats.get("mem_quota") or 0),
        disk=int(usage.get("disk") or 0),
        disk_quota=int(stats.get("disk_quota") or 0),
        uptime=int(stats.get("uptime") or 0),
    )


def _instance_runtime_info(instance_id: int, payload: dict[str, Any]) -> InstanceRuntimeInfo:
    return InstanceRuntimeInfo(
        id=instance_id,
        state=InstanceState.parse(payload.get("state")),
        since=float(payload.get("since") or 0.0),
        details=payload.get("details") or "",
    )


@dataclass(slots=True)
class CloudControllerClient:
    """Typed wrapper around the shared AsyncClient for the v2 control-plane API."""

    _client: httpx.AsyncClient

    @classmethod
    def from_settings(cls, settings: Settings) -> "CloudControllerClient":
        """Factory that builds the client from Settings."""
        return cls(create_control_plane_client(settings))

    async def aclose(self) -> None:
        """Close the underlying HTTP resources."""
        await self._client.aclose()

    async def lookup_applications(self, name: str, scope_id: str) -> tuple[list[Application], Warnings]:
        """Find applications called ``name`` inside the space ``scope_id``."""
        name_clean = _require_non_empty(name, "name")
        scope_clean = _require_non_empty(scope_id, "scope_id")
        logger.debug("Looking up application", extra={"app_name": name_clean, "scope_id": scope_clean})
        resources, warnings = await self._paginate(
            "/v2/apps",
            params=[("q", f"name:{name_clean}"), ("q", f"space_guid:{scope_clean}")],
        )
        return [_application_from_resource(resource) for resource in resources], warnings

    async def get_instance_statuses(self, app_guid: str) -> tuple[dict[int, InstanceStatus], Warnings]:
        guid = _require_non_empty(app_guid, "app_guid")
        data, warnings = await self._request("GET", f"/v2/apps/{guid}/stats")
        return {int(key): _instance_status(int(key), value or {}) for key, value in data.items()}, warnings

    async def get_instance_runtime_info(self, app_guid: str) -> tuple[dict[int, InstanceRuntimeInfo], Warnings]:
        guid = _require_non_empty(app_guid, "app_guid")
        data, warnings = await self._request("GET", f"/v2/apps/{guid}/instances")
        return {int(key): _instance_runtime_info(int(key), value or {}) for key, value in data.items()}, warnings

    async def get_routes(self, app_guid: str) -> tuple[list[Route], Warnings]:
        guid = _require_non_empty(app_guid, "app_guid")
        resources, warnings = await self._paginate(f"/v2/apps/{guid}/routes")
        return [_route_from_resource(resource) for resource in resources], warnings

    async def get_stack(self, stack_guid: str) -> tuple[Stack, Warnings]:
        guid = _require_non_empty(stack_guid, "stack_guid")
        data, warnings = await self._request("GET", f"/v2/stacks/{guid}")
        metadata = data.get("metadata") or {}
        entity = data.get("entity") or {}
        stack = Stack(
            name=entity.get("name") or "",
            guid=metadata.get("guid", guid),
            description=entity.get("description") or "",
        )
        return stack, warnings

    async def _paginate(self, path: str, **kwargs: Any) -> tuple[list[dict[str, Any]], Warnings]:
        """Collect ``resources`` from every page, following ``next_url``."""
        resources: list[dict[str, Any]] = []
        all_warnings: Warnings = []
        next_path: str | None = path
        while next_path:
            try:
                data, warnings = await self._request("GET", next_path, **kwargs)
            except ControlPlaneError as exc:
                if not all_warnings:
                    raise
                raise exc.with_prior_warnings(all_warnings) from exc
            all_warnings.extend(warnings)
            resources.extend(data.get("resources") or [])
            next_path = data.get("next_url")
            # next_url already carries the query string
            kwargs = {}
        return resources, all_warnings

    async def _request(self, method: str, path: str, **kwargs: Any) -> tuple[dict[str, Any], Warnings]:
        """Normalized request handler for all outgoing API calls."""

        def _transport_error(message: str, *, exc: Exception | None = None) -> ControlPlaneError:
            logger.error(
                message,
                extra={"method": method, "path": path},
                exc_info=exc,
            )
            return ControlPlaneError(message)

        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.TimeoutException as exc:
            raise _transport_error(
                f"Control-plane API request timed out ({method} {path}).",
                exc=exc,
            ) from exc
        except httpx.RequestError as exc:
            raise _transport_error(
                f"Control-plane API request failed ({method} {path}): {exc!s}",
                exc=exc,
            ) from exc

        warnings = parse_warnings(response)

        if response.is_error:
            raise self._error_from_response(method, path, response, warnings)

        try:
            data: dict[str, Any] = response.json()
        except json.JSONDecodeError as exc:
            logger.error(
                "Control-plane API returned invalid JSON",
                extra={"method": method, "path": path},
            )
            raise ControlPlaneError(
                f"Control-plane API returned invalid JSON during {method} {path}.",
                warnings=warnings,
            ) from exc

        if not isinstance(data, dict):
            logger.error(
                "Control-plane API returned a non-object JSON body",
                extra={"method": method, "path": path, "body_type": type(data).__name__},
            )
            raise ControlPlaneError(
                f"Control-plane API returned unexpected JSON during {method} {path}: expected an object.",
                warnings=warnings,
                status_code=response.status_code,
            )

        return data, warnings

    @staticmethod
    def _error_from_response(
        method: str,
        path: str,
        response: httpx.Response,
        warnings: Warnings,
    ) -> ControlPlaneError:
        snippet = response.text.strip()
        if len(snippet) > 512:
            snippet = f"{snippet[:512]}..."
        try:
            body = response.json()
        except json.JSONDecodeError:
            body = {}
        if not isinstance(body, dict):
            body = {}

        code = body.get("code")
        error_code = body.get("error_code") or ""
        description = body.get("description") or snippet or "no body provided."
        logger.warning(
            "Control-plane API responded with error",
            extra={
                "method": method,
                "path": path,
                "status_code": response.status_code,
                "error_code": error_code,
            },
        )

        error_cls: type[ControlPlaneError] = ControlPlaneError
        if code in STATS_UNAVAILABLE_CODES:
            error_cls = StatsUnavailableError
        elif response.status_code == 404:
            error_cls = ResourceNotFoundError
        return error_cls(
            f"Control-plane API error ({response.status_code}) during {method} {path}: {description}",
            warnings=warnings,
            status_code=response.status_code,
            error_code=error_code,
        )
