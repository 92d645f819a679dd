"""Data model for application summaries assembled from the control-plane API."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping

Warnings = list[str]


class ApplicationState(str, Enum):
    """Lifecycle states the summary logic cares about."""

    STARTED = "STARTED"
    STOPPED = "STOPPED"


class InstanceState(str, Enum):
    """Runtime state of a single application instance."""

    STARTING = "STARTING"
    RUNNING = "RUNNING"
    CRASHED = "CRASHED"
    DOWN = "DOWN"
    FLAPPING = "FLAPPING"
    UNKNOWN = "UNKNOWN"
    ABSENT = ""

    @classmethod
    def parse(cls, value: str | None) -> "InstanceState":
        """Map a platform state string onto the enum, defaulting to UNKNOWN."""
        if not value:
            return cls.ABSENT
        try:
            return cls(value.upper())
        except ValueError:
            return cls.UNKNOWN


@dataclass(frozen=True, slots=True)
class Application:
    guid: str = ""
    name: str = ""
    state: str = ""
    space_guid: str = ""
    stack_guid: str = ""
    instances: int = 0
    memory: int = 0
    disk_quota: int = 0
    buildpack: str = ""
    detected_buildpack: str = ""
    health_check_type: str = ""
    package_state: str = ""

    @property
    def started(self) -> bool:
        return self.state == ApplicationState.STARTED


@dataclass(frozen=True, slots=True)
class InstanceStatus:
    """Per-instance usage reported by the stats endpoint."""

    id: int
    state: InstanceState = InstanceState.UNKNOWN
    isolation_segment: str = ""
    cpu: float = 0.0
    memory: int = 0
    memory_quota: int = 0
    disk: int = 0
    disk_quota: int = 0
    uptime: int = 0


@dataclass(frozen=True, slots=True)
class InstanceRuntimeInfo:
    """Per-instance lifecycle detail reported by the instances endpoint."""

    id: int
    state: InstanceState = InstanceState.UNKNOWN
    since: float = 0.0
    details: str = ""


@dataclass(frozen=True, slots=True)
class ApplicationInstanceWithStats:
    id: int
    state: InstanceState = InstanceState.ABSENT
    isolation_segment: str = ""
    cpu: float = 0.0
    memory: int = 0
    memory_quota: int = 0
    disk: int = 0
    disk_quota: int = 0
    uptime: int = 0
    since: float = 0.0
    details: str = ""

    @classmethod
    def from_datasets(
        cls,
        status: InstanceStatus,
        runtime: InstanceRuntimeInfo | None,
    ) -> "ApplicationInstanceWithStats":
        return cls(
            id=status.id,
            state=runtime.state if runtime is not None else InstanceState.ABSENT,
            isolation_segment=status.isolation_segment,
            cpu=status.cpu,
            memory=status.memory,
            memory_quota=status.memory_quota,
            disk=status.disk,
            disk_quota=status.disk_quota,
            uptime=status.uptime,
            since=runtime.since if runtime is not None else 0.0,
            details=runtime.details if runtime is not None else "",
        )


@dataclass(frozen=True, slots=True)
class Route:
    guid: str = ""
    host: str = ""
    domain_guid: str = ""
    path: str = ""
    port: int | None = None


@dataclass(frozen=True, slots=True)
class Stack:
    name: str = ""
    guid: str = ""
    description: str = ""


@dataclass(frozen=True, slots=True)
class ApplicationSummary:
    """Aggregate view of one application, its instances, routes and stack."""

    application: Application = field(default_factory=Application)
    running_instances: tuple[ApplicationInstanceWithStats, ...] = ()
    routes: tuple[Route, ...] = ()
    stack: Stack = field(default_factory=Stack)
    isolation_segment: str = ""

    def starting_or_running_instance_count(self) -> int:
        """Count instances that are either STARTING or RUNNING."""
        return sum(
            1
            for instance in self.running_instances
            if instance.state in (InstanceState.STARTING, InstanceState.RUNNING)
        )


def merge_instances(
    statuses: Mapping[int, InstanceStatus],
    runtime_info: Mapping[int, InstanceRuntimeInfo],
) -> tuple[ApplicationInstanceWithStats, ...]:
    """
    Join the two per-instance datasets on instance id.

    The status mapping decides which ids exist; runtime entries without a
    matching status are dropped. The result is ordered by ascending id.
    """
    return tuple(
        ApplicationInstanceWithStats.from_datasets(statuses[instance_id], runtime_info.get(instance_id))
        for instance_id in sorted(statuses)
    )
