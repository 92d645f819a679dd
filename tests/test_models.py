from appsummary.models import (
    Application,
    ApplicationInstanceWithStats,
    ApplicationState,
    ApplicationSummary,
    InstanceRuntimeInfo,
    InstanceState,
    InstanceStatus,
    merge_instances,
)


def test_starting_or_running_count_ignores_other_states() -> None:
    summary = ApplicationSummary(
        running_instances=tuple(
            ApplicationInstanceWithStats(id=index, state=state)
            for index, state in enumerate(
                [
                    InstanceState.CRASHED,
                    InstanceState.DOWN,
                    InstanceState.FLAPPING,
                    InstanceState.RUNNING,
                    InstanceState.STARTING,
                    InstanceState.UNKNOWN,
                ]
            )
        )
    )
    assert summary.starting_or_running_instance_count() == 2


def test_starting_or_running_count_empty() -> None:
    assert ApplicationSummary().starting_or_running_instance_count() == 0


def test_absent_instances_are_not_counted() -> None:
    summary = ApplicationSummary(running_instances=(ApplicationInstanceWithStats(id=0),))
    assert summary.running_instances[0].state is InstanceState.ABSENT
    assert summary.starting_or_running_instance_count() == 0


def test_instance_state_parse() -> None:
    assert InstanceState.parse("RUNNING") is InstanceState.RUNNING
    assert InstanceState.parse("starting") is InstanceState.STARTING
    assert InstanceState.parse("EVACUATING") is InstanceState.UNKNOWN
    assert InstanceState.parse(None) is InstanceState.ABSENT
    assert InstanceState.parse("") is InstanceState.ABSENT


def test_application_started_compares_raw_state() -> None:
    assert Application(state="STARTED").started
    assert not Application(state=ApplicationState.STOPPED.value).started
    assert not Application(state="PENDING").started
    assert not Application().started


def test_merge_uses_status_ids_and_combines_fields() -> None:
    statuses = {
        1: InstanceStatus(id=1, isolation_segment="seg", cpu=0.5, memory=10, memory_quota=20, disk=30, disk_quota=40, uptime=5),
        0: InstanceStatus(id=0, isolation_segment="seg"),
    }
    runtime_info = {
        1: InstanceRuntimeInfo(id=1, state=InstanceState.CRASHED, since=12.5, details="oom"),
        7: InstanceRuntimeInfo(id=7, state=InstanceState.RUNNING),
    }

    merged = merge_instances(statuses, runtime_info)

    assert [instance.id for instance in merged] == [0, 1]
    assert merged[0].state is InstanceState.ABSENT
    assert merged[1] == ApplicationInstanceWithStats(
        id=1,
        state=InstanceState.CRASHED,
        isolation_segment="seg",
        cpu=0.5,
        memory=10,
        memory_quota=20,
        disk=30,
        disk_quota=40,
        uptime=5,
        since=12.5,
        details="oom",
    )
