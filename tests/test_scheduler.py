from unittest.mock import AsyncMock, patch

import pytest
from aiohttp import web
from apscheduler.triggers.interval import IntervalTrigger

from camunda_exporter.collectors import (
    EngineMetricsCollector,
    HistoryIncidentCollector,
    NamedActivityCollector,
    ProcessDefinitionStatisticsCollector,
)
from camunda_exporter.metrics import (
    ENGINE_METRICS,
    HISTORY_INCIDENTS,
    PROCESS_ACTIVITY_INSTANCES,
    PROCESS_INSTANCES,
    SCRAPE_DURATION,
    PrometheusSink,
)
from camunda_exporter.scheduler import LONG_CYCLE, SHORT_CYCLE, ExporterScheduler

from conftest import json_handler, make_settings, run_camunda


def incident_handler(counts):
    async def handler(request):
        [status] = list(request.query)
        return web.json_response({"count": counts[status]})

    return handler


def definition(key, suspended):
    return {"id": f"{key}:1:x", "key": key, "version": 1, "deploymentId": "d", "suspended": suspended}


STATISTICS = [
    {"id": "invoice:1:x", "instances": 5, "failedJobs": 0, "definition": definition("invoice", False)},
    {"id": "legacy:1:x", "instances": 9, "failedJobs": 2, "definition": definition("legacy", True)},
]


def camunda_routes():
    return {
        "/history/incident/count": incident_handler({"open": 7, "deleted": 0, "resolved": 2}),
        "/process-definition/statistics": json_handler(STATISTICS),
        "/process-definition/{id}/statistics": json_handler([{"id": "Task_1", "instances": 1, "failedJobs": 0}]),
        "/history/process-definition/{id}/statistics": json_handler(
            [{"id": "Task_1", "instances": 3, "canceled": 0, "finished": 2, "completeScope": 2}]
        ),
        "/metrics": json_handler([{"timestamp": "t1", "name": "job-successful", "value": 12}]),
    }


def test_collector_selection_follows_toggles(sink):
    scheduler = ExporterScheduler(make_settings(), sink)
    assert scheduler.short_collectors(client=None) == []
    assert scheduler.long_collectors(client=None) == []

    settings = make_settings(
        fetch_runtime=True,
        fetch_history=True,
        fetch_metrics=True,
        activities=[{"id": "A", "label": "a", "group_key": "g"}],
    )
    scheduler = ExporterScheduler(settings, sink)
    assert [type(c) for c in scheduler.short_collectors(client=None)] == [
        HistoryIncidentCollector,
        ProcessDefinitionStatisticsCollector,
        NamedActivityCollector,
    ]
    assert [type(c) for c in scheduler.long_collectors(client=None)] == [EngineMetricsCollector]


@pytest.mark.asyncio
async def test_short_cycle_publishes_open_incidents():
    sink = PrometheusSink()
    async with run_camunda(camunda_routes()) as url:
        scheduler = ExporterScheduler(make_settings(url, fetch_history=True), sink)
        assert await scheduler.run_short_cycle() is True

    assert sink.get_value(HISTORY_INCIDENTS, {"status": "open"}) == 7
    assert sink.get_value(SCRAPE_DURATION, {"name": SHORT_CYCLE}) is not None
    assert sink.get_value(SCRAPE_DURATION, {"name": "incidents"}) is not None


@pytest.mark.asyncio
async def test_short_cycle_skips_suspended_definitions():
    sink = PrometheusSink()
    async with run_camunda(camunda_routes()) as url:
        scheduler = ExporterScheduler(make_settings(url, fetch_runtime=True), sink)
        assert await scheduler.run_short_cycle() is True

    invoice = {
        "id": "invoice:1:x",
        "definitionId": "invoice:1:x",
        "definitionKey": "invoice",
        "definitionVersion": "1",
        "deploymentId": "d",
        "tenantId": "",
    }
    legacy = dict(invoice, id="legacy:1:x", definitionId="legacy:1:x", definitionKey="legacy")
    assert sink.get_value(PROCESS_INSTANCES, invoice) == 5
    assert sink.get_value(PROCESS_INSTANCES, legacy) is None
    assert sink.get_value(
        PROCESS_ACTIVITY_INSTANCES,
        {"activityId": "Task_1", "definitionId": "legacy:1:x", "definitionKey": "legacy", "definitionVersion": "1"},
    ) is None
    assert sink.get_value(
        PROCESS_ACTIVITY_INSTANCES,
        {"activityId": "Task_1", "definitionId": "invoice:1:x", "definitionKey": "invoice", "definitionVersion": "1"},
    ) == 1


@pytest.mark.asyncio
async def test_repeated_ticks_are_idempotent(sink):
    async with run_camunda(camunda_routes()) as url:
        scheduler = ExporterScheduler(
            make_settings(url, fetch_runtime=True, fetch_history=True, fetch_metrics=True), sink
        )
        await scheduler.run_short_cycle()
        await scheduler.run_long_cycle()
        first = {k: v for k, v in sink.gauges.items() if k[0] != SCRAPE_DURATION}

        await scheduler.run_short_cycle()
        await scheduler.run_long_cycle()
        second = {k: v for k, v in sink.gauges.items() if k[0] != SCRAPE_DURATION}

    assert first == second
    assert sink.gauge(ENGINE_METRICS, name="job-successful") == 12


@pytest.mark.asyncio
async def test_cycle_continues_after_failed_step(sink):
    routes = camunda_routes()
    routes["/history/incident/count"] = json_handler({"message": "boom"}, status=500)
    async with run_camunda(routes) as url:
        scheduler = ExporterScheduler(make_settings(url, fetch_history=True, fetch_runtime=True), sink)
        assert await scheduler.run_short_cycle() is False

    assert sink.series(PROCESS_INSTANCES) != []


def test_run_initial_requires_both_cycles(sink):
    scheduler = ExporterScheduler(make_settings(), sink)

    with patch.object(scheduler, "run_short_cycle", new_callable=AsyncMock) as short, \
         patch.object(scheduler, "run_long_cycle", new_callable=AsyncMock) as long:
        short.return_value = True
        long.return_value = True
        assert scheduler.run_initial() is True

        long.return_value = False
        assert scheduler.run_initial() is False

        short.return_value = False
        long.reset_mock()
        assert scheduler.run_initial() is False
        long.assert_not_called()


def test_scheduled_cycle_failure_is_not_fatal(sink):
    scheduler = ExporterScheduler(make_settings(), sink)

    with patch.object(scheduler, "run_short_cycle", new_callable=AsyncMock) as short:
        short.side_effect = RuntimeError("Test error")
        # This should not raise an exception
        scheduler.run_short_cycle_sync()

    with patch.object(scheduler, "run_long_cycle", new_callable=AsyncMock) as long:
        long.return_value = False
        scheduler.run_long_cycle_sync()


def test_scheduler_start_and_stop(sink):
    settings = make_settings()
    settings.scheduler.short_interval = 10
    settings.scheduler.long_interval = 60
    scheduler = ExporterScheduler(settings, sink)

    with patch.object(scheduler.scheduler, "add_job") as mock_add_job, \
         patch.object(scheduler.scheduler, "start") as mock_start:
        scheduler.start()

        assert mock_add_job.call_count == 2
        mock_start.assert_called_once()
        jobs = {call.kwargs["id"]: call for call in mock_add_job.call_args_list}
        short_trigger = jobs[SHORT_CYCLE].kwargs["trigger"]
        long_trigger = jobs[LONG_CYCLE].kwargs["trigger"]
        assert isinstance(short_trigger, IntervalTrigger)
        assert short_trigger.interval.total_seconds() == 10
        assert long_trigger.interval.total_seconds() == 60
        assert jobs[SHORT_CYCLE].args[0] == scheduler.run_short_cycle_sync
        assert jobs[LONG_CYCLE].kwargs["max_instances"] == 1

    # Not running: stop is a no-op
    scheduler.stop()


def test_scheduler_stop_shuts_down_running_scheduler(sink):
    scheduler = ExporterScheduler(make_settings(), sink)
    scheduler.start()
    try:
        assert scheduler.scheduler.running
    finally:
        scheduler.stop()
    assert not scheduler.scheduler.running
