import pytest

from src.app.settings import MonitoringSettings
from src.app.use_cases.audit import RecordEventUseCase
from src.app.use_cases.keys import ApiKeyUseCase
from src.app.use_cases.monitoring import SecurityMonitoringUseCase
from src.domain.entities import (
    EventOutcome,
    EventSource,
    HealthStatus,
    PerformanceMetrics,
    SecurityMetrics,
    Severity,
)
from tests.fixtures.factories import make_command


def _monitoring(uow, alert_use_case, clock, **settings):
    return SecurityMonitoringUseCase(
        uow, MonitoringSettings(**settings), alert_use_case, clock=clock
    )


@pytest.mark.asyncio
async def test_collect_metrics_over_last_hour(uow, alert_use_case, key_settings, clock):
    recorder = RecordEventUseCase(uow, clock=clock)
    await recorder.execute(make_command(metadata={"response_time": 3000}))
    clock.advance(hours=2)
    for command in [
        make_command(outcome=EventOutcome.failure, metadata={"response_time": 100}),
        make_command(outcome=EventOutcome.denied, source=EventSource(ip="10.0.0.2")),
        make_command(metadata={"suspicious_activity": True, "response_time": 2500}),
        make_command(action="admin_delete", severity=Severity.critical),
    ]:
        await recorder.execute(command)
    keys = ApiKeyUseCase(uow, key_settings, clock=clock)
    issued = await keys.generate_api_key("ci")
    await keys.validate_api_key(issued.key)

    metrics = await _monitoring(uow, alert_use_case, clock).collect_security_metrics()

    assert metrics.total_requests == 4
    assert metrics.failed_requests == 1
    assert metrics.blocked_requests == 1
    assert metrics.suspicious_activities == 2
    assert metrics.unique_ips == 2
    assert metrics.api_key_usage == 1
    assert metrics.performance.error_rate == 0.25
    assert metrics.performance.average_response_time == 1300
    assert metrics.performance.slow_requests == 1
    assert metrics.top_risky_ips[0].ip == "10.0.0.1"


@pytest.mark.asyncio
async def test_metrics_snapshots_feed_trends(uow, alert_use_case, clock):
    monitoring = _monitoring(uow, alert_use_case, clock)
    await monitoring.collect_security_metrics()
    clock.advance(minutes=5)
    await monitoring.collect_security_metrics()

    trends = await monitoring.get_security_trends()

    assert len(trends.request_trend) == 2
    assert trends.request_trend[0].timestamp < trends.request_trend[1].timestamp


@pytest.mark.asyncio
async def test_threshold_breaches_raise_system_alerts(alert_use_case, uow, clock):
    monitoring = _monitoring(uow, alert_use_case, clock)
    metrics = SecurityMetrics(
        timestamp=clock.now,
        total_requests=10,
        failed_requests=5,
        suspicious_activities=11,
        performance=PerformanceMetrics(average_response_time=2500, slow_requests=3, error_rate=0.5),
    )

    raised = await monitoring.check_alert_thresholds(metrics)

    assert [a.type for a in raised] == [
        "high_error_rate",
        "slow_response_time",
        "suspicious_activity_spike",
    ]
    assert all(a.source_ip == "system" for a in raised)


@pytest.mark.asyncio
async def test_quiet_metrics_raise_nothing(alert_use_case, uow, clock):
    monitoring = _monitoring(uow, alert_use_case, clock)

    assert await monitoring.check_alert_thresholds(SecurityMetrics(timestamp=clock.now)) == []


@pytest.mark.parametrize(
    "metrics,status",
    [
        (SecurityMetrics(), HealthStatus.healthy),
        (SecurityMetrics(performance=PerformanceMetrics(error_rate=0.07)), HealthStatus.warning),
        (SecurityMetrics(performance=PerformanceMetrics(error_rate=0.2)), HealthStatus.critical),
        (SecurityMetrics(performance=PerformanceMetrics(average_response_time=6000)), HealthStatus.critical),
        (SecurityMetrics(suspicious_activities=25), HealthStatus.warning),
        (SecurityMetrics(suspicious_activities=51, active_alerts=11), HealthStatus.critical),
        (SecurityMetrics(active_alerts=11), HealthStatus.warning),
    ],
)
def test_system_health_bands(uow, alert_use_case, clock, metrics, status):
    health = _monitoring(uow, alert_use_case, clock).assess_system_health(metrics)

    assert health.status == status
    assert len(health.issues) == len(health.recommendations)


@pytest.mark.asyncio
async def test_dashboard(uow, alert_use_case, clock):
    recorder = RecordEventUseCase(uow, clock=clock)
    await recorder.execute(make_command())

    dashboard = await _monitoring(uow, alert_use_case, clock).get_security_dashboard()

    assert dashboard.current_metrics.total_requests == 1
    assert len(dashboard.trends.request_trend) == 1
    assert dashboard.system_health.status == HealthStatus.healthy
    assert dashboard.active_alerts == []


@pytest.mark.asyncio
async def test_cleanup_removes_snapshots_past_retention(uow, alert_use_case, clock):
    monitoring = _monitoring(uow, alert_use_case, clock, metrics_retention_days=1)
    await monitoring.collect_security_metrics()
    clock.advance(days=2)
    await monitoring.collect_security_metrics()

    assert await monitoring.cleanup_old_metrics() == 1
    async with uow:
        remaining = await uow.metrics.list_since(clock.now.replace(year=2000))
    assert len(remaining) == 1
