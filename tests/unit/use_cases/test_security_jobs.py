import pytest

from src.app.settings import AuditSettings, KeyRotationSettings, MonitoringSettings
from src.app.use_cases.alerts import SecurityNotifier
from src.app.use_cases.audit import RecordEventUseCase
from src.app.use_cases.keys import ApiKeyUseCase
from src.app.use_cases.monitoring import SecurityJobs
from tests.fixtures.factories import make_command


@pytest.fixture
def jobs(uow, clock, dispatcher):
    monitoring_settings = MonitoringSettings()
    return SecurityJobs(
        lambda: uow,
        AuditSettings(),
        KeyRotationSettings(),
        monitoring_settings,
        notifier=SecurityNotifier(dispatcher, monitoring_settings),
        clock=clock,
    )


def test_job_schedule(jobs):
    schedule = {job.name: job.interval_seconds for job in jobs.scheduled_jobs()}

    assert schedule == {
        "metrics_snapshot": 300,
        "pattern_sweep": 300,
        "cleanup": 86400,
        "key_rotation": 604800,
        "daily_report": 86400,
    }


@pytest.mark.asyncio
async def test_metrics_snapshot_and_pattern_sweep(jobs, uow, clock):
    recorder = RecordEventUseCase(uow, clock=clock)
    await recorder.execute(make_command(metadata={"link": "javascript:void(0)"}))

    assert await jobs.metrics_snapshot() == {"total_requests": 1, "alerts_raised": 0}
    assert await jobs.pattern_sweep() == {"alerts_raised": 1}


@pytest.mark.asyncio
async def test_cleanup_and_rotation(jobs, uow, clock):
    keys = ApiKeyUseCase(uow, KeyRotationSettings(), clock=clock)
    await keys.generate_api_key("short", expiry_days=1)
    await keys.generate_api_key("rotating", user_id="alice")
    clock.advance(days=31)

    assert await jobs.key_rotation() == {"rotated": 1}

    clock.advance(days=7)
    result = await jobs.cleanup()
    assert result["expired_keys"] == 1
    assert result["rotated_keys_deactivated"] == 1


@pytest.mark.asyncio
async def test_daily_report_covers_previous_day_and_notifies(jobs, uow, clock, dispatcher):
    recorder = RecordEventUseCase(uow, clock=clock)
    await recorder.execute(make_command())
    clock.advance(days=1)

    result = await jobs.daily_report()

    assert result == {"total_events": 1, "channels_notified": 2}
    assert dispatcher.sent[0][1]["kind"] == "security_report"
    assert dispatcher.sent[0][1]["summary"]["total_events"] == 1
