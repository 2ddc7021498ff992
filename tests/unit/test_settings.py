import pytest

from src.app.settings import (
    audit_settings_from_config,
    key_rotation_settings_from_config,
    monitoring_settings_from_config,
)
from src.domain.entities import Severity
from src.domain.errors import Invalid
from config import ApplicationConfig


def test_defaults_from_application_config():
    audit = audit_settings_from_config(ApplicationConfig)
    keys = key_rotation_settings_from_config(ApplicationConfig)
    monitoring = monitoring_settings_from_config(ApplicationConfig)

    assert audit.failed_login_sample_size == 20
    assert audit.retention_seconds == 90 * 24 * 60 * 60
    assert keys.max_active_keys == 5
    assert keys.key_prefix == "tp_"
    assert monitoring.notification_severity_threshold == Severity.medium


def test_non_positive_thresholds_are_invalid():
    class BrokenConfig(ApplicationConfig):
        FAILED_LOGIN_THRESHOLD = 0

    with pytest.raises(Invalid) as exc:
        audit_settings_from_config(BrokenConfig)

    assert exc.value.code == "INVALID_CONFIG"


def test_unknown_notification_severity_is_invalid():
    class BrokenConfig(ApplicationConfig):
        NOTIFICATION_SEVERITY_THRESHOLD = "urgent"

    with pytest.raises(Invalid):
        monitoring_settings_from_config(BrokenConfig)
