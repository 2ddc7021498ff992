"""
Security Service Settings

Validated runtime settings built from ApplicationConfig.
"""

from typing import List

from pydantic import BaseModel, Field, ValidationError

from src.domain.entities import Severity
from src.domain.errors import Invalid


class AuditSettings(BaseModel):
    """Audit recording and inline detector settings"""

    retention_days: int = Field(90, gt=0)
    failed_login_threshold: int = Field(5, gt=0)
    failed_login_window_minutes: int = Field(15, gt=0)
    failed_login_sample_size: int = Field(20, gt=0)
    data_access_threshold: int = Field(100, gt=0)
    data_access_window_minutes: int = Field(60, gt=0)
    data_access_sample_size: int = Field(100, gt=0)
    risk_score_threshold: int = Field(70, ge=0, le=100)

    @property
    def retention_seconds(self) -> int:
        return self.retention_days * 24 * 60 * 60


class KeyRotationSettings(BaseModel):
    """API key lifecycle settings"""

    rotation_interval_days: int = Field(30, gt=0)
    key_expiry_days: int = Field(90, gt=0)
    max_active_keys: int = Field(5, gt=0)
    grace_period_days: int = Field(7, ge=0)
    deactivated_retention_seconds: int = Field(300, gt=0)
    key_prefix: str = Field("tp_", min_length=1, max_length=16)


class MonitoringSettings(BaseModel):
    """Scheduled monitoring, threat sweep and notification settings"""

    metrics_interval_minutes: int = Field(5, gt=0)
    pattern_sweep_interval_minutes: int = Field(5, gt=0)
    pattern_sweep_sample_size: int = Field(500, gt=0)
    error_rate_threshold: float = Field(0.05, ge=0, le=1)
    response_time_threshold_ms: int = Field(2000, gt=0)
    suspicious_activity_threshold: int = Field(10, gt=0)
    risk_score_threshold: int = Field(70, ge=0, le=100)
    metrics_retention_days: int = Field(30, gt=0)
    threats_enabled: bool = True
    notifications_enabled: bool = True
    notification_channels: List[str] = Field(default_factory=lambda: ["email", "chat"])
    notification_severity_threshold: Severity = Severity.medium
    scheduler_enabled: bool = True

    @property
    def metrics_retention_seconds(self) -> int:
        return self.metrics_retention_days * 24 * 60 * 60


def _build(model, values: dict):
    try:
        return model(**values)
    except ValidationError as e:
        raise Invalid(f"Invalid {model.__name__}: {e}", code="INVALID_CONFIG") from e


def audit_settings_from_config(config) -> AuditSettings:
    return _build(
        AuditSettings,
        {
            "retention_days": config.AUDIT_RETENTION_DAYS,
            "failed_login_threshold": config.FAILED_LOGIN_THRESHOLD,
            "failed_login_window_minutes": config.FAILED_LOGIN_WINDOW_MINUTES,
            "failed_login_sample_size": config.FAILED_LOGIN_SAMPLE_SIZE,
            "data_access_threshold": config.DATA_ACCESS_THRESHOLD,
            "data_access_window_minutes": config.DATA_ACCESS_WINDOW_MINUTES,
            "data_access_sample_size": config.DATA_ACCESS_SAMPLE_SIZE,
            "risk_score_threshold": config.RISK_SCORE_THRESHOLD,
        },
    )


def key_rotation_settings_from_config(config) -> KeyRotationSettings:
    return _build(
        KeyRotationSettings,
        {
            "rotation_interval_days": config.KEY_ROTATION_INTERVAL_DAYS,
            "key_expiry_days": config.KEY_EXPIRY_DAYS,
            "max_active_keys": config.KEY_MAX_ACTIVE_PER_USER,
            "grace_period_days": config.KEY_GRACE_PERIOD_DAYS,
            "deactivated_retention_seconds": config.KEY_DEACTIVATED_RETENTION_SECONDS,
            "key_prefix": config.KEY_PREFIX,
        },
    )


def monitoring_settings_from_config(config) -> MonitoringSettings:
    return _build(
        MonitoringSettings,
        {
            "metrics_interval_minutes": config.METRICS_INTERVAL_MINUTES,
            "pattern_sweep_interval_minutes": config.PATTERN_SWEEP_INTERVAL_MINUTES,
            "pattern_sweep_sample_size": config.PATTERN_SWEEP_SAMPLE_SIZE,
            "error_rate_threshold": config.ERROR_RATE_THRESHOLD,
            "response_time_threshold_ms": config.RESPONSE_TIME_THRESHOLD_MS,
            "suspicious_activity_threshold": config.SUSPICIOUS_ACTIVITY_THRESHOLD,
            "risk_score_threshold": config.RISK_SCORE_THRESHOLD,
            "metrics_retention_days": config.METRICS_RETENTION_DAYS,
            "threats_enabled": config.THREATS_ENABLED,
            "notifications_enabled": config.NOTIFICATIONS_ENABLED,
            "notification_channels": config.NOTIFICATION_CHANNELS,
            "notification_severity_threshold": config.NOTIFICATION_SEVERITY_THRESHOLD,
            "scheduler_enabled": config.SCHEDULER_ENABLED,
        },
    )
