import os
import yaml

ROOT_PATH = os.path.dirname(__file__)
CONFIG_FILE_PATH = os.path.join(ROOT_PATH, "env.yaml")

if os.path.exists(CONFIG_FILE_PATH):
    with open(CONFIG_FILE_PATH, "r") as r_file:
        data = yaml.safe_load(r_file)
else:
    data = dict()


class ApplicationConfig:
    REDIS_URL = data.get("REDIS_URL", "redis://localhost:6379/0")
    CACHE_BACKEND = data.get("CACHE_BACKEND", "redis")
    API_PORT = data.get("API_PORT", 8000)
    API_HOST = data.get("API_HOST", "0.0.0.0")
    CORS_ORIGINS = data.get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")
    ADMIN_API_KEY = data.get("ADMIN_API_KEY", "test-admin-key-12345")

    # Audit recording and inline detectors
    AUDIT_RETENTION_DAYS = data.get("AUDIT_RETENTION_DAYS", 90)
    FAILED_LOGIN_THRESHOLD = data.get("FAILED_LOGIN_THRESHOLD", 5)
    FAILED_LOGIN_WINDOW_MINUTES = data.get("FAILED_LOGIN_WINDOW_MINUTES", 15)
    FAILED_LOGIN_SAMPLE_SIZE = data.get("FAILED_LOGIN_SAMPLE_SIZE", 20)
    DATA_ACCESS_THRESHOLD = data.get("DATA_ACCESS_THRESHOLD", 100)
    DATA_ACCESS_WINDOW_MINUTES = data.get("DATA_ACCESS_WINDOW_MINUTES", 60)
    DATA_ACCESS_SAMPLE_SIZE = data.get("DATA_ACCESS_SAMPLE_SIZE", 100)
    RISK_SCORE_THRESHOLD = data.get("RISK_SCORE_THRESHOLD", 70)
    SUSPICIOUS_ACTIVITY_THRESHOLD = data.get("SUSPICIOUS_ACTIVITY_THRESHOLD", 10)

    # API key lifecycle
    KEY_ROTATION_INTERVAL_DAYS = data.get("KEY_ROTATION_INTERVAL_DAYS", 30)
    KEY_EXPIRY_DAYS = data.get("KEY_EXPIRY_DAYS", 90)
    KEY_MAX_ACTIVE_PER_USER = data.get("KEY_MAX_ACTIVE_PER_USER", 5)
    KEY_GRACE_PERIOD_DAYS = data.get("KEY_GRACE_PERIOD_DAYS", 7)
    KEY_DEACTIVATED_RETENTION_SECONDS = data.get("KEY_DEACTIVATED_RETENTION_SECONDS", 300)
    KEY_PREFIX = data.get("KEY_PREFIX", "tp_")

    # Monitoring
    METRICS_INTERVAL_MINUTES = data.get("METRICS_INTERVAL_MINUTES", 5)
    PATTERN_SWEEP_INTERVAL_MINUTES = data.get("PATTERN_SWEEP_INTERVAL_MINUTES", 5)
    PATTERN_SWEEP_SAMPLE_SIZE = data.get("PATTERN_SWEEP_SAMPLE_SIZE", 500)
    ERROR_RATE_THRESHOLD = data.get("ERROR_RATE_THRESHOLD", 0.05)
    RESPONSE_TIME_THRESHOLD_MS = data.get("RESPONSE_TIME_THRESHOLD_MS", 2000)
    METRICS_RETENTION_DAYS = data.get("METRICS_RETENTION_DAYS", 30)
    THREATS_ENABLED = bool(data.get("THREATS_ENABLED", True))
    NOTIFICATIONS_ENABLED = bool(data.get("NOTIFICATIONS_ENABLED", True))
    NOTIFICATION_CHANNELS = data.get("NOTIFICATION_CHANNELS", ["email", "chat"])
    NOTIFICATION_SEVERITY_THRESHOLD = data.get("NOTIFICATION_SEVERITY_THRESHOLD", "medium")
    SCHEDULER_ENABLED = bool(data.get("SCHEDULER_ENABLED", True))
