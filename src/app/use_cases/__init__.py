"""
Use Cases

All use cases are organized into domain folders:
- alerts/: Security alert lifecycle and notifications
- audit/: Event recording, search and reports
- detection/: Anomaly detectors and threat patterns
- keys/: API key management and rotation
- monitoring/: Metrics, dashboard and scheduled jobs

Import from subdirectories.
"""
