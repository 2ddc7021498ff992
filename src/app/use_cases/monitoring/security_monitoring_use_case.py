"""
Security Monitoring Use Case

Periodic metrics snapshots, threshold alerts, trends and health assessment.
"""

import logging
from collections import Counter
from datetime import datetime, timedelta
from typing import Callable, List

from src.app.services.unit_of_work import UnitOfWork
from src.app.settings import MonitoringSettings
from src.app.use_cases.alerts import AlertLifecycleUseCase, CreateAlertCommand
from src.domain.base import utcnow
from src.domain.entities import (
    AlertTypeCount,
    AuditEvent,
    EventOutcome,
    HealthStatus,
    IpRisk,
    PerformanceMetrics,
    SecurityAlert,
    SecurityMetrics,
    Severity,
)
from src.domain.errors import Internal, SecurityServiceError
from .dtos import SecurityDashboard, SecurityTrends, SystemHealth, TrendPoint

logger = logging.getLogger(__name__)

METRICS_WINDOW = timedelta(hours=1)
TRENDS_WINDOW = timedelta(hours=24)
METRICS_EVENT_SAMPLE = 1000
ACTIVE_ALERT_SAMPLE = 1000
DASHBOARD_ALERTS = 10
TOP_RISKY_IPS = 10
SYSTEM_SOURCE = "system"

# Health assessment bands: (critical, warning)
ERROR_RATE_BANDS = (0.1, 0.05)
RESPONSE_TIME_BANDS_MS = (5000, 2000)
SUSPICIOUS_ACTIVITY_BANDS = (50, 20)
ACTIVE_ALERTS_WARNING = 10


class SecurityMonitoringUseCase:
    """
    Use case for security monitoring.

    Business Rules:
    - Snapshots cover the last hour and are stored per 5-minute bucket
    - An event is suspicious when flagged or its risk score exceeds the threshold
    - Error rate is failures over total events in the window
    - Threshold breaches raise system alerts with source_ip "system"
    """

    def __init__(
        self,
        uow: UnitOfWork,
        settings: MonitoringSettings,
        alerts: AlertLifecycleUseCase,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.uow = uow
        self.settings = settings
        self.alerts = alerts
        self.clock = clock

    async def collect_security_metrics(self) -> SecurityMetrics:
        """
        Snapshot the last hour of activity and persist it.

        Raises:
            StoreUnavailable: store read or write failed
            Internal: unexpected failure
        """
        now = self.clock()
        window_start = now - METRICS_WINDOW

        try:
            async with self.uow:
                sample = await self.uow.audit_events.get_recent(METRICS_EVENT_SAMPLE)
                api_key_usage = await self.uow.api_keys.total_usage()

            events = [e for e in sample if window_start <= e.timestamp <= now]
            active_alerts = await self.alerts.get_active_alerts(ACTIVE_ALERT_SAMPLE)

            metrics = self._build_metrics(now, events, active_alerts)
            metrics = metrics.model_copy(update={"api_key_usage": api_key_usage})

            async with self.uow:
                await self.uow.metrics.save(metrics, self.settings.metrics_retention_seconds)
        except SecurityServiceError:
            logger.error("Failed to collect security metrics", exc_info=True)
            raise
        except Exception as e:
            logger.error("Failed to collect security metrics", exc_info=True)
            raise Internal("Failed to collect security metrics") from e

        logger.info(
            f"Security metrics collected: requests={metrics.total_requests} "
            f"failed={metrics.failed_requests} suspicious={metrics.suspicious_activities} "
            f"active_alerts={metrics.active_alerts}"
        )
        return metrics

    async def check_alert_thresholds(self, metrics: SecurityMetrics) -> List[SecurityAlert]:
        raised = []
        performance = metrics.performance

        if performance.error_rate > self.settings.error_rate_threshold:
            raised.append(
                await self.alerts.create_alert(
                    CreateAlertCommand(
                        type="high_error_rate",
                        severity=Severity.high,
                        title="High Error Rate Detected",
                        description=(
                            f"Error rate is {performance.error_rate * 100:.2f}%, exceeding "
                            f"threshold of {self.settings.error_rate_threshold * 100:.2f}%"
                        ),
                        source_ip=SYSTEM_SOURCE,
                        metadata={
                            "current_error_rate": performance.error_rate,
                            "threshold": self.settings.error_rate_threshold,
                            "total_requests": metrics.total_requests,
                            "failed_requests": metrics.failed_requests,
                        },
                    )
                )
            )

        if performance.average_response_time > self.settings.response_time_threshold_ms:
            raised.append(
                await self.alerts.create_alert(
                    CreateAlertCommand(
                        type="slow_response_time",
                        severity=Severity.medium,
                        title="Slow Response Time",
                        description=(
                            f"Average response time is {performance.average_response_time:.0f}ms, "
                            f"exceeding threshold of {self.settings.response_time_threshold_ms}ms"
                        ),
                        source_ip=SYSTEM_SOURCE,
                        metadata={
                            "average_response_time": performance.average_response_time,
                            "threshold": self.settings.response_time_threshold_ms,
                            "slow_requests": performance.slow_requests,
                        },
                    )
                )
            )

        if metrics.suspicious_activities > self.settings.suspicious_activity_threshold:
            raised.append(
                await self.alerts.create_alert(
                    CreateAlertCommand(
                        type="suspicious_activity_spike",
                        severity=Severity.high,
                        title="Suspicious Activity Spike",
                        description=(
                            f"{metrics.suspicious_activities} suspicious activities detected, "
                            f"exceeding threshold of {self.settings.suspicious_activity_threshold}"
                        ),
                        source_ip=SYSTEM_SOURCE,
                        metadata={
                            "suspicious_activities": metrics.suspicious_activities,
                            "threshold": self.settings.suspicious_activity_threshold,
                            "time_window": "1 hour",
                        },
                    )
                )
            )

        return raised

    async def get_security_trends(self) -> SecurityTrends:
        since = self.clock() - TRENDS_WINDOW
        async with self.uow:
            try:
                snapshots = await self.uow.metrics.list_since(since)
            except Exception:
                logger.error("Failed to get security trends", exc_info=True)
                return SecurityTrends()

        return SecurityTrends(
            request_trend=[TrendPoint(timestamp=m.timestamp, value=m.total_requests) for m in snapshots],
            error_trend=[TrendPoint(timestamp=m.timestamp, value=m.performance.error_rate) for m in snapshots],
            alert_trend=[TrendPoint(timestamp=m.timestamp, value=m.active_alerts) for m in snapshots],
        )

    def assess_system_health(self, metrics: SecurityMetrics) -> SystemHealth:
        health = SystemHealth()
        performance = metrics.performance

        def flag(status: HealthStatus, issue: str, recommendation: str):
            health.issues.append(issue)
            health.recommendations.append(recommendation)
            if status == HealthStatus.critical or health.status == HealthStatus.healthy:
                health.status = status

        critical, warning = ERROR_RATE_BANDS
        if performance.error_rate > critical:
            flag(
                HealthStatus.critical,
                f"High error rate: {performance.error_rate * 100:.2f}%",
                "Investigate recent application changes or infrastructure issues",
            )
        elif performance.error_rate > warning:
            flag(
                HealthStatus.warning,
                f"Elevated error rate: {performance.error_rate * 100:.2f}%",
                "Monitor error trends and investigate if continues to rise",
            )

        critical, warning = RESPONSE_TIME_BANDS_MS
        if performance.average_response_time > critical:
            flag(
                HealthStatus.critical,
                f"Very slow response times: {performance.average_response_time:.0f}ms average",
                "Check database performance and server resources",
            )
        elif performance.average_response_time > warning:
            flag(
                HealthStatus.warning,
                f"Slow response times: {performance.average_response_time:.0f}ms average",
                "Consider optimizing database queries and caching",
            )

        critical, warning = SUSPICIOUS_ACTIVITY_BANDS
        if metrics.suspicious_activities > critical:
            flag(
                HealthStatus.critical,
                f"High number of suspicious activities: {metrics.suspicious_activities}",
                "Review security alerts and consider additional rate limiting",
            )
        elif metrics.suspicious_activities > warning:
            flag(
                HealthStatus.warning,
                f"Elevated suspicious activities: {metrics.suspicious_activities}",
                "Monitor security patterns and review access logs",
            )

        if metrics.active_alerts > ACTIVE_ALERTS_WARNING:
            flag(
                HealthStatus.warning,
                f"Many active security alerts: {metrics.active_alerts}",
                "Review and resolve active security alerts",
            )

        return health

    async def get_security_dashboard(self) -> SecurityDashboard:
        metrics = await self.collect_security_metrics()
        trends = await self.get_security_trends()
        active_alerts = await self.alerts.get_active_alerts(DASHBOARD_ALERTS)
        return SecurityDashboard(
            current_metrics=metrics,
            trends=trends,
            active_alerts=active_alerts,
            system_health=self.assess_system_health(metrics),
        )

    async def cleanup_old_metrics(self) -> int:
        cutoff = self.clock() - timedelta(days=self.settings.metrics_retention_days)
        async with self.uow:
            try:
                deleted = await self.uow.metrics.delete_older_than(cutoff)
            except Exception:
                logger.error("Failed to clean up old security metrics", exc_info=True)
                return 0

        logger.info(f"Old security metrics cleaned up: deleted={deleted}")
        return deleted

    def _build_metrics(
        self, now: datetime, events: List[AuditEvent], active_alerts: List[SecurityAlert]
    ) -> SecurityMetrics:
        total = len(events)
        failed = sum(1 for e in events if e.outcome == EventOutcome.failure)
        blocked = sum(1 for e in events if e.outcome == EventOutcome.denied)
        suspicious = sum(
            1
            for e in events
            if e.event_metadata.get("suspicious_activity")
            or e.risk_score > self.settings.risk_score_threshold
        )

        response_times = [
            e.event_metadata["response_time"]
            for e in events
            if isinstance(e.event_metadata.get("response_time"), (int, float))
        ]
        average_response_time = sum(response_times) / len(response_times) if response_times else 0.0
        slow_requests = sum(
            1 for t in response_times if t > self.settings.response_time_threshold_ms
        )

        ip_totals = {}
        for event in events:
            score, count = ip_totals.get(event.source.ip, (0, 0))
            ip_totals[event.source.ip] = (score + event.risk_score, count + 1)
        top_risky_ips = sorted(
            (
                IpRisk(ip=ip, risk_score=round(score / count), request_count=count)
                for ip, (score, count) in ip_totals.items()
            ),
            key=lambda r: r.risk_score,
            reverse=True,
        )[:TOP_RISKY_IPS]

        alert_counts = Counter(a.type for a in active_alerts)

        return SecurityMetrics(
            timestamp=now,
            total_requests=total,
            failed_requests=failed,
            blocked_requests=blocked,
            suspicious_activities=suspicious,
            active_alerts=len(active_alerts),
            unique_ips=len(ip_totals),
            top_risky_ips=top_risky_ips,
            alerts_by_type=[
                AlertTypeCount(type=t, count=c) for t, c in alert_counts.most_common()
            ],
            performance=PerformanceMetrics(
                average_response_time=average_response_time,
                slow_requests=slow_requests,
                error_rate=failed / total if total else 0.0,
            ),
        )
