"""Prometheus HTTP exporter"""

from typing import List

from prometheus_client import start_http_server, Gauge, Counter
from prometheus_client.core import CollectorRegistry

from lexalert.alerts.alert_evaluator import EvaluationSummary
from lexalert.alerts.storage.base_storage import Alert
from lexalert.utils.logger import get_logger


class PrometheusExporter:
    """Prometheus metrics describing the alerting engine itself"""

    def __init__(self, config):
        """
        Initialize Prometheus exporter

        Args:
            config: Configuration dictionary
        """
        self.config = config
        self.logger = get_logger(self.__class__.__name__)

        self.host = config.get('prometheus', {}).get('host', '0.0.0.0')
        self.port = config.get('prometheus', {}).get('port', 9108)

        self.registry = CollectorRegistry()
        self.running = False

        self._setup_engine_metrics()

    def _setup_engine_metrics(self):
        """Setup engine self-monitoring metrics"""
        self.alerts_fired = Counter(
            'lexalert_alerts_fired_total',
            'Total number of alerts created',
            ['rule_id', 'severity'],
            registry=self.registry
        )

        self.alerts_resolved = Counter(
            'lexalert_alerts_resolved_total',
            'Total number of alerts resolved',
            registry=self.registry
        )

        self.active_alerts = Gauge(
            'lexalert_active_alerts',
            'Unresolved alerts',
            registry=self.registry
        )

        self.critical_alerts = Gauge(
            'lexalert_critical_alerts',
            'Unresolved critical alerts',
            registry=self.registry
        )

        self.rule_errors = Counter(
            'lexalert_rule_evaluation_errors_total',
            'Rule evaluations that failed',
            ['rule_id'],
            registry=self.registry
        )

        self.evaluation_duration = Gauge(
            'lexalert_evaluation_duration_seconds',
            'Duration of the last evaluation tick in seconds',
            registry=self.registry
        )

        self.enabled_rules = Gauge(
            'lexalert_enabled_rules',
            'Enabled rules in the last evaluation tick',
            registry=self.registry
        )

    def start(self):
        """Start HTTP server"""
        try:
            self.logger.info(f"Starting Prometheus HTTP server on {self.host}:{self.port}")
            start_http_server(self.port, addr=self.host, registry=self.registry)
            self.running = True
            self.logger.info(f"Metrics available at http://{self.host}:{self.port}/metrics")
        except Exception as e:
            self.logger.error(f"Failed to start Prometheus HTTP server: {e}")
            raise

    def stop(self):
        """Stop HTTP server"""
        self.running = False
        self.logger.info("Prometheus HTTP server stopped")

    def record_evaluation(self, summary: EvaluationSummary):
        """
        Update counters from an evaluation tick

        Args:
            summary: Result of AlertEvaluator.evaluate_all_rules
        """
        for alert in summary.fired:
            self.alerts_fired.labels(
                rule_id=alert.data.get('rule_id', ''),
                severity=alert.severity
            ).inc()

        for rule_id in summary.errors:
            self.rule_errors.labels(rule_id=rule_id).inc()

        self.evaluation_duration.set(summary.duration_seconds)
        self.enabled_rules.set(summary.evaluated)

    def record_resolution(self):
        self.alerts_resolved.inc()

    def update_alert_gauges(self, alerts: List[Alert]):
        """Alert store subscriber keeping the gauges current"""
        active = [a for a in alerts if not a.resolved]
        self.active_alerts.set(len(active))
        self.critical_alerts.set(sum(1 for a in active if a.severity == 'critical'))
