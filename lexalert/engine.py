"""Alerting engine orchestration"""

import threading
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from lexalert.alerts.alert_evaluator import AlertEvaluator, EvaluationSummary
from lexalert.alerts.alert_rule import AlertRule, load_alert_rules
from lexalert.alerts.channels import build_channels
from lexalert.alerts.cooldown import CooldownTracker
from lexalert.alerts.notifications import NotificationDispatcher
from lexalert.alerts.rule_registry import RuleRegistry
from lexalert.alerts.storage.base_storage import Alert, AlertListener
from lexalert.alerts.storage.memory_storage import AlertStore
from lexalert.config.settings import get_default_config
from lexalert.exporters.prometheus_exporter import PrometheusExporter
from lexalert.metrics.base import MetricSource
from lexalert.utils.logger import get_logger


class AlertingEngine:
    """
    Owns the rule registry, cooldowns, alert store and evaluator thread.

    All management calls are safe from any thread; they serialize with an
    in-flight evaluation tick through the locks of the owned components.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None,
                 metric_source: Optional[MetricSource] = None,
                 clock: Callable[[], datetime] = datetime.now):
        """
        Initialize engine

        Args:
            config: Configuration dictionary; defaults to get_default_config()
            metric_source: Source of metric values; built from the
                ``metrics`` config section when omitted
            clock: Source of the current time
        """
        self.config = config or get_default_config()
        self.logger = get_logger(self.__class__.__name__)
        self.clock = clock

        alerting = self.config['alerting']
        self.interval = alerting.get('evaluation_interval', 30)

        self.metric_source = metric_source or self._init_metric_source()

        self.registry = RuleRegistry(seed_defaults=alerting.get('load_builtin_rules', True))
        self._load_rule_file(alerting.get('alert_rules_file'))

        self.dispatcher = NotificationDispatcher(build_channels(alerting.get('channels', {})))
        self.store = AlertStore(self.dispatcher, clock=clock)
        self.cooldowns = CooldownTracker()

        self.evaluator = AlertEvaluator(
            self.registry,
            self.metric_source,
            self.store,
            cooldowns=self.cooldowns,
            window_minutes=alerting.get('window_minutes', 60),
            query_timeout=alerting.get('metric_query_timeout'),
            clock=clock,
        )

        self.exporter = None
        if self.config.get('prometheus', {}).get('enabled', False):
            self.exporter = PrometheusExporter(self.config)
            self.store.subscribe(self.exporter.update_alert_gauges)

        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

        self.logger.info(f"Alerting engine initialized with {len(self.registry)} rules")

    def _init_metric_source(self) -> MetricSource:
        """Build the configured metric source"""
        from lexalert.metrics.aggregating_source import AggregatingMetricSource
        from lexalert.metrics.analytics_store import AnalyticsStore

        return AggregatingMetricSource(AnalyticsStore(self.config['metrics']))

    def _load_rule_file(self, rules_file: Optional[str]):
        """Register file rules; ids that already exist override the built-in fields"""
        if not rules_file:
            return

        for rule in load_alert_rules(rules_file):
            if rule.id in self.registry:
                changes = vars(rule).copy()
                changes.pop('id')
                self.registry.update(rule.id, **changes)
            else:
                self.registry.add(rule)

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self):
        """Start the evaluator thread"""
        if self.running:
            self.logger.warning("Alerting engine already running")
            return

        self.logger.info("Starting alerting engine...")
        self._stop_event.clear()

        if self.exporter:
            self.exporter.start()

        self._thread = threading.Thread(
            target=self._run_evaluator_loop,
            daemon=True,
            name="alert-evaluator"
        )
        self._thread.start()
        self.logger.info(f"Started alert evaluator thread (interval: {self.interval}s)")

    def stop(self, timeout: Optional[float] = None):
        """
        Stop the evaluator thread

        A tick already in progress finishes before the thread exits.
        """
        if not self.running:
            return

        self.logger.info("Stopping alerting engine...")
        self._stop_event.set()
        self._thread.join(timeout=timeout)

        if self.exporter:
            self.exporter.stop()

        self.logger.info("Alerting engine stopped")

    def join(self, timeout: Optional[float] = None):
        """Wait for the evaluator thread to exit"""
        if self._thread is not None:
            self._thread.join(timeout=timeout)

    def close(self):
        """Stop and release the metric source"""
        self.stop()
        self.evaluator.shutdown()
        self.metric_source.close()

    def _run_evaluator_loop(self):
        """Run evaluator loop until stopped"""
        self.logger.debug(f"Starting alert evaluator loop (interval: {self.interval}s)")

        while not self._stop_event.is_set():
            try:
                self.run_once()
            except Exception as e:
                self.logger.error(f"Error in alert evaluator loop: {e}", exc_info=True)

            self._stop_event.wait(self.interval)

    def run_once(self, now: Optional[datetime] = None) -> EvaluationSummary:
        """Run a single evaluation tick"""
        summary = self.evaluator.evaluate_all_rules(now)
        if self.exporter:
            self.exporter.record_evaluation(summary)
        return summary

    # Management surface

    def add_rule(self, rule: AlertRule) -> None:
        self.registry.add(rule)

    def update_rule(self, rule_id: str, **changes) -> bool:
        return self.registry.update(rule_id, **changes)

    def remove_rule(self, rule_id: str) -> bool:
        removed = self.registry.remove(rule_id)
        if removed:
            self.cooldowns.forget(rule_id)
        return removed

    def get_rule(self, rule_id: str) -> Optional[AlertRule]:
        return self.registry.get(rule_id)

    def list_rules(self) -> List[AlertRule]:
        return self.registry.list()

    def resolve_alert(self, alert_id: str, resolved_by: Optional[str] = None) -> bool:
        resolved = self.store.resolve_alert(alert_id, resolved_by)
        if resolved and self.exporter:
            self.exporter.record_resolution()
        return resolved

    def get_alerts(self, type: Optional[str] = None, severity: Optional[str] = None,
                   resolved: Optional[bool] = None) -> List[Alert]:
        return self.store.get_alerts(type=type, severity=severity, resolved=resolved)

    def get_active_alerts_count(self) -> int:
        return self.store.get_active_alerts_count()

    def get_critical_alerts_count(self) -> int:
        return self.store.get_critical_alerts_count()

    def subscribe(self, listener: AlertListener) -> Callable[[], None]:
        """Register a listener; it is called at once with the current alerts"""
        return self.store.subscribe(listener)
