"""
Alert evaluator for checking rule conditions against metrics.
"""

import logging
import operator
import threading
from concurrent.futures import Future, ThreadPoolExecutor, TimeoutError as FutureTimeoutError
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional

from lexalert.alerts.alert_rule import AlertRule, Condition
from lexalert.alerts.cooldown import CooldownTracker
from lexalert.alerts.rule_registry import RuleRegistry
from lexalert.alerts.storage.base_storage import Alert, BaseStorage
from lexalert.exceptions import MetricQueryError
from lexalert.metrics.aggregators import metric_unit
from lexalert.metrics.base import MetricSource
from lexalert.utils.helpers import format_number, timestamp_millis

logger = logging.getLogger(__name__)

CONDITIONS = {
    Condition.GREATER_THAN: operator.gt,
    Condition.LESS_THAN: operator.lt,
    Condition.EQUALS: operator.eq,
    Condition.NOT_EQUALS: operator.ne,
}


@dataclass
class EvaluationSummary:
    """Outcome of one evaluation tick"""
    started_at: datetime
    evaluated: int = 0
    fired: List[Alert] = field(default_factory=list)
    skipped_cooldown: List[str] = field(default_factory=list)
    no_data: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    duration_seconds: float = 0.0


def evaluate_condition(condition: str, value: float, threshold: float) -> bool:
    """
    Apply a rule condition.

    Args:
        condition: One of the Condition constants
        value: Current metric value
        threshold: Rule threshold

    Returns:
        True if condition is met, False otherwise (including unknown conditions)
    """
    compare = CONDITIONS.get(condition)
    if compare is None:
        logger.error(f"Unknown condition: {condition}")
        return False
    return compare(value, threshold)


def describe(rule: AlertRule, value: float) -> str:
    """Human description, e.g. 'High LCP: 4240.00ms (threshold: 4000ms)'"""
    unit = metric_unit(rule.metric)
    return f"{rule.name}: {value:.2f}{unit} (threshold: {format_number(rule.threshold)}{unit})"


class AlertEvaluator:
    """Evaluates alert rules against current metrics"""

    def __init__(self, registry: RuleRegistry, metric_source: MetricSource,
                 store: BaseStorage, cooldowns: Optional[CooldownTracker] = None,
                 window_minutes: float = 60, query_timeout: Optional[float] = None,
                 clock: Callable[[], datetime] = datetime.now):
        """
        Initialize alert evaluator.

        Args:
            registry: Rules to evaluate
            metric_source: Source of aggregated metric values
            store: Receives created alerts
            cooldowns: Per-rule last-fired tracker
            window_minutes: Length of the trailing metric window
            query_timeout: Seconds allowed per metric query; None waits forever
            clock: Source of evaluation instants
        """
        self.registry = registry
        self.metric_source = metric_source
        self.store = store
        self.cooldowns = cooldowns or CooldownTracker()
        self.window = timedelta(minutes=window_minutes)
        self.query_timeout = query_timeout or None
        self.clock = clock

        self._inflight: Dict[str, Future] = {}
        self._inflight_lock = threading.Lock()
        self._executor = None
        if self.query_timeout:
            self._executor = ThreadPoolExecutor(max_workers=4, thread_name_prefix='metric-query')

        logger.info(f"Alert evaluator initialized (window: {window_minutes}m, "
                    f"query timeout: {self.query_timeout}s)")

    def evaluate_all_rules(self, now: Optional[datetime] = None) -> EvaluationSummary:
        """
        Evaluate every enabled rule once.

        A failing rule is logged and skipped; the remaining rules still run.

        Args:
            now: Evaluation instant; defaults to the clock

        Returns:
            Summary of the tick
        """
        now = now or self.clock()
        summary = EvaluationSummary(started_at=now)
        started = datetime.now()

        for rule in self.registry.enabled_rules():
            summary.evaluated += 1
            try:
                self._evaluate_rule(rule, now, summary)
            except Exception as e:
                summary.errors.append(rule.id)
                logger.error(f"Error evaluating rule {rule.id}: {e}", exc_info=not isinstance(e, MetricQueryError))

        summary.duration_seconds = (datetime.now() - started).total_seconds()

        if summary.fired or summary.errors:
            logger.info(
                f"Evaluated {summary.evaluated} rules: {len(summary.fired)} fired, "
                f"{len(summary.errors)} failed"
            )
        return summary

    def _evaluate_rule(self, rule: AlertRule, now: datetime, summary: EvaluationSummary) -> None:
        """
        Evaluate a single rule.

        Args:
            rule: Alert rule to evaluate
            now: Evaluation instant
            summary: Tick summary to record the outcome in
        """
        if self.cooldowns.is_cooling_down(rule.id, rule.cooldown_minutes, now):
            logger.debug(f"Rule {rule.id} in cooldown")
            summary.skipped_cooldown.append(rule.id)
            return

        value = self._query(rule.metric, now - self.window, now)

        if value is None:
            logger.debug(f"No data for rule {rule.id} (metric: {rule.metric})")
            summary.no_data.append(rule.id)
            return

        if not evaluate_condition(rule.condition, value, rule.threshold):
            logger.debug(f"Rule {rule.id} condition not met: {value} {rule.condition} {rule.threshold}")
            return

        # Rules removed while this tick was running must not fire
        if rule.id not in self.registry:
            logger.debug(f"Rule {rule.id} removed during evaluation, not firing")
            return

        alert = self._build_alert(rule, value, now)
        self.store.add_alert(alert)
        self.cooldowns.mark_fired(rule.id, now)
        if rule.id not in self.registry:
            self.cooldowns.forget(rule.id)
        summary.fired.append(alert)

    def _query(self, metric: str, start: datetime, end: datetime) -> Optional[float]:
        if self._executor is None:
            return self.metric_source.get_value(metric, start, end)

        # A query that outlived its timeout keeps its worker; one per metric at most
        with self._inflight_lock:
            previous = self._inflight.get(metric)
            if previous is not None and not previous.done():
                raise MetricQueryError(metric, "previous query still running")
            future = self._executor.submit(self.metric_source.get_value, metric, start, end)
            self._inflight[metric] = future

        try:
            return future.result(timeout=self.query_timeout)
        except FutureTimeoutError:
            future.cancel()
            raise MetricQueryError(metric, f"timed out after {self.query_timeout}s")

    def _build_alert(self, rule: AlertRule, value: float, now: datetime) -> Alert:
        return Alert(
            id=f"{rule.id}-{timestamp_millis(now)}",
            type=rule.type,
            severity=rule.severity,
            title=rule.name,
            description=describe(rule, value),
            data={
                'rule_id': rule.id,
                'metric': rule.metric,
                'threshold': rule.threshold,
                'condition': rule.condition,
            },
            threshold=rule.threshold,
            current_value=value,
            timestamp=now,
        )

    def shutdown(self) -> None:
        """Stop the query worker pool without waiting for stuck queries"""
        if self._executor is not None:
            self._executor.shutdown(wait=False)
