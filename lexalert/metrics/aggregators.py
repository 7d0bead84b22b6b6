"""
Per-metric aggregation functions over the analytics store.

Each aggregator takes ``(store, window_start, window_end)`` and returns a float
or None for "no data".
"""

from datetime import datetime
from functools import partial
from typing import Callable, Dict, Optional

from lexalert.metrics.analytics_store import AnalyticsStore, PERFORMANCE_METRICS
from lexalert.utils.helpers import mean, safe_divide

Aggregator = Callable[[AnalyticsStore, datetime, datetime], Optional[float]]

METRIC_UNITS = {
    'largest_contentful_paint': 'ms',
    'first_input_delay': 'ms',
    'avg_session_duration': 'ms',
    'error_rate': '%',
    'cumulative_layout_shift': '',
}


def metric_unit(metric: str) -> str:
    """Display unit for a metric; unknown metrics are unitless"""
    return METRIC_UNITS.get(metric, '')


def performance_mean(metric: str, store: AnalyticsStore, start: datetime,
                     end: datetime) -> Optional[float]:
    return mean(store.performance_samples(metric, start, end))


def error_rate(store: AnalyticsStore, start: datetime, end: datetime) -> float:
    """
    Errors per hundred events.

    The event count is floored at 1, so a window with no traffic reads as 0
    (or as the raw error count times 100 when errors arrive without events).
    """
    errors = store.count_errors(start, end)
    events = max(store.count_events(start, end), 1)
    return safe_divide(errors, events) * 100


def avg_session_duration(store: AnalyticsStore, start: datetime,
                         end: datetime) -> Optional[float]:
    # Sessions still in progress have no end_time and are excluded
    return mean(store.completed_session_durations(start, end))


def default_aggregators() -> Dict[str, Aggregator]:
    aggregators: Dict[str, Aggregator] = {
        metric: partial(performance_mean, metric) for metric in PERFORMANCE_METRICS
    }
    aggregators['error_rate'] = error_rate
    aggregators['avg_session_duration'] = avg_session_duration
    return aggregators
