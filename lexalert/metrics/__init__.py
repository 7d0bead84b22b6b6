"""
Metric sources for alert evaluation.
"""

from lexalert.metrics.base import MetricSource
from lexalert.metrics.analytics_store import AnalyticsStore
from lexalert.metrics.aggregating_source import AggregatingMetricSource

__all__ = ['MetricSource', 'AnalyticsStore', 'AggregatingMetricSource']
