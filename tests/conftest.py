"""Shared fixtures"""

from datetime import datetime
from typing import List

import pytest

from lexalert.alerts.channels.base_channel import BaseChannel
from lexalert.alerts.storage.base_storage import Alert
from lexalert.exceptions import MetricQueryError
from lexalert.metrics.analytics_store import AnalyticsStore
from lexalert.metrics.base import MetricSource


class StaticMetricSource(MetricSource):
    """Metric source answering from a dict; listed metrics fail"""

    def __init__(self):
        self.values = {}
        self.failing = set()
        self.calls = []

    def get_value(self, metric_name, window_start, window_end):
        self.calls.append((metric_name, window_start, window_end))
        if metric_name in self.failing:
            raise MetricQueryError(metric_name, "backend unavailable")
        return self.values.get(metric_name)


class RecordingChannel(BaseChannel):
    """Escalation channel that remembers what it was asked to send"""

    def __init__(self, available=True, result=True, error=None):
        self.available = available
        self.result = result
        self.error = error
        self.sent: List[Alert] = []

    def is_available(self):
        return self.available

    def send(self, alert):
        if self.error:
            raise self.error
        self.sent.append(alert)
        return self.result


@pytest.fixture
def now():
    return datetime(2024, 3, 1, 12, 0, 0)


@pytest.fixture
def metric_source():
    return StaticMetricSource()


@pytest.fixture
def recording_channel():
    return RecordingChannel()


@pytest.fixture
def make_channel():
    return RecordingChannel


@pytest.fixture
def make_alert(now):
    """Factory for alerts with sensible defaults"""
    def _make(alert_id='rule-1', severity='medium', type='performance', **overrides):
        fields = dict(
            id=alert_id,
            type=type,
            severity=severity,
            title='Test Rule',
            description='Test Rule: 10.00ms (threshold: 5ms)',
            threshold=5.0,
            current_value=10.0,
            timestamp=now,
            data={'rule_id': 'rule', 'metric': 'm', 'threshold': 5.0, 'condition': 'greater_than'},
        )
        fields.update(overrides)
        return Alert(**fields)
    return _make


@pytest.fixture
def analytics_store(tmp_path):
    """Temporary SQLite analytics store"""
    store = AnalyticsStore({'sqlite_path': str(tmp_path / 'analytics.db')})
    yield store
    store.close()
