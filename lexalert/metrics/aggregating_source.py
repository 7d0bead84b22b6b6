"""
Metric source that aggregates raw analytics records on demand.
"""

import logging
import threading
from datetime import datetime
from typing import Dict, List, Optional

from lexalert.exceptions import MetricQueryError
from lexalert.metrics.aggregators import Aggregator, default_aggregators
from lexalert.metrics.analytics_store import AnalyticsStore
from lexalert.metrics.base import MetricSource

logger = logging.getLogger(__name__)


class AggregatingMetricSource(MetricSource):
    """Dispatches each metric name to its registered aggregator"""

    def __init__(self, store: AnalyticsStore, aggregators: Optional[Dict[str, Aggregator]] = None):
        """
        Initialize metric source.

        Args:
            store: Raw analytics records
            aggregators: Metric name to aggregator; defaults to the built-in set
        """
        self.store = store
        self._lock = threading.Lock()
        self._aggregators = dict(aggregators) if aggregators is not None else default_aggregators()

    def register(self, metric_name: str, aggregator: Aggregator) -> None:
        """Add or replace the aggregator for a metric"""
        with self._lock:
            self._aggregators[metric_name] = aggregator
        logger.info(f"Registered aggregator for metric: {metric_name}")

    def metric_names(self) -> List[str]:
        with self._lock:
            return sorted(self._aggregators)

    def get_value(self, metric_name: str, window_start: datetime,
                  window_end: datetime) -> Optional[float]:
        with self._lock:
            aggregator = self._aggregators.get(metric_name)

        if aggregator is None:
            logger.debug(f"No aggregator registered for metric {metric_name}")
            return None

        try:
            value = aggregator(self.store, window_start, window_end)
        except MetricQueryError:
            raise
        except Exception as e:
            raise MetricQueryError(metric_name, str(e)) from e

        return float(value) if value is not None else None

    def close(self) -> None:
        self.store.close()
