"""
Metric source interface consumed by the alert evaluator.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional


class MetricSource(ABC):
    """Supplies one aggregated value for a named metric over a time window"""

    @abstractmethod
    def get_value(self, metric_name: str, window_start: datetime,
                  window_end: datetime) -> Optional[float]:
        """
        Aggregate a metric over a window.

        Args:
            metric_name: Name of the metric to read
            window_start: Inclusive window start
            window_end: Inclusive window end

        Returns:
            Aggregated value, or None when the window has no samples

        Raises:
            MetricQueryError: If the backend cannot be queried
        """
        pass

    def close(self) -> None:
        """Release backend resources"""
        pass
