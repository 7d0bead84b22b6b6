"""
Exception types raised by lexalert.
"""

from typing import Optional, Dict, Any


class AlertingError(Exception):
    """
    Base exception for the alerting engine.

    All custom exceptions should inherit from this class.
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize the exception.

        Args:
            message: Human-readable error message
            error_code: Machine-readable error code
            details: Additional error context
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary representation."""
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details
        }


class DuplicateRuleError(AlertingError):
    """Raised when a rule id is already registered."""

    def __init__(self, rule_id: str):
        super().__init__(
            message=f"Alert rule already registered: {rule_id}",
            error_code="DUPLICATE_RULE",
            details={"rule_id": rule_id}
        )
        self.rule_id = rule_id


class MetricQueryError(AlertingError):
    """
    Raised when a metric source cannot answer a query.

    This covers backend and transport faults. A window with no samples is
    not an error and is reported as ``None`` by the metric source.
    """

    def __init__(self, metric: str, message: str):
        super().__init__(
            message=f"Failed to query metric {metric}: {message}",
            error_code="METRIC_QUERY_ERROR",
            details={"metric": metric}
        )
        self.metric = metric
