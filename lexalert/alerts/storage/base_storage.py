"""
Base storage interface for alerts.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Any, Callable, Dict, List, Mapping, Optional


@dataclass(frozen=True)
class Alert:
    """
    Alert instance data.

    Everything except the resolution envelope (``resolved``, ``resolved_at``,
    ``resolved_by``) is fixed at creation. Storage backends resolve an alert by
    swapping in a copy with the envelope filled.
    """
    id: str
    type: str
    severity: str
    title: str
    description: str
    threshold: float
    current_value: float
    timestamp: datetime
    data: Mapping[str, Any] = field(default_factory=dict)
    resolved: bool = False
    resolved_at: Optional[datetime] = None
    resolved_by: Optional[str] = None

    def __post_init__(self):
        # Snapshots share this object with every subscriber
        object.__setattr__(self, 'data', MappingProxyType(dict(self.data)))

    def to_dict(self) -> Dict:
        """Convert to a JSON-ready dictionary"""
        return {
            'id': self.id,
            'type': self.type,
            'severity': self.severity,
            'title': self.title,
            'description': self.description,
            'data': dict(self.data),
            'threshold': self.threshold,
            'current_value': self.current_value,
            'timestamp': self.timestamp.isoformat(),
            'resolved': self.resolved,
            'resolved_at': self.resolved_at.isoformat() if self.resolved_at else None,
            'resolved_by': self.resolved_by,
        }


AlertListener = Callable[[List[Alert]], None]


class BaseStorage(ABC):
    """Abstract base class for alert storage backends"""

    @abstractmethod
    def add_alert(self, alert: Alert) -> None:
        """
        Store a newly created alert.

        Args:
            alert: Alert instance to save
        """
        pass

    @abstractmethod
    def resolve_alert(self, alert_id: str, resolved_by: Optional[str] = None) -> bool:
        """
        Mark an alert as resolved.

        Args:
            alert_id: Alert identifier
            resolved_by: Who resolved it

        Returns:
            True if an unresolved alert was found and resolved
        """
        pass

    @abstractmethod
    def get_alert(self, alert_id: str) -> Optional[Alert]:
        """
        Retrieve alert by ID.

        Args:
            alert_id: Unique alert identifier

        Returns:
            Alert instance or None if not found
        """
        pass

    @abstractmethod
    def get_alerts(self, type: Optional[str] = None, severity: Optional[str] = None,
                   resolved: Optional[bool] = None) -> List[Alert]:
        """
        Get alerts, most recent first, matching every given filter.

        Args:
            type: Only alerts of this type
            severity: Only alerts of this severity
            resolved: Only resolved (True) or unresolved (False) alerts

        Returns:
            List of Alert instances
        """
        pass

    @abstractmethod
    def subscribe(self, listener: AlertListener) -> Callable[[], None]:
        """
        Register a change listener.

        The listener receives the full alert list right away and again on every
        change.

        Returns:
            Function that removes the listener
        """
        pass

    def get_active_alerts(self) -> List[Alert]:
        return self.get_alerts(resolved=False)

    def get_critical_alerts(self) -> List[Alert]:
        return self.get_alerts(severity='critical', resolved=False)

    def get_active_alerts_count(self) -> int:
        """Count unresolved alerts"""
        return len(self.get_active_alerts())

    def get_critical_alerts_count(self) -> int:
        """Count unresolved critical alerts"""
        return len(self.get_critical_alerts())
