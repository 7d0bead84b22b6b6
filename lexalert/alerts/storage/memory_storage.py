"""
In-memory alert store.
"""

import logging
import threading
from dataclasses import replace
from datetime import datetime
from typing import Callable, Dict, List, Optional

from lexalert.alerts.alert_rule import Severity
from lexalert.alerts.notifications import NotificationDispatcher
from lexalert.alerts.storage.base_storage import BaseStorage, Alert, AlertListener

logger = logging.getLogger(__name__)


class AlertStore(BaseStorage):
    """
    Append-only alert log, most recent first.

    Alerts are never removed; resolution replaces the entry in place. Every
    change is pushed to the dispatcher as a full snapshot while the store lock
    is held, so subscribers observe changes in the order they happened.
    """

    def __init__(self, dispatcher: Optional[NotificationDispatcher] = None,
                 clock: Callable[[], datetime] = datetime.now):
        """
        Initialize alert store.

        Args:
            dispatcher: Fan-out target for state changes
            clock: Source of resolution timestamps
        """
        self.dispatcher = dispatcher or NotificationDispatcher()
        self.clock = clock

        self._lock = threading.RLock()
        self._alerts: List[Alert] = []
        self._index: Dict[str, int] = {}

    def add_alert(self, alert: Alert) -> None:
        """
        Insert alert at the head of the log and notify subscribers.

        Critical alerts are escalated after fan-out; escalation problems never
        reach the caller.

        Raises:
            ValueError: If an alert with the same id is already stored
        """
        with self._lock:
            if alert.id in self._index:
                raise ValueError(f"Alert already stored: {alert.id}")

            self._alerts.insert(0, alert)
            self._reindex()
            self.dispatcher.publish(list(self._alerts))

        if alert.severity == Severity.CRITICAL:
            logger.warning(f"Critical alert stored: {alert.id} ({alert.title})")
            self.dispatcher.escalate(alert)
        else:
            logger.info(f"Alert stored: {alert.id} ({alert.title})")

    def resolve_alert(self, alert_id: str, resolved_by: Optional[str] = None) -> bool:
        """
        Resolve alert by id.

        An unknown id is a no-op, which tolerates callers racing with cleanup.
        Resolving again overwrites the envelope with the latest resolver.

        Returns:
            True if the alert was found
        """
        with self._lock:
            position = self._index.get(alert_id)
            if position is None:
                logger.debug(f"Resolve ignored, alert not found: {alert_id}")
                return False

            self._alerts[position] = replace(
                self._alerts[position],
                resolved=True,
                resolved_at=self.clock(),
                resolved_by=resolved_by,
            )
            self.dispatcher.publish(list(self._alerts))

        logger.info(f"Alert resolved: {alert_id} (by {resolved_by or 'unknown'})")
        return True

    def get_alert(self, alert_id: str) -> Optional[Alert]:
        with self._lock:
            position = self._index.get(alert_id)
            return self._alerts[position] if position is not None else None

    def get_alerts(self, type: Optional[str] = None, severity: Optional[str] = None,
                   resolved: Optional[bool] = None) -> List[Alert]:
        with self._lock:
            alerts = list(self._alerts)

        if type is not None:
            alerts = [a for a in alerts if a.type == type]
        if severity is not None:
            alerts = [a for a in alerts if a.severity == severity]
        if resolved is not None:
            alerts = [a for a in alerts if a.resolved == resolved]

        return alerts

    def subscribe(self, listener: AlertListener) -> Callable[[], None]:
        with self._lock:
            return self.dispatcher.subscribe(listener, list(self._alerts))

    def _reindex(self) -> None:
        # Head insertion shifts every position
        self._index = {alert.id: i for i, alert in enumerate(self._alerts)}

    def __len__(self) -> int:
        with self._lock:
            return len(self._alerts)
