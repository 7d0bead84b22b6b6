"""
Subscriber fan-out and escalation for alert state changes.
"""

import logging
import threading
from typing import Callable, Dict, List, Optional

from lexalert.alerts.alert_rule import Severity
from lexalert.alerts.channels.base_channel import BaseChannel
from lexalert.alerts.storage.base_storage import Alert, AlertListener

logger = logging.getLogger(__name__)


class NotificationDispatcher:
    """Delivers full alert snapshots to subscribers and escalates critical alerts"""

    def __init__(self, channels: Optional[Dict[str, BaseChannel]] = None):
        """
        Initialize dispatcher.

        Args:
            channels: Escalation channels keyed by name
        """
        self.channels = channels or {}
        self._lock = threading.RLock()
        self._listeners: List[AlertListener] = []

    def subscribe(self, listener: AlertListener, current_alerts: List[Alert]) -> Callable[[], None]:
        """
        Register listener and replay the current state to it.

        Args:
            listener: Called with the full alert list on every change
            current_alerts: State delivered immediately, may be empty

        Returns:
            Function that unsubscribes the listener; safe to call twice
        """
        with self._lock:
            self._listeners.append(listener)

        self._deliver(listener, list(current_alerts))

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def publish(self, alerts: List[Alert]) -> None:
        """Send the full, current alert list to every subscriber"""
        with self._lock:
            listeners = list(self._listeners)

        for listener in listeners:
            self._deliver(listener, list(alerts))

    def escalate(self, alert: Alert) -> None:
        """
        Best-effort external notification for critical alerts.

        Never raises. Non-critical alerts are ignored.
        """
        if alert.severity != Severity.CRITICAL:
            return

        if not self.channels:
            logger.debug(f"No escalation channels configured for {alert.id}")
            return

        for channel_name, channel in self.channels.items():
            try:
                if not channel.is_available():
                    logger.debug(f"Escalation channel {channel_name} not available")
                    continue

                if channel.send(alert):
                    logger.info(f"Escalated {alert.id} via {channel_name}")
                else:
                    logger.error(f"Failed to escalate {alert.id} via {channel_name}")
            except Exception as e:
                logger.error(f"Error escalating {alert.id} via {channel_name}: {e}")

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._listeners)

    def _deliver(self, listener: AlertListener, alerts: List[Alert]) -> None:
        try:
            listener(alerts)
        except Exception as e:
            logger.error(f"Alert subscriber {listener!r} failed: {e}", exc_info=True)
