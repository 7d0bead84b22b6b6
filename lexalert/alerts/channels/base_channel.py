"""
Base escalation channel interface.
"""

from abc import ABC, abstractmethod
from typing import Dict

from lexalert.alerts.storage.base_storage import Alert


class BaseChannel(ABC):
    """Abstract base class for escalation channels"""

    @abstractmethod
    def send(self, alert: Alert) -> bool:
        """
        Send alert notification.

        Args:
            alert: Alert to escalate

        Returns:
            True if notification sent successfully, False otherwise
        """
        pass

    def is_available(self) -> bool:
        """Whether the channel may deliver right now"""
        return True

    def format_message(self, alert: Alert) -> Dict[str, str]:
        """
        Format alert summary and body.

        Args:
            alert: Alert to format

        Returns:
            Dict with 'summary' and 'description' keys
        """
        return {
            'summary': f"[{alert.severity.upper()}] {alert.title}",
            'description': alert.description,
        }
