"""
Custom webhook escalation channel.
"""

import logging
from datetime import datetime
from typing import Dict

import requests

from lexalert.alerts.channels.base_channel import BaseChannel
from lexalert.alerts.storage.base_storage import Alert

logger = logging.getLogger(__name__)


class WebhookChannel(BaseChannel):
    """Custom webhook notification channel"""

    def __init__(self, config: Dict):
        """
        Initialize webhook channel.

        Args:
            config: Webhook configuration dict with url, method, headers
        """
        self.url = config['url']
        self.method = config.get('method', 'POST').upper()
        self.headers = dict(config.get('headers', {}))
        self.timeout = config.get('timeout', 10)

        if self.method not in ('POST', 'PUT'):
            raise ValueError(f"Unsupported HTTP method: {self.method}")

        if 'Content-Type' not in self.headers:
            self.headers['Content-Type'] = 'application/json'

        logger.info(f"Webhook channel initialized (url: {self.url}, method: {self.method})")

    def is_available(self) -> bool:
        return bool(self.url)

    def send(self, alert: Alert) -> bool:
        """
        Send webhook notification.

        Args:
            alert: Alert to escalate

        Returns:
            True if sent successfully
        """
        try:
            payload = self._create_webhook_payload(alert, self.format_message(alert))

            response = requests.request(
                self.method,
                self.url,
                json=payload,
                headers=self.headers,
                timeout=self.timeout
            )

            response.raise_for_status()

            logger.info(f"Webhook notification sent for alert: {alert.id}")
            return True

        except requests.exceptions.RequestException as e:
            logger.error(f"Failed to send webhook notification for alert {alert.id}: {e}")
            return False

    def _create_webhook_payload(self, alert: Alert, message_content: Dict[str, str]) -> Dict:
        """Create webhook payload"""
        return {
            "alert": alert.to_dict(),
            "status": "firing",
            "sent_at": datetime.now().isoformat(),
            "annotations": {
                "summary": message_content['summary'],
                "description": message_content['description'],
            }
        }
