"""
Slack escalation channel using incoming webhooks.
"""

import logging
from typing import Dict

import requests

from lexalert.alerts.channels.base_channel import BaseChannel
from lexalert.alerts.storage.base_storage import Alert

logger = logging.getLogger(__name__)

SEVERITY_COLORS = {
    'low': '#0066cc',
    'medium': '#ffcc00',
    'high': '#ff9900',
    'critical': '#cc0000',
}


class SlackChannel(BaseChannel):
    """Slack notification channel via webhooks"""

    def __init__(self, config: Dict):
        """
        Initialize Slack channel.

        Args:
            config: Slack configuration dict with webhook_url
        """
        self.webhook_url = config['webhook_url']
        self.channel = config.get('channel', '#alerts')
        self.username = config.get('username', 'lexalert')
        self.icon_emoji = config.get('icon_emoji', ':rotating_light:')
        self.timeout = config.get('timeout', 10)

        logger.info(f"Slack channel initialized (channel: {self.channel})")

    def is_available(self) -> bool:
        return bool(self.webhook_url)

    def send(self, alert: Alert) -> bool:
        """
        Send Slack notification.

        Args:
            alert: Alert to escalate

        Returns:
            True if sent successfully
        """
        try:
            message_content = self.format_message(alert)
            payload = self._create_slack_payload(alert, message_content)

            response = requests.post(
                self.webhook_url,
                json=payload,
                headers={'Content-Type': 'application/json'},
                timeout=self.timeout
            )

            response.raise_for_status()

            logger.info(f"Slack notification sent for alert: {alert.id}")
            return True

        except requests.exceptions.RequestException as e:
            logger.error(f"Failed to send Slack notification for alert {alert.id}: {e}")
            return False

    def _create_slack_payload(self, alert: Alert, message_content: Dict[str, str]) -> Dict:
        """Create Slack webhook payload"""
        color = SEVERITY_COLORS.get(alert.severity, '#666666')

        fields = [
            {
                "title": "Severity",
                "value": alert.severity.upper(),
                "short": True
            },
            {
                "title": "Current Value",
                "value": f"{alert.current_value:.2f}",
                "short": True
            },
            {
                "title": "Threshold",
                "value": f"{alert.data.get('condition', '')} {alert.threshold:g}".strip(),
                "short": True
            },
            {
                "title": "Metric",
                "value": alert.data.get('metric', ''),
                "short": True
            },
        ]

        attachment = {
            "color": color,
            "title": message_content['summary'],
            "text": message_content['description'],
            "fields": fields,
            "footer": f"lexalert | {alert.id}",
            "ts": int(alert.timestamp.timestamp()),
        }

        text = ""
        if alert.severity == 'critical':
            text = "<!channel> Critical Alert"

        return {
            "channel": self.channel,
            "username": self.username,
            "icon_emoji": self.icon_emoji,
            "text": text,
            "attachments": [attachment]
        }
