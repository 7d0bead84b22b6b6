"""
Escalation channels for critical alerts.
"""

import logging
from typing import Dict

from lexalert.alerts.channels.base_channel import BaseChannel

logger = logging.getLogger(__name__)


def build_channels(channel_config: Dict) -> Dict[str, BaseChannel]:
    """
    Initialize escalation channels based on config.

    Args:
        channel_config: The ``alerting.channels`` config section

    Returns:
        Enabled channels keyed by name
    """
    channels = {}

    if channel_config.get('slack', {}).get('enabled', False):
        try:
            from lexalert.alerts.channels.slack_channel import SlackChannel
            channels['slack'] = SlackChannel(channel_config['slack'])
        except Exception as e:
            logger.error(f"Failed to initialize slack channel: {e}")

    if channel_config.get('webhook', {}).get('enabled', False):
        try:
            from lexalert.alerts.channels.webhook_channel import WebhookChannel
            channels['webhook'] = WebhookChannel(channel_config['webhook'])
        except Exception as e:
            logger.error(f"Failed to initialize webhook channel: {e}")

    if not channels:
        logger.warning("No escalation channels enabled")

    return channels


__all__ = ['BaseChannel', 'build_channels']
