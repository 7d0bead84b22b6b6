"""
Alert rules, evaluation, storage and notification.
"""

from lexalert.alerts.alert_rule import AlertRule, load_alert_rules, default_rules
from lexalert.alerts.rule_registry import RuleRegistry
from lexalert.alerts.cooldown import CooldownTracker
from lexalert.alerts.storage import Alert, AlertStore
from lexalert.alerts.notifications import NotificationDispatcher
from lexalert.alerts.alert_evaluator import AlertEvaluator, EvaluationSummary

__all__ = [
    'AlertRule',
    'load_alert_rules',
    'default_rules',
    'RuleRegistry',
    'CooldownTracker',
    'Alert',
    'AlertStore',
    'NotificationDispatcher',
    'AlertEvaluator',
    'EvaluationSummary',
]
