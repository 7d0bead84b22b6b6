"""
Alert rule data structures and loading utilities.
"""

import yaml
from dataclasses import dataclass
from typing import List
import logging

logger = logging.getLogger(__name__)


class RuleType:
    """Rule category constants"""
    PERFORMANCE = 'performance'
    ERROR = 'error'
    SECURITY = 'security'
    BUSINESS = 'business'

    ALL = [PERFORMANCE, ERROR, SECURITY, BUSINESS]


class Severity:
    """Severity tier constants, lowest first"""
    LOW = 'low'
    MEDIUM = 'medium'
    HIGH = 'high'
    CRITICAL = 'critical'

    ALL = [LOW, MEDIUM, HIGH, CRITICAL]


class Condition:
    """Comparison constants"""
    GREATER_THAN = 'greater_than'
    LESS_THAN = 'less_than'
    EQUALS = 'equals'
    NOT_EQUALS = 'not_equals'

    ALL = [GREATER_THAN, LESS_THAN, EQUALS, NOT_EQUALS]


@dataclass
class AlertRule:
    """Alert rule definition"""
    id: str
    name: str
    type: str  # performance, error, security, business
    metric: str
    condition: str  # greater_than, less_than, equals, not_equals
    threshold: float
    severity: str  # low, medium, high, critical
    is_enabled: bool = True
    cooldown_minutes: float = 15

    def __post_init__(self):
        """Validate rule configuration"""
        if not self.id:
            raise ValueError("Rule id must not be empty")

        if not self.metric:
            raise ValueError(f"Rule {self.id} has no metric")

        if self.type not in RuleType.ALL:
            raise ValueError(f"Invalid type: {self.type}. Must be one of {RuleType.ALL}")

        if self.condition not in Condition.ALL:
            raise ValueError(f"Invalid condition: {self.condition}. Must be one of {Condition.ALL}")

        if self.severity not in Severity.ALL:
            raise ValueError(f"Invalid severity: {self.severity}. Must be one of {Severity.ALL}")

        if self.cooldown_minutes < 0:
            raise ValueError(f"cooldown_minutes must be >= 0, got {self.cooldown_minutes}")

        self.threshold = float(self.threshold)


def default_rules() -> List[AlertRule]:
    """Build the built-in rule set. Returns fresh instances on every call."""
    return [
        AlertRule(
            id='lcp-threshold',
            name='High LCP',
            type=RuleType.PERFORMANCE,
            metric='largest_contentful_paint',
            condition=Condition.GREATER_THAN,
            threshold=4000,
            severity=Severity.HIGH,
            cooldown_minutes=15,
        ),
        AlertRule(
            id='fid-threshold',
            name='High FID',
            type=RuleType.PERFORMANCE,
            metric='first_input_delay',
            condition=Condition.GREATER_THAN,
            threshold=300,
            severity=Severity.MEDIUM,
            cooldown_minutes=10,
        ),
        AlertRule(
            id='cls-threshold',
            name='High CLS',
            type=RuleType.PERFORMANCE,
            metric='cumulative_layout_shift',
            condition=Condition.GREATER_THAN,
            threshold=0.25,
            severity=Severity.MEDIUM,
            cooldown_minutes=10,
        ),
        AlertRule(
            id='error-rate-threshold',
            name='High Error Rate',
            type=RuleType.ERROR,
            metric='error_rate',
            condition=Condition.GREATER_THAN,
            threshold=5,
            severity=Severity.CRITICAL,
            cooldown_minutes=5,
        ),
        AlertRule(
            id='session-duration-low',
            name='Low Session Duration',
            type=RuleType.BUSINESS,
            metric='avg_session_duration',
            condition=Condition.LESS_THAN,
            threshold=60000,
            severity=Severity.LOW,
            cooldown_minutes=30,
        ),
    ]


def load_alert_rules(rules_file: str) -> List[AlertRule]:
    """
    Load alert rules from YAML file.

    Args:
        rules_file: Path to YAML configuration file

    Returns:
        List of AlertRule objects

    Raises:
        FileNotFoundError: If rules file doesn't exist
        ValueError: If rules file has invalid format
    """
    try:
        with open(rules_file, 'r') as f:
            config = yaml.safe_load(f)

        if not config or 'alert_rules' not in config:
            logger.warning(f"No alert_rules found in {rules_file}")
            return []

        rules = []
        for rule_config in config['alert_rules']:
            try:
                rule = AlertRule(
                    id=rule_config['id'],
                    name=rule_config.get('name', rule_config['id']),
                    type=rule_config.get('type', RuleType.PERFORMANCE),
                    metric=rule_config['metric'],
                    condition=rule_config.get('condition', Condition.GREATER_THAN),
                    threshold=float(rule_config['threshold']),
                    severity=rule_config.get('severity', Severity.MEDIUM),
                    is_enabled=rule_config.get('enabled', True),
                    cooldown_minutes=rule_config.get('cooldown_minutes', 15),
                )
                rules.append(rule)
                logger.debug(f"Loaded alert rule: {rule.id}")

            except (KeyError, TypeError, ValueError) as e:
                logger.error(f"Failed to load rule {rule_config.get('id', 'unknown')}: {e}")
                continue

        logger.info(f"Loaded {len(rules)} alert rules from {rules_file}")
        return rules

    except FileNotFoundError:
        logger.error(f"Alert rules file not found: {rules_file}")
        raise
    except yaml.YAMLError as e:
        logger.error(f"Failed to parse YAML file {rules_file}: {e}")
        raise ValueError(f"Invalid YAML format: {e}")
