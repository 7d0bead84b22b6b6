"""
Registry of alert rule definitions.
"""

import logging
import threading
from dataclasses import replace
from typing import Dict, Iterable, List, Optional

from lexalert.alerts.alert_rule import AlertRule, default_rules
from lexalert.exceptions import DuplicateRuleError

logger = logging.getLogger(__name__)


class RuleRegistry:
    """Owns the set of alert rules, keyed by rule id"""

    def __init__(self, rules: Optional[Iterable[AlertRule]] = None, seed_defaults: bool = True):
        """
        Initialize rule registry.

        Args:
            rules: Extra rules to register after the built-ins
            seed_defaults: Register the built-in rule set first
        """
        self._lock = threading.RLock()
        # Insertion-ordered; evaluation follows registration order
        self._rules: Dict[str, AlertRule] = {}

        if seed_defaults:
            for rule in default_rules():
                self.add(rule)

        for rule in rules or []:
            self.add(rule)

        logger.info(f"Rule registry initialized with {len(self._rules)} rules")

    def add(self, rule: AlertRule) -> None:
        """
        Register a new rule.

        Raises:
            DuplicateRuleError: If a rule with the same id exists
        """
        with self._lock:
            if rule.id in self._rules:
                raise DuplicateRuleError(rule.id)
            self._rules[rule.id] = replace(rule)
        logger.info(f"Added alert rule: {rule.id}")

    def update(self, rule_id: str, **changes) -> bool:
        """
        Merge changes into an existing rule.

        Args:
            rule_id: Rule to update
            **changes: AlertRule fields to overwrite

        Returns:
            True if the rule was updated, False if not found

        Raises:
            ValueError: On an attempt to change the id or on invalid values
        """
        if 'id' in changes and changes['id'] != rule_id:
            raise ValueError(f"Rule id is immutable: {rule_id}")
        changes.pop('id', None)

        with self._lock:
            current = self._rules.get(rule_id)
            if current is None:
                logger.warning(f"Rule not found: {rule_id}")
                return False

            # replace() re-runs validation, so a bad update leaves the rule untouched
            self._rules[rule_id] = replace(current, **changes)

        logger.info(f"Updated alert rule {rule_id}: {sorted(changes)}")
        return True

    def remove(self, rule_id: str) -> bool:
        """
        Remove a rule by id. Unknown ids are ignored.

        Returns:
            True if rule was removed, False if not found
        """
        with self._lock:
            removed = self._rules.pop(rule_id, None)

        if removed is None:
            logger.debug(f"Remove ignored, rule not found: {rule_id}")
            return False

        logger.info(f"Removed alert rule: {rule_id}")
        return True

    def get(self, rule_id: str) -> Optional[AlertRule]:
        """Get a copy of a rule by id"""
        with self._lock:
            rule = self._rules.get(rule_id)
            return replace(rule) if rule else None

    def list(self) -> List[AlertRule]:
        """Get copies of all rules in registration order"""
        with self._lock:
            return [replace(rule) for rule in self._rules.values()]

    def enabled_rules(self) -> List[AlertRule]:
        """Get copies of enabled rules"""
        return [rule for rule in self.list() if rule.is_enabled]

    def __len__(self) -> int:
        with self._lock:
            return len(self._rules)

    def __contains__(self, rule_id: str) -> bool:
        with self._lock:
            return rule_id in self._rules
