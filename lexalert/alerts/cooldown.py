"""
Per-rule cooldown tracking.
"""

import threading
from datetime import datetime, timedelta
from typing import Dict, Optional


class CooldownTracker:
    """Remembers when each rule last fired"""

    def __init__(self):
        self._lock = threading.Lock()
        self._last_fired: Dict[str, datetime] = {}

    def last_fired(self, rule_id: str) -> Optional[datetime]:
        with self._lock:
            return self._last_fired.get(rule_id)

    def is_cooling_down(self, rule_id: str, cooldown_minutes: float, now: datetime) -> bool:
        """
        Check whether a rule fired too recently to fire again.

        Args:
            rule_id: Rule identifier
            cooldown_minutes: Minimum spacing between two alerts of the rule
            now: Evaluation instant

        Returns:
            True while ``now - last_fired < cooldown``
        """
        last = self.last_fired(rule_id)
        if last is None:
            return False
        return (now - last) < timedelta(minutes=cooldown_minutes)

    def mark_fired(self, rule_id: str, fired_at: datetime) -> None:
        with self._lock:
            self._last_fired[rule_id] = fired_at

    def forget(self, rule_id: str) -> None:
        """Drop cooldown state, e.g. after the rule was removed"""
        with self._lock:
            self._last_fired.pop(rule_id, None)
