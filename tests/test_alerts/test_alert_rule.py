"""Tests for AlertRule data class and loading"""

import pytest
import tempfile
import os

from lexalert.alerts.alert_rule import AlertRule, default_rules, load_alert_rules


class TestAlertRule:
    """Test AlertRule data class"""

    def test_create_valid_rule(self):
        """Test creating a valid alert rule"""
        rule = AlertRule(
            id="test-rule",
            name="Test Rule",
            type="performance",
            metric="first_input_delay",
            condition="greater_than",
            threshold=80,
            severity="high",
        )

        assert rule.id == "test-rule"
        assert rule.metric == "first_input_delay"
        assert rule.condition == "greater_than"
        assert rule.threshold == 80.0
        assert isinstance(rule.threshold, float)
        assert rule.is_enabled is True
        assert rule.cooldown_minutes == 15

    def test_invalid_condition(self):
        """Test that invalid condition raises error"""
        with pytest.raises(ValueError, match="Invalid condition"):
            AlertRule(
                id="test", name="test", type="performance", metric="m",
                condition=">=", threshold=1, severity="high",
            )

    def test_invalid_severity(self):
        """Test that invalid severity raises error"""
        with pytest.raises(ValueError, match="Invalid severity"):
            AlertRule(
                id="test", name="test", type="performance", metric="m",
                condition="greater_than", threshold=1, severity="warning",
            )

    def test_invalid_type(self):
        """Test that invalid type raises error"""
        with pytest.raises(ValueError, match="Invalid type"):
            AlertRule(
                id="test", name="test", type="billing", metric="m",
                condition="greater_than", threshold=1, severity="high",
            )

    def test_negative_cooldown(self):
        """Test that negative cooldown raises error"""
        with pytest.raises(ValueError, match="cooldown_minutes"):
            AlertRule(
                id="test", name="test", type="error", metric="m",
                condition="greater_than", threshold=1, severity="high",
                cooldown_minutes=-1,
            )

    def test_empty_id(self):
        with pytest.raises(ValueError, match="id"):
            AlertRule(
                id="", name="test", type="error", metric="m",
                condition="greater_than", threshold=1, severity="high",
            )


class TestDefaultRules:
    """Test the built-in rule set"""

    def test_builtin_rules(self):
        rules = {rule.id: rule for rule in default_rules()}

        assert list(rules) == [
            'lcp-threshold',
            'fid-threshold',
            'cls-threshold',
            'error-rate-threshold',
            'session-duration-low',
        ]

        expected = {
            'lcp-threshold': ('largest_contentful_paint', 'greater_than', 4000, 'high', 15),
            'fid-threshold': ('first_input_delay', 'greater_than', 300, 'medium', 10),
            'cls-threshold': ('cumulative_layout_shift', 'greater_than', 0.25, 'medium', 10),
            'error-rate-threshold': ('error_rate', 'greater_than', 5, 'critical', 5),
            'session-duration-low': ('avg_session_duration', 'less_than', 60000, 'low', 30),
        }
        for rule_id, (metric, condition, threshold, severity, cooldown) in expected.items():
            rule = rules[rule_id]
            assert rule.metric == metric
            assert rule.condition == condition
            assert rule.threshold == threshold
            assert rule.severity == severity
            assert rule.cooldown_minutes == cooldown
            assert rule.is_enabled is True

    def test_rule_types(self):
        types = {rule.id: rule.type for rule in default_rules()}
        assert types['lcp-threshold'] == 'performance'
        assert types['error-rate-threshold'] == 'error'
        assert types['session-duration-low'] == 'business'

    def test_fresh_instances(self):
        """Mutating one set must not leak into the next"""
        first = default_rules()
        first[0].threshold = 1
        assert default_rules()[0].threshold == 4000


class TestLoadAlertRules:
    """Test loading alert rules from YAML"""

    def _write(self, content):
        with tempfile.NamedTemporaryFile(mode='w', suffix='.yaml', delete=False) as f:
            f.write(content)
            return f.name

    def test_load_valid_rules(self):
        """Test loading valid alert rules from YAML"""
        temp_file = self._write("""
alert_rules:
  - id: "checkout-errors"
    name: "Checkout errors"
    type: error
    metric: "error_rate"
    condition: greater_than
    threshold: 2.5
    severity: "high"
    cooldown_minutes: 20
    enabled: false
""")
        try:
            rules = load_alert_rules(temp_file)
            assert len(rules) == 1
            assert rules[0].id == "checkout-errors"
            assert rules[0].metric == "error_rate"
            assert rules[0].threshold == 2.5
            assert rules[0].cooldown_minutes == 20
            assert rules[0].is_enabled is False
        finally:
            os.unlink(temp_file)

    def test_load_empty_file(self):
        """Test loading empty YAML file"""
        temp_file = self._write("")
        try:
            assert load_alert_rules(temp_file) == []
        finally:
            os.unlink(temp_file)

    def test_load_missing_file(self):
        """Test loading non-existent file"""
        with pytest.raises(FileNotFoundError):
            load_alert_rules("/nonexistent/file.yaml")

    def test_load_invalid_yaml(self):
        """Test loading invalid YAML"""
        temp_file = self._write("invalid: yaml: content: [")
        try:
            with pytest.raises(ValueError, match="Invalid YAML"):
                load_alert_rules(temp_file)
        finally:
            os.unlink(temp_file)

    def test_invalid_entries_are_skipped(self):
        """Test that one bad rule does not drop the others"""
        temp_file = self._write("""
alert_rules:
  - id: "no-metric"
    threshold: 1
  - id: "bad-severity"
    metric: "error_rate"
    threshold: 1
    severity: "extreme"
  - id: "ok"
    metric: "first_input_delay"
    threshold: 100
""")
        try:
            rules = load_alert_rules(temp_file)
            assert [rule.id for rule in rules] == ["ok"]
            assert rules[0].name == "ok"
            assert rules[0].condition == "greater_than"
        finally:
            os.unlink(temp_file)
