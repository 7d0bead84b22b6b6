"""Tests for the alerting engine"""

import threading
from datetime import timedelta

import pytest

from lexalert.alerts.alert_rule import AlertRule
from lexalert.config.settings import get_default_config
from lexalert.engine import AlertingEngine
from lexalert.exceptions import DuplicateRuleError


@pytest.fixture
def config(tmp_path):
    config = get_default_config()
    config['metrics']['sqlite_path'] = str(tmp_path / 'analytics.db')
    return config


@pytest.fixture
def engine(config, now):
    engine = AlertingEngine(config, clock=lambda: now)
    yield engine
    engine.close()


def seed_lcp(store, now, values):
    for minute, value in enumerate(values):
        store.record_performance(now - timedelta(minutes=minute + 1), largest_contentful_paint=value)


class TestEvaluationTick:

    def test_slow_page_loads_raise_one_alert(self, engine, now):
        seed_lcp(engine.metric_source.store, now, [3000, 5000, 4500, 3900, 4800])

        summary = engine.run_once()

        assert [a.title for a in summary.fired] == ['High LCP']
        alert = summary.fired[0]
        assert alert.severity == 'high'
        assert alert.current_value == pytest.approx(4240)
        assert alert.description == "High LCP: 4240.00ms (threshold: 4000ms)"
        assert engine.get_active_alerts_count() == 1
        assert engine.get_critical_alerts_count() == 0

    def test_error_spike_escalates(self, engine, now, recording_channel):
        engine.dispatcher.channels['recording'] = recording_channel
        store = engine.metric_source.store
        for i in range(120):
            store.record_event(now - timedelta(seconds=i + 1))
        for i in range(9):
            store.record_error(now - timedelta(seconds=i + 1))

        summary = engine.run_once()

        assert len(summary.fired) == 1
        alert = summary.fired[0]
        assert alert.severity == 'critical'
        assert alert.description == "High Error Rate: 7.50% (threshold: 5%)"
        assert recording_channel.sent == [alert]
        assert engine.get_critical_alerts_count() == 1

    def test_quiet_window_fires_nothing(self, engine):
        summary = engine.run_once()

        assert summary.fired == []
        assert summary.errors == []
        assert summary.evaluated == 5
        # No traffic reads as a 0% error rate, everything else has no data
        assert sorted(summary.no_data) == [
            'cls-threshold', 'fid-threshold', 'lcp-threshold', 'session-duration-low'
        ]

    def test_cooldown_spans_ticks(self, engine, now):
        seed_lcp(engine.metric_source.store, now, [5000])

        assert len(engine.run_once(now).fired) == 1
        assert engine.run_once(now + timedelta(minutes=14)).fired == []
        assert len(engine.run_once(now + timedelta(minutes=15)).fired) == 1


class TestManagement:

    def test_rule_crud(self, engine):
        rule = AlertRule(
            id='fid-critical',
            name='Critical FID',
            type='performance',
            metric='first_input_delay',
            condition='greater_than',
            threshold=1000,
            severity='critical',
        )

        engine.add_rule(rule)
        with pytest.raises(DuplicateRuleError):
            engine.add_rule(rule)

        assert engine.update_rule('fid-critical', threshold=800) is True
        assert engine.get_rule('fid-critical').threshold == 800
        assert engine.update_rule('missing', threshold=1) is False

        assert engine.remove_rule('fid-critical') is True
        assert engine.remove_rule('fid-critical') is False
        assert engine.get_rule('fid-critical') is None
        assert len(engine.list_rules()) == 5

    def test_removed_rule_loses_cooldown(self, engine, now):
        seed_lcp(engine.metric_source.store, now, [5000])
        engine.run_once(now)

        rule = engine.get_rule('lcp-threshold')
        engine.remove_rule('lcp-threshold')
        engine.add_rule(rule)

        assert len(engine.run_once(now + timedelta(minutes=1)).fired) == 1

    def test_resolve_and_filter(self, engine, now):
        seed_lcp(engine.metric_source.store, now, [5000])
        alert = engine.run_once().fired[0]

        assert engine.resolve_alert(alert.id, resolved_by='paralegal@firm.example') is True
        assert engine.resolve_alert(alert.id, resolved_by='ops@firm.example') is True
        assert engine.resolve_alert('missing') is False

        resolved = engine.get_alerts(resolved=True)
        assert [a.id for a in resolved] == [alert.id]
        assert resolved[0].resolved_by == 'ops@firm.example'
        assert engine.get_alerts(resolved=False) == []
        assert engine.get_active_alerts_count() == 0

    def test_subscribe_replays_state(self, engine, now):
        seed_lcp(engine.metric_source.store, now, [5000])
        engine.run_once()

        received = []
        unsubscribe = engine.subscribe(received.append)

        assert len(received) == 1
        assert [a.title for a in received[0]] == ['High LCP']

        unsubscribe()
        engine.resolve_alert(received[0][0].id)
        assert len(received) == 1


class TestRuleFile:

    def test_file_rules_override_builtins(self, config, tmp_path, now):
        rules_file = tmp_path / 'rules.yaml'
        rules_file.write_text(
            "alert_rules:\n"
            "  - id: lcp-threshold\n"
            "    name: High LCP\n"
            "    metric: largest_contentful_paint\n"
            "    threshold: 3500\n"
            "    severity: high\n"
            "  - id: error-rate-warning\n"
            "    name: Elevated Error Rate\n"
            "    type: error\n"
            "    metric: error_rate\n"
            "    threshold: 2\n"
        )
        config['alerting']['alert_rules_file'] = str(rules_file)

        engine = AlertingEngine(config, clock=lambda: now)
        try:
            assert engine.get_rule('lcp-threshold').threshold == 3500
            assert engine.get_rule('error-rate-warning').severity == 'medium'
            assert len(engine.list_rules()) == 6
        finally:
            engine.close()

    def test_without_builtins(self, config, now):
        config['alerting']['load_builtin_rules'] = False

        engine = AlertingEngine(config, clock=lambda: now)
        try:
            assert engine.list_rules() == []
            assert engine.run_once().evaluated == 0
        finally:
            engine.close()


class TestPrometheusMetrics:

    def test_counters_and_gauges(self, config, now):
        config['prometheus']['enabled'] = True
        engine = AlertingEngine(config, clock=lambda: now)
        registry = engine.exporter.registry
        try:
            seed_lcp(engine.metric_source.store, now, [5000])
            alert = engine.run_once().fired[0]

            assert registry.get_sample_value(
                'lexalert_alerts_fired_total', {'rule_id': 'lcp-threshold', 'severity': 'high'}
            ) == 1.0
            assert registry.get_sample_value('lexalert_active_alerts') == 1.0
            assert registry.get_sample_value('lexalert_enabled_rules') == 5.0

            engine.resolve_alert(alert.id)

            assert registry.get_sample_value('lexalert_alerts_resolved_total') == 1.0
            assert registry.get_sample_value('lexalert_active_alerts') == 0.0
        finally:
            engine.close()

    def test_rule_errors_counted(self, config, metric_source, now):
        config['prometheus']['enabled'] = True
        metric_source.failing.add('error_rate')
        engine = AlertingEngine(config, metric_source=metric_source, clock=lambda: now)
        try:
            summary = engine.run_once()

            assert summary.errors == ['error-rate-threshold']
            assert engine.exporter.registry.get_sample_value(
                'lexalert_rule_evaluation_errors_total', {'rule_id': 'error-rate-threshold'}
            ) == 1.0
        finally:
            engine.close()


class TestLifecycle:

    def test_start_evaluates_until_stopped(self, config, metric_source):
        config['alerting']['evaluation_interval'] = 0.05
        config['alerting']['metric_query_timeout'] = 0
        metric_source.values['largest_contentful_paint'] = 5000.0
        engine = AlertingEngine(config, metric_source=metric_source)

        fired = threading.Event()
        engine.subscribe(lambda alerts: alerts and fired.set())

        engine.start()
        try:
            assert engine.running
            assert fired.wait(timeout=5)
        finally:
            engine.stop(timeout=5)

        assert not engine.running
        assert len(engine.get_alerts()) == 1
        engine.close()

    def test_stop_when_not_running(self, engine):
        engine.stop()
        assert not engine.running
