"""Configuration management"""

import os
import warnings
import yaml
from pathlib import Path
from typing import Dict, Any


def get_default_config() -> Dict[str, Any]:
    """Get default configuration"""
    return {
        'engine': {
            'log_level': 'INFO',
            'log_file': None,
            'log_format': 'text',
        },
        'prometheus': {
            'enabled': False,
            'port': 9108,
            'host': '0.0.0.0',
        },
        'alerting': {
            'evaluation_interval': 30,
            'window_minutes': 60,
            'metric_query_timeout': 10,
            'load_builtin_rules': True,
            'alert_rules_file': None,
            'channels': {
                'slack': {
                    'enabled': False,
                    'webhook_url': '',
                    'channel': '#alerts',
                    'username': 'lexalert',
                    'icon_emoji': ':rotating_light:',
                    'timeout': 10,
                },
                'webhook': {
                    'enabled': False,
                    'url': '',
                    'method': 'POST',
                    'headers': {},
                    'timeout': 10,
                }
            },
        },
        'metrics': {
            'type': 'sqlite',
            'sqlite_path': './data/analytics.db',
        },
    }


def load_config(config_path: str = None) -> Dict[str, Any]:
    """
    Load configuration from file and environment variables

    Args:
        config_path: Path to YAML configuration file

    Returns:
        Configuration dictionary
    """
    config = get_default_config()

    if config_path and Path(config_path).exists():
        try:
            with open(config_path, 'r') as f:
                yaml_config = yaml.safe_load(f)
                if yaml_config:
                    config = merge_configs(config, yaml_config)
        except Exception as e:
            raise ValueError(f"Failed to load config from {config_path}: {e}")

    config = override_from_env(config)

    validate_config(config)

    return config


def merge_configs(base: Dict, override: Dict) -> Dict:
    """Recursively merge two configuration dictionaries"""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = merge_configs(result[key], value)
        else:
            result[key] = value
    return result


def _env_bool(value: str) -> bool:
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


def override_from_env(config: Dict) -> Dict:
    """Override configuration from environment variables"""

    # Engine settings
    if 'LOG_LEVEL' in os.environ:
        config['engine']['log_level'] = os.environ['LOG_LEVEL'].upper()
    if 'LOG_FILE' in os.environ:
        config['engine']['log_file'] = os.environ['LOG_FILE']
    if 'LOG_FORMAT' in os.environ:
        config['engine']['log_format'] = os.environ['LOG_FORMAT'].lower()

    # Prometheus settings
    if 'PROMETHEUS_ENABLED' in os.environ:
        config['prometheus']['enabled'] = _env_bool(os.environ['PROMETHEUS_ENABLED'])
    if 'PROMETHEUS_PORT' in os.environ:
        config['prometheus']['port'] = int(os.environ['PROMETHEUS_PORT'])
    if 'PROMETHEUS_HOST' in os.environ:
        config['prometheus']['host'] = os.environ['PROMETHEUS_HOST']

    # Alerting settings
    if 'ALERT_EVALUATION_INTERVAL' in os.environ:
        config['alerting']['evaluation_interval'] = float(os.environ['ALERT_EVALUATION_INTERVAL'])
    if 'ALERT_WINDOW_MINUTES' in os.environ:
        config['alerting']['window_minutes'] = float(os.environ['ALERT_WINDOW_MINUTES'])
    if 'ALERT_RULES_FILE' in os.environ:
        config['alerting']['alert_rules_file'] = os.environ['ALERT_RULES_FILE']
    if 'SLACK_WEBHOOK_URL' in os.environ:
        config['alerting']['channels']['slack']['webhook_url'] = os.environ['SLACK_WEBHOOK_URL']
        config['alerting']['channels']['slack']['enabled'] = True

    # Metric source settings
    if 'METRICS_SQLITE_PATH' in os.environ:
        config['metrics']['sqlite_path'] = os.environ['METRICS_SQLITE_PATH']

    return config


def validate_config(config: Dict):
    """
    Validate configuration values

    Raises:
        ValueError: If configuration is invalid
    """
    valid_log_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
    log_level = config['engine']['log_level'].upper()
    if log_level not in valid_log_levels:
        raise ValueError(f"Invalid log level: {log_level}. Must be one of {valid_log_levels}")

    valid_formats = ['text', 'json']
    log_format = config['engine'].get('log_format', 'text')
    if log_format not in valid_formats:
        raise ValueError(f"Invalid log format: {log_format}. Must be one of {valid_formats}")

    port = config['prometheus']['port']
    if not (1 <= port <= 65535):
        raise ValueError(f"Invalid Prometheus port: {port}. Must be between 1 and 65535")

    alerting = config['alerting']

    eval_interval = alerting.get('evaluation_interval', 30)
    if eval_interval <= 0:
        raise ValueError(f"Invalid evaluation_interval: {eval_interval}. Must be > 0")

    if eval_interval < 1:
        warnings.warn(f"Evaluation interval is very aggressive: {eval_interval}s")

    window = alerting.get('window_minutes', 60)
    if window <= 0:
        raise ValueError(f"Invalid window_minutes: {window}. Must be > 0")

    timeout = alerting.get('metric_query_timeout')
    if timeout is not None and timeout < 0:
        raise ValueError(f"Invalid metric_query_timeout: {timeout}. Must be >= 0")

    if alerting['channels']['slack'].get('enabled'):
        if not alerting['channels']['slack'].get('webhook_url'):
            raise ValueError("Slack channel enabled but webhook_url not set")

    if alerting['channels']['webhook'].get('enabled'):
        webhook = alerting['channels']['webhook']
        if not webhook.get('url'):
            raise ValueError("Webhook channel enabled but url not set")
        if webhook.get('method', 'POST').upper() not in ('POST', 'PUT'):
            raise ValueError(f"Unsupported webhook method: {webhook.get('method')}")

    metrics_type = config['metrics'].get('type', 'sqlite')
    if metrics_type != 'sqlite':
        raise ValueError(f"Unsupported metrics type: {metrics_type}. Only 'sqlite' is currently supported")
