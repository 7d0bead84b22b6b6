"""Utility helper functions"""

from datetime import datetime


def safe_divide(a, b, default=0.0):
    """Safely divide two numbers, returning default if division by zero"""
    try:
        if b == 0:
            return default
        return a / b
    except (TypeError, ZeroDivisionError):
        return default


def mean(values, default=None):
    """Arithmetic mean of a sequence, or default when it is empty"""
    values = list(values)
    if not values:
        return default
    return sum(values) / len(values)


def timestamp_millis(moment: datetime) -> int:
    """Milliseconds since the epoch"""
    return int(moment.timestamp() * 1000)


def format_number(value) -> str:
    """Render a number without a trailing '.0' for whole values"""
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return str(value)
