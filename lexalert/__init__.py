"""
lexalert - rule-based alerting engine for product and performance metrics.
"""

__version__ = '1.0.0'
