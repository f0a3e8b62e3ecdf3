"""Configuration Manager site health report."""

__version__ = "0.1.0"
