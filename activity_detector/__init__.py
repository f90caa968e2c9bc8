"""Batch suspicious-activity detector for API access logs."""

__version__ = "0.1.0"
