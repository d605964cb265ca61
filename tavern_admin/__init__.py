"""Bulk administration for multi-user SillyTavern data directories."""

__version__ = "1.0.0"
