"""Podium - structured two-party debate orchestration."""

__version__ = "0.1.0"
