"""Stylegate - convention compliance engine for component-based front-end projects."""

__version__ = "0.4.0"
