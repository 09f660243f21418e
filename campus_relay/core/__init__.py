"""
Core module - Configuration and cross-cutting concerns.

This module provides:
- config.py         : Environment-based configuration management
- logging_config.py : Centralized logging setup
- exceptions.py     : Relay error taxonomy
- audit.py          : Request audit and security header middleware
"""
from campus_relay.core.config import Settings, get_settings, load_settings
from campus_relay.core.logging_config import setup_logging, get_logger

__all__ = [
    "get_settings",
    "load_settings",
    "Settings",
    "setup_logging",
    "get_logger",
]
