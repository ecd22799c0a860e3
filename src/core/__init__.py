"""
Core Module

Provides foundational utilities used across the application:
- Configuration management
- Logging setup
"""

from .config import Settings, get_allowed_origins, get_settings
from .logger import get_logger, setup_logging

__all__ = [
    # Config
    "Settings",
    "get_settings",
    "get_allowed_origins",
    # Logging
    "setup_logging",
    "get_logger",
]
