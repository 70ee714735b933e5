"""
Configuration Utilities for the Fleet Optimization Engine

Settings loading and logging setup.
"""

from .settings import PolicyConfig, RiskConfig, Settings, get_settings
from .logging_config import setup_logging, get_logger

__all__ = [
    # Settings
    "PolicyConfig",
    "RiskConfig",
    "Settings",
    "get_settings",

    # Logging
    "setup_logging",
    "get_logger",
]
