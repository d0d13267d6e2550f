"""
Configuration Management

Centralized configuration for:
- Logging level
- Default calendar for new dates
- Facade defaults (top KPI count)
"""

from .settings import EngineSettings, get_settings
from .logging import configure_logging

__all__ = [
    "EngineSettings",
    "get_settings",
    "configure_logging"
]
