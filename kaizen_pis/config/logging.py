"""
Logging setup.

Modules log through `logging.getLogger(__name__)`; applications call
`configure_logging` once at startup.
"""

import logging
from typing import Optional

from .settings import get_settings

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging at `level`, or the configured log level."""
    resolved = (level or get_settings().log_level).upper()
    logging.basicConfig(level=resolved, format=LOG_FORMAT)
