# =============================================================================
# core/log_config.py - Logging Setup
# =============================================================================
# Library modules only create module-level loggers:
#     logger = logging.getLogger(__name__)
# Applications embedding the engine call configure_logging() once at startup.
# =============================================================================

import logging

from core.config import get_settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str | None = None) -> None:
    """
    Configure root logging with the standard format.

    Args:
        level: Explicit level name; defaults to DEBUG when settings.DEBUG is
               set, else settings.LOG_LEVEL.
    """
    settings = get_settings()
    if level is None:
        level = "DEBUG" if settings.DEBUG else settings.LOG_LEVEL

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
    )
