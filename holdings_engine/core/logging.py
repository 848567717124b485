import logging
import sys
from typing import Optional

from holdings_engine.config import settings
from holdings_engine.utils.logging_redaction import install_redaction_filter


def setup_logging(level: Optional[str] = None) -> None:
    """
    Configure centralized application logging.
    """
    level = level or ("DEBUG" if settings.DEBUG else settings.LOG_LEVEL)
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    install_redaction_filter()

    # Request lines from httpx carry query strings; keep them out of INFO.
    logging.getLogger("httpx").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """
    Retrieve a namespaced logger.
    """
    return logging.getLogger(name)
