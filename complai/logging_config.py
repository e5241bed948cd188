"""
Logging Configuration

Provides a single setup_logging() function so the API, the CLI and the
demo script all log the same way.
"""

import logging
import os

# Third-party loggers that are noisy at INFO (one line per HTTP request)
QUIET_LOGGERS = ("httpx", "httpcore", "openai", "botocore", "urllib3")


def setup_logging(level: str | None = None):
    """
    Configure the root logger.

    The level comes from ``level`` or the LOG_LEVEL env var (default: INFO).
    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    """
    level_name = (level or os.environ.get("LOG_LEVEL", "INFO")).upper()
    resolved = getattr(logging, level_name, logging.INFO)

    logging.basicConfig(
        level=resolved,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(resolved, logging.WARNING))
