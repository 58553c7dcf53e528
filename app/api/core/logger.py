import logging
import logging.config
import sys
import threading
from typing import IO, Optional

from app.api.core.config import settings

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s %(module)s:%(lineno)d - %(message)s"

_setup_lock = threading.Lock()
_configured = False


def build_log_config(name: str = "app", level: str = "INFO", stream: Optional[IO] = None) -> dict:
    """
    Build the dictConfig used by the application and uvicorn loggers.

    Args:
        name (str): Name of the application logger.
        level (str): Level applied to every configured logger.
        stream (Optional[IO]): Where records are written. Defaults to stdout.
            Pass a sink (e.g. ``io.StringIO()``) to silence output.

    Returns:
        dict: A configuration accepted by ``logging.config.dictConfig``.
    """
    level = level.upper()

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "format": LOG_FORMAT,
            }
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "stream": stream if stream is not None else sys.stdout,
            }
        },
        "loggers": {
            "uvicorn": {"handlers": ["console"], "level": level, "propagate": False},
            "uvicorn.error": {"level": level},
            "uvicorn.access": {"handlers": ["console"], "level": level, "propagate": False},
            name: {
                "handlers": ["console"],
                "level": level,
                "propagate": False,
            },
        },
        "root": {
            "handlers": ["console"],
            "level": level,
        },
    }


def setup_logging(
    name: str = "app", level: Optional[str] = None, stream: Optional[IO] = None
) -> bool:
    """
    Configure logging once per process.

    Repeated calls (e.g. from every test that spins up an app) are no-ops.

    Returns:
        bool: True if this call applied the configuration, False otherwise.
    """
    global _configured

    with _setup_lock:
        if _configured:
            return False
        logging.config.dictConfig(build_log_config(name, level or settings.LOG_LEVEL, stream))
        _configured = True
        return True


def get_logger(name: str) -> logging.Logger:
    """Return a child of the application logger, e.g. ``app.subscriptions``."""
    return logging.getLogger(f"app.{name}")
