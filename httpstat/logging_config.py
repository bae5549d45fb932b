import logging
import logging.config
from typing import Optional

from httpstat.config import get_settings


def setup_logging(debug: Optional[bool] = None):
    """
    Configure global log format
    Logs go to stderr so that reports printed on stdout stay machine-readable.
    """
    if debug is None:
        debug = get_settings().DEBUG
    log_level = "DEBUG" if debug else "INFO"
    # httpx logs every request at INFO; keep it quiet unless debugging
    client_level = "DEBUG" if debug else "WARNING"

    logging_config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "format": "[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "standard",
                "stream": "ext://sys.stderr",
            },
        },
        "loggers": {
            "root": {
                "handlers": ["console"],
                "level": log_level,
                "propagate": True,
            },
            "httpx": {
                "handlers": ["console"],
                "level": client_level,
                "propagate": False,
            },
            "httpcore": {
                "handlers": ["console"],
                "level": client_level,
                "propagate": False,
            },
            "httpstat": {
                "handlers": ["console"],
                "level": log_level,
                "propagate": False,
            },
        },
    }

    logging.config.dictConfig(logging_config)
