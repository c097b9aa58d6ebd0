from __future__ import annotations
import logging
from pathlib import Path
from typing import Optional

from stored_lib.config import load_config


def configure_logging(config_path: Optional[Path] = None) -> logging.Logger:
    """Configure root logging for an application using stored_lib.

    Reads `log_level` from the store configuration (see `stored_lib.config`)
    and reconfigures the root logger with that level and the standard
    format. Unknown level names fall back to WARNING. Returns the
    `stored_lib` package logger.
    """
    level = logging.WARNING
    try:
        cfg = load_config(config_path)
        numeric = getattr(logging, cfg.log_level.upper(), None)
        if isinstance(numeric, int):
            level = numeric
    except Exception:
        # If config parse fails, fall back to default level
        logging.getLogger(__name__).exception('Failed to load store configuration for logging setup')

    for handler in logging.root.handlers[:]:
        logging.root.removeHandler(handler)
    logging.basicConfig(level=level, format='%(asctime)s %(levelname)s [%(name)s]: %(message)s')
    logger = logging.getLogger('stored_lib')
    logger.info("Log level set to: %s", logging.getLevelName(level))
    return logger
