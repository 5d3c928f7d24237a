"""Central logging configuration for the typesetting engine."""
from __future__ import annotations

import logging
from typing import Optional

_DEFAULT_LEVEL = logging.INFO
_DEFAULT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a module-level logger, configuring the root handler on first use."""
    logger = logging.getLogger(name)
    if not logging.getLogger().handlers:
        logging.basicConfig(level=_DEFAULT_LEVEL, format=_DEFAULT_FORMAT)
    return logger


def set_verbosity(verbose: bool) -> None:
    """Switch the package loggers between INFO and DEBUG."""
    logging.getLogger("reflow_layout").setLevel(logging.DEBUG if verbose else _DEFAULT_LEVEL)
