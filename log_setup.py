"""Central logger configuration.

Every module asks for a child of the ``budget_tracker`` logger so that a
single handler and level apply to the whole application.
"""

import logging
import sys
from typing import Optional

from config import LOG_LEVEL

ROOT_LOGGER_NAME = "budget_tracker"

_configured = False


def _configure(logger: logging.Logger) -> None:
    global _configured
    if _configured:
        return

    logger.setLevel(getattr(logging, LOG_LEVEL.upper(), logging.INFO))
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(
            logging.Formatter(
                "%(asctime)s - %(name)s - [%(levelname)s] - %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        logger.addHandler(handler)
    _configured = True


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return the application logger, or a named child of it."""
    root = logging.getLogger(ROOT_LOGGER_NAME)
    _configure(root)
    if not name:
        return root
    return root.getChild(name)
