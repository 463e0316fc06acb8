"""
Module containing the loggers of revmount.

All output goes through the 'revmount' logger, which writes to stderr. Components get
a child logger of their own by default (e.g. 'revmount.mounts'), and callers embedding
revmount can hand any other logger to a component instead.
"""

import logging
from typing import Any

_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"


def _root_logger() -> logging.Logger:
    logger = logging.getLogger("revmount")

    if not logger.handlers:
        stderr_output = logging.StreamHandler()
        stderr_output.setFormatter(logging.Formatter(_FORMAT))
        logger.addHandler(stderr_output)

    return logger


def get_logger(component: str) -> logging.Logger:
    """Get the default logger of a component."""
    return log.getChild(component)


def set_verbosity(debug: bool) -> None:
    """Show either everything including debug output, or progress and errors only."""
    log.setLevel(logging.DEBUG if debug else logging.INFO)


def summarize(obj: Any, max_length: int = 255) -> str:
    """Return a stringified representation of the object up to the given length."""
    stringified_obj = str(obj)

    if len(stringified_obj) <= max_length:
        return stringified_obj
    else:
        return stringified_obj[: max_length - 3] + "..."


# Default logger
log = _root_logger()
