"""
Logging setup for the execution service.

One stderr handler on the root logger: a human-readable line format by
default, or JSON records (python-json-logger) for log shippers.
"""

import logging
import sys

from pythonjsonlogger import jsonlogger

TEXT_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
JSON_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def setup_logging(level: str = "INFO", json_format: bool = False) -> logging.Logger:
    """
    Configure the root logger.

    Args:
        level: Log level name (DEBUG, INFO, ...)
        json_format: Emit JSON records instead of text lines

    Returns:
        The configured root logger
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    # Replace handlers so repeated calls (reloads, tests) don't duplicate output
    for handler in list(root.handlers):
        root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    if json_format:
        handler.setFormatter(jsonlogger.JsonFormatter(JSON_FORMAT))
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))
    root.addHandler(handler)

    return root
