"""Logging for nproperty.

The binder logs through `LOGGER`, whose plain records go to the standard `nproperty`
logger. Attach outputs to see them, e.g. `LOGGER.add_output(LogOutput.rich())`.
Setting the environment variable `NPROPERTY_DEBUG` to `1`, `true`, `yes` or `on`
attaches a debug output on stderr at import time.
"""

import logging
import os

from .logger import Logger, LogOutput, LogOutputKind, LogLevel

__all__ = ["Logger", "LogOutput", "LogOutputKind", "LogLevel", "LOGGER"]

logging.getLogger("nproperty").addHandler(logging.NullHandler())

LOGGER = Logger("nproperty")

if os.environ.get("NPROPERTY_DEBUG", "0").lower() in ["1", "true", "yes", "on"]:
    LOGGER.add_output(LogOutput.stderr("debug", level=LogLevel.DEBUG))
