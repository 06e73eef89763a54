"""Logging setup: diagnostics on stderr, access and startup lines on stdout."""

import logging
import sys

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

# Loggers whose lines are meant for stdout, printed bare.
STDOUT_LOGGERS = ("app.access", "app.server")


def configure_logging(level: str = "INFO", stream=None):
    """Configure the root logger and the stdout loggers. Safe to call more than once."""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    # basicConfig is a no-op once the root logger has handlers
    logging.getLogger().setLevel(level.upper())

    for name in STDOUT_LOGGERS:
        log = logging.getLogger(name)
        if not log.handlers:
            handler = logging.StreamHandler(stream or sys.stdout)
            handler.setFormatter(logging.Formatter("%(message)s"))
            log.addHandler(handler)
        log.setLevel(logging.INFO)
        log.propagate = False
