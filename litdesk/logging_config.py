"""
Logging configuration for litdesk.

One stderr handler on the ``litdesk`` logger; chatty HTTP libraries are
kept at WARNING unless debug output is requested.
"""

import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Install the stderr handler and set the package log level.

    Safe to call more than once; the handler is only added the first time.
    """
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        numeric = logging.INFO

    pkg_logger = logging.getLogger("litdesk")
    pkg_logger.setLevel(numeric)

    if not any(getattr(h, "_litdesk", False) for h in pkg_logger.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%H:%M:%S"))
        handler._litdesk = True  # type: ignore[attr-defined]
        pkg_logger.addHandler(handler)

    if numeric > logging.DEBUG:
        for name in ("httpx", "httpcore", "openai", "urllib3"):
            logging.getLogger(name).setLevel(logging.WARNING)
