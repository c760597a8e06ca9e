"""Logging configuration helpers."""

import logging

_QUIET_LOGGERS = ("httpx", "httpcore", "hpack")


def configure_logging(level: str = "INFO") -> None:
    """Configure the package logger once and quiet per-request client logs.

    Supabase and OpenAI clients log every HTTP request at INFO through httpx,
    which would drown out ledger write messages.
    """
    logger = logging.getLogger("macro_tracker")
    logger.setLevel(level.upper())
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    if logger.handlers:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)s: %(name)s: %(message)s")
    )
    logger.addHandler(handler)
    logger.propagate = False
