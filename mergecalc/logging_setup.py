"""Logging configuration for the CLI and web server."""
from __future__ import annotations

import logging

_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging; unknown level names fall back to INFO."""
    resolved = getattr(logging, str(level).upper(), None)
    if not isinstance(resolved, int):
        resolved = logging.INFO

    logging.basicConfig(format=_FORMAT)
    logging.getLogger().setLevel(resolved)

    # aiohttp access logs are noisy at INFO
    for name in ("aiohttp", "aiohttp.access", "aiohttp.client", "aiohttp.web"):
        logging.getLogger(name).setLevel(logging.WARNING)
