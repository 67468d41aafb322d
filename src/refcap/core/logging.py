"""Structured logging setup for the refcap pipeline."""

from __future__ import annotations

import logging
import os
import sys


def setup_logging(level: str | None = None) -> None:
    """Configure structured logging with consistent format.

    ``REFCAP_LOG_LEVEL`` overrides the default when no level is passed.
    """
    level_name = (level or os.getenv("REFCAP_LOG_LEVEL", "INFO")).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
    )
