"""Shared utility functions for the Finance Tracker project."""

import logging
import math
from datetime import UTC, date, datetime

import colorlog

ROOT_LOGGER_NAME = "finance-tracker"


def get_logger(name: str) -> logging.Logger:
    """Get a logger with a colorized format for the project."""
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = colorlog.ColoredFormatter(
            "%(log_color)s%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
            log_colors={
                "DEBUG": "cyan",
                "INFO": "green",
                "WARNING": "yellow",
                "ERROR": "red",
                "CRITICAL": "bold_red",
            },
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    logger.propagate = False
    return logger


def setup_logging(level: str = "INFO") -> None:
    """Apply the configured level to every project logger."""
    resolved = logging.getLevelName(level.upper())
    if not isinstance(resolved, int):
        resolved = logging.INFO
    for name in ("", ".api", ".access", ".store", ".client"):
        get_logger(f"{ROOT_LOGGER_NAME}{name}").setLevel(resolved)


def utcnow() -> datetime:
    """Get the current UTC time as an aware datetime."""
    return datetime.now(UTC)


def today_iso() -> str:
    """Get today's local date as ``YYYY-MM-DD``."""
    return date.today().isoformat()


def safe_amount(val: object) -> float:
    """Coerce a value to a finite float, returning 0.0 on failure."""
    if isinstance(val, bool):
        return 0.0
    try:
        number = float(val)
    except (ValueError, TypeError):
        return 0.0
    return number if math.isfinite(number) else 0.0
