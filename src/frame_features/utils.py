#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Utility functions and logger configuration.
Provides centralized logging, timing and small numeric helpers.
"""

import sys
import time
from functools import wraps
from pathlib import Path
from typing import Optional

from loguru import logger


def setup_logger(log_file: Optional[str] = None, level: str = "INFO", rotation: str = "10 MB"):
    """
    Configure the centralized logger.

    Args:
        log_file: Path to log file (None = console only)
        level: Console logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        rotation: When to rotate log file
    """
    # Remove default handler
    logger.remove()

    logger.add(
        sys.stderr,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
        level=level,
        colorize=True
    )

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        logger.add(
            str(log_path),
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",
            level="DEBUG",  # File always gets DEBUG level
            rotation=rotation,
            compression="zip",
            retention="30 days"
        )

    return logger


def log_execution_time(func):
    """Decorator to log function execution time."""

    @wraps(func)
    def wrapper(*args, **kwargs):
        start_time = time.perf_counter()
        logger.debug(f"Starting {func.__name__}")

        try:
            result = func(*args, **kwargs)
            elapsed = time.perf_counter() - start_time
            logger.info(f"✓ {func.__name__} completed in {elapsed * 1000:.1f}ms")
            return result
        except Exception as e:
            elapsed = time.perf_counter() - start_time
            logger.error(f"✗ {func.__name__} failed after {elapsed * 1000:.1f}ms: {e}")
            raise

    return wrapper


def safe_divide(numerator, denominator, default=0.0):
    """Divide two numbers, returning default when the denominator is zero."""
    if denominator == 0:
        return default
    return numerator / denominator


def clamp01(value: float) -> float:
    """Clamp a score to [0, 1]."""
    return float(min(max(value, 0.0), 1.0))


def now_ms() -> int:
    """Wall-clock time in milliseconds."""
    return int(time.time() * 1000)


def ensure_dir(path):
    """Ensure directory exists, create if necessary."""
    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)
    return path
