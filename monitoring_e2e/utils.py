"""Utility functions for the monitoring e2e suite"""

import logging
import sys
from collections.abc import Callable
from typing import Any

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
NOISY_LOGGERS = ("urllib3", "kubernetes", "httpx", "httpcore")


def get_logger(name: str) -> logging.Logger:
    """Return a logger under the monitoring_e2e hierarchy"""
    return logging.getLogger(f"monitoring_e2e.{name}")


def setup_logging(level: int = logging.INFO) -> None:
    """Configure the root handler and quieten the HTTP and Kubernetes client loggers"""
    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stdout)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def run_with_error_logging(func: Callable, *args, **kwargs) -> Any:  # noqa: ANN002, ANN003, ANN401
    """Run a function with error logging"""
    try:
        return func(*args, **kwargs)
    except Exception:
        get_logger("application").exception("Error in %s", getattr(func, "__name__", func))
        raise


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of base with override merged in, recursing into nested dicts"""
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged
