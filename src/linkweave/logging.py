"""Logging configuration."""

from __future__ import annotations

import structlog


def configure_logging(log_level: str = "info") -> None:
    """Configure structlog with the specified log level."""
    structlog.configure(wrapper_class=structlog.make_filtering_bound_logger(min_level=log_level.lower()))
