"""
Logging setup for applications embedding the schema catalog.

Library modules only create module loggers; handlers and levels are
configured here, once, by the embedding application.
"""

from __future__ import annotations

import logging

import json_log_formatter

from .config import CatalogConfig

TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(config: CatalogConfig) -> logging.Handler:
    """Configure logging based on configuration.

    Args:
        config: Catalog configuration

    Returns:
        The handler installed on the root logger
    """
    level = getattr(logging, config.observability.log_level.upper(), logging.INFO)

    if config.observability.log_format.lower() == "json":
        formatter: logging.Formatter = json_log_formatter.JSONFormatter()
    else:
        formatter = logging.Formatter(TEXT_FORMAT)

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers = [handler]
    return handler
