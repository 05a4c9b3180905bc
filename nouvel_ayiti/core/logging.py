"""Configuration de logging basée sur structlog.

Objectif du module
------------------
- Fournir des logs structurés lisibles en développement (console) et
  exploitables en production (JSON).
- Propager l'identifiant de requête lié par le middleware via les contextvars.
"""

import logging
import sys

import structlog


def setup_logging(level: str = "INFO", json_logs: bool = False):
    """Configure structlog pour produire des logs détaillés et filtrables."""
    renderer = (
        structlog.processors.JSONRenderer()
        if json_logs
        else structlog.dev.ConsoleRenderer()
    )
    min_level = logging.getLevelName(level.upper())
    if not isinstance(min_level, int):
        min_level = logging.INFO
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.TimeStamper(fmt="ISO"),
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(min_level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=True,
    )
