"""Configuration de logging basée sur structlog.

Objectif du module
------------------
- Logs lisibles en console pour le développement, JSON (une ligne par événement) en production.
- Propager le contexte de requête (request_id) via les contextvars.
- Filtrer par niveau (`LOG_LEVEL`).
"""

import logging
import sys

import structlog


def _level_number(level: str) -> int:
    value = logging.getLevelName(level.upper())
    return value if isinstance(value, int) else logging.INFO


def setup_logging(level: str = "INFO", json_logs: bool = False):
    """Configure structlog pour l'application.

    Args:
        level: Niveau minimal émis (`DEBUG`, `INFO`, ...); inconnu -> INFO.
        json_logs: Rendu JSON au lieu du rendu console coloré.
    """
    renderer = (
        structlog.processors.JSONRenderer() if json_logs else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(_level_number(level)),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=True,
    )
