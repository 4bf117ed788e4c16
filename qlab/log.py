# -*- coding: utf-8 -*-
"""
qlab/log.py

Logs structurés (structlog). Les modules appellent get_logger(__name__) ;
seul le script appelant choisit la sortie via configure_logging().
"""

from __future__ import annotations

import logging
import sys

import structlog


def configure_logging(level: str = "INFO", format_json: bool = False) -> None:
    """
    Route les évènements structlog vers le logging standard (stdout).

    Paramètres
    ----------
    level : str
        DEBUG, INFO, WARNING ou ERROR.
    format_json : bool
        Une ligne JSON par évènement, sinon rendu console lisible.
    """
    logging.basicConfig(level=getattr(logging, level.upper()), stream=sys.stdout, format="%(message)s")

    renderer = structlog.processors.JSONRenderer() if format_json else structlog.dev.ConsoleRenderer(colors=False)
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
