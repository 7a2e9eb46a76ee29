# -*- coding: utf-8 -*-
"""
backend/app/shared/config/logging_config.py

Configuración centralizada de logging del backend de billing.
Soporta formato plain (desarrollo) y json (producción, vía python-json-logger).

Autor: Equipo Billing
Fecha: 2026-09-02
"""

import logging.config
from typing import Literal

# Loggers de terceros que solo interesan en WARNING o superior
_NOISY_LOGGERS = ("sqlalchemy.engine", "apscheduler.executors.default", "aiosqlite")


def setup_logging(
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO",
    fmt: Literal["plain", "pretty", "json"] = "plain",
) -> None:
    """
    Configura el sistema de logging de la aplicación.

    Args:
        level: Nivel de logging raíz
        fmt: Formato de salida (plain, pretty, json). pretty equivale a plain.

    Ejemplos:
        >>> setup_logging("INFO", "plain")
        >>> setup_logging("WARNING", "json")
    """
    use_json = fmt == "json"

    formatters = {
        "default": {
            "format": "%(asctime)s %(levelname)s [%(name)s]: %(message)s",
            "datefmt": "%Y-%m-%d %H:%M:%S",
        },
        "json": {
            "()": "pythonjsonlogger.json.JsonFormatter",
            "format": "%(asctime)s %(name)s %(levelname)s %(message)s",
            "rename_fields": {"levelname": "level", "asctime": "ts"},
        },
    }

    handlers = {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "json" if use_json else "default",
            "stream": "ext://sys.stdout",
        }
    }

    loggers = {
        name: {"level": "WARNING", "propagate": True} for name in _NOISY_LOGGERS
    }

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": formatters,
            "handlers": handlers,
            "loggers": loggers,
            "root": {
                "handlers": ["console"],
                "level": level.upper(),
            },
        }
    )


__all__ = ["setup_logging"]
# Fin del archivo backend/app/shared/config/logging_config.py
