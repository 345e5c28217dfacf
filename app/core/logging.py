"""JSON logging for the caisse backend."""
from __future__ import annotations

import logging
import sys
from typing import Any

from pythonjsonlogger import jsonlogger

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

# Loggers qui inondent la sortie lors d'un recalcul complet du journal.
QUIET_LOGGERS = ("sqlalchemy.engine", "alembic.runtime.migration")


class CaisseJsonFormatter(jsonlogger.JsonFormatter):
    """Tag every record with the service name and the runtime environment."""

    def __init__(self, *args: Any, service: str, env: str, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.service = service
        self.env = env

    def add_fields(self, log_record: dict[str, Any], record: logging.LogRecord, message_dict: dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record.setdefault("service", self.service)
        log_record.setdefault("env", self.env)


def setup_logging(level: str = "INFO", *, service: str = "caisse-backend", env: str = "dev") -> logging.Handler:
    """Install a single JSON handler on the root logger and return it.

    Safe to call more than once (reload, tests): previous handlers are dropped.
    """

    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
    root_logger.setLevel(level.upper())

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(CaisseJsonFormatter(LOG_FORMAT, service=service, env=env))
    root_logger.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    return handler


__all__ = ["CaisseJsonFormatter", "setup_logging"]
