"""
Configuración centralizada de logging.
Texto legible en desarrollo, JSON por línea en producción.
"""

import json
import logging
import sys
from contextvars import ContextVar
from datetime import datetime
from typing import Any, Dict

from mida_app.core.config import settings

request_id_var: ContextVar[str] = ContextVar("request_id", default="")
user_id_var: ContextVar[str] = ContextVar("user_id", default="")

_RESERVED_ATTRS = {
    "name", "msg", "args", "created", "filename", "funcName", "levelname",
    "levelno", "lineno", "module", "msecs", "pathname", "process",
    "processName", "relativeCreated", "stack_info", "exc_info", "exc_text",
    "thread", "threadName", "message", "taskName", "request_id", "user_id",
}


def set_request_id(request_id: str) -> None:
    request_id_var.set(request_id)


def set_user_id(user_id: str) -> None:
    user_id_var.set(user_id)


class JSONFormatter(logging.Formatter):
    """Una línea JSON por registro, para agregadores de logs."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.utcnow().isoformat() + "Z",
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "line": record.lineno,
        }

        if request_id_var.get():
            log_data["request_id"] = request_id_var.get()
        if user_id_var.get():
            log_data["user_id"] = user_id_var.get()

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS and not key.startswith("_"):
                log_data[key] = value

        return json.dumps(log_data, default=str)


class ContextualFormatter(logging.Formatter):
    """Formato de texto con request_id y user_id."""

    def format(self, record: logging.LogRecord) -> str:
        record.request_id = request_id_var.get() or "-"
        record.user_id = user_id_var.get() or "-"
        return super().format(record)


def setup_logging() -> logging.Logger:
    log = logging.getLogger("mida")
    log.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
    log.handlers.clear()
    log.propagate = False

    handler = logging.StreamHandler(sys.stdout)
    if settings.ENVIRONMENT == "production":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(
            ContextualFormatter(
                "%(asctime)s | %(levelname)-7s | %(name)s | "
                "[%(request_id)s] [user:%(user_id)s] %(message)s"
            )
        )
    log.addHandler(handler)
    return log


logger = setup_logging()


def get_logger(name: str) -> logging.Logger:
    """Logger hijo de 'mida' (hereda handlers y nivel)."""
    return logger.getChild(name)
