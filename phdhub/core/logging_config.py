"""
PhD Hub - Logging

One named logger, `phdhub`. Development gets readable lines tagged with the
request and caller ids; production gets one JSON object per line.
"""

import json
import logging
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Optional

from phdhub.core.config import settings


# Set by RequestLoggingMiddleware and the auth dependency for the current request
request_id_var: ContextVar[str] = ContextVar('request_id', default='')
user_id_var: ContextVar[str] = ContextVar('user_id', default='')

_RECORD_KEYS = set(vars(logging.LogRecord('', 0, '', 0, '', (), None))) | {'message', 'request_id', 'user_id'}


class JSONFormatter(logging.Formatter):
    """One JSON object per record; `extra=` fields become top-level keys"""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}.{record.funcName}:{record.lineno}",
        }
        if request_id_var.get():
            entry["request_id"] = request_id_var.get()
        if user_id_var.get():
            entry["user_id"] = user_id_var.get()
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        entry.update({k: v for k, v in vars(record).items() if k not in _RECORD_KEYS and not k.startswith('_')})
        return json.dumps(entry, default=str)


class ContextualFormatter(logging.Formatter):
    """Plain-text formatter exposing %(request_id)s and %(user_id)s"""

    def format(self, record: logging.LogRecord) -> str:
        record.request_id = request_id_var.get() or '-'
        record.user_id = user_id_var.get() or '-'
        return super().format(record)


class PhdHubLogger(logging.Logger):

    def log_auth_event(self, event: str, success: bool, reason: Optional[str] = None) -> None:
        """Session verification outcome; failures log at WARNING"""
        self.log(
            logging.INFO if success else logging.WARNING,
            f"Auth {event}: {'success' if success else 'failed'}" + (f" - {reason}" if reason else ""),
            extra={"event_type": "auth", "auth_event": event, "auth_success": success, "failure_reason": reason},
        )

    def log_error_with_context(self, error: Exception, context: Optional[str] = None) -> None:
        """Unhandled error with traceback, tagged with where it happened"""
        self.error(
            f"Error in {context}: {type(error).__name__}: {error}",
            exc_info=error,
            extra={"event_type": "error", "error_type": type(error).__name__, "error_context": context},
        )


def _file_handler(formatter: logging.Formatter, backup_count: int) -> RotatingFileHandler:
    log_file = Path(settings.LOG_FILE)
    log_file.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(log_file, maxBytes=10 * 1024 * 1024, backupCount=backup_count)
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(formatter)
    return handler


def setup_logging() -> PhdHubLogger:
    """Configure the `phdhub` logger for the current ENVIRONMENT"""
    logging.setLoggerClass(PhdHubLogger)
    logger = logging.getLogger("phdhub")
    logger.__class__ = PhdHubLogger
    logger.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
    logger.propagate = False
    logger.handlers.clear()

    is_production = settings.ENVIRONMENT == "production"
    if is_production:
        console_formatter = file_formatter = JSONFormatter()
    else:
        console_formatter = ContextualFormatter("%(levelname)-8s | [%(request_id)s] %(message)s")
        file_formatter = ContextualFormatter(
            "%(asctime)s | %(levelname)-8s | [%(request_id)s] [%(user_id)s] | "
            "%(funcName)s:%(lineno)d | %(message)s"
        )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(console_formatter)
    logger.addHandler(console_handler)

    if settings.LOG_FILE:
        logger.addHandler(_file_handler(file_formatter, backup_count=10 if is_production else 5))

    for noisy in ("httpx", "httpcore", "botocore", "uvicorn.access", "sqlalchemy.engine"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    logger.info("Logging initialized", extra={"environment": settings.ENVIRONMENT, "json_logging": is_production})
    return logger


logger: PhdHubLogger = setup_logging()
