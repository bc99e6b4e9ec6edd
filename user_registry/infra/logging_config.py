import logging
import json
import sys
from datetime import datetime, timezone
from typing import Optional, Dict
import traceback
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
import time
import uuid

_RESERVED_ATTRS = frozenset([
    'name', 'msg', 'args', 'created', 'filename', 'funcName',
    'levelname', 'levelno', 'lineno', 'module', 'msecs',
    'pathname', 'process', 'processName', 'relativeCreated',
    'thread', 'threadName', 'taskName', 'getMessage', 'exc_info',
    'exc_text', 'stack_info',
])

ROOT_LOGGER_NAME = "user_registry"


class JSONFormatter(logging.Formatter):
    def __init__(self, service_name: Optional[str] = None):
        super().__init__()
        self.service_name = service_name

    def format(self, record: logging.LogRecord) -> str:
        log_obj = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        if self.service_name:
            log_obj["service"] = self.service_name

        # Add extra fields
        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS:
                log_obj[key] = value

        if record.exc_info:
            log_obj["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_obj, default=str)


def setup_logging(
    service_name: str,
    level: int | str = logging.INFO,
    stream=None,
) -> logging.Logger:
    """Configure the package root logger; child loggers propagate to it."""
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(level)
    logger.handlers.clear()
    logger.propagate = False

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(JSONFormatter(service_name))
    logger.addHandler(handler)
    return logger


_loggers: Dict[str, logging.Logger] = {}


def get_logger(name: str) -> logging.Logger:
    if name not in _loggers:
        _loggers[name] = logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")
    return _loggers[name]


class LoggingMiddleware(BaseHTTPMiddleware):
    def __init__(self, app):
        super().__init__(app)
        self.logger = get_logger("api.access")

    async def dispatch(self, request: Request, call_next):
        request_id = str(uuid.uuid4())
        start_time = time.time()

        self.logger.info(
            "request details",
            extra={
                "request_id": request_id,
                "method": request.method,
                "uri": str(request.url.path),
                "client": request.client.host if request.client else None,
            }
        )

        try:
            response = await call_next(request)
            duration = time.time() - start_time

            self.logger.info(
                "response details",
                extra={
                    "request_id": request_id,
                    "method": request.method,
                    "uri": str(request.url.path),
                    "status": response.status_code,
                    "size": response.headers.get("content-length"),
                    "duration_ms": round(duration * 1000, 2),
                }
            )

            return response

        except Exception as e:
            duration = time.time() - start_time
            self.logger.error(
                "request failed",
                extra={
                    "request_id": request_id,
                    "method": request.method,
                    "uri": str(request.url.path),
                    "duration_ms": round(duration * 1000, 2),
                    "error": str(e),
                    "traceback": traceback.format_exc(),
                }
            )
            raise
