"""
Structured logging for the deployer.

Provides:
- JSON structured logging for production
- Colorized console output for development
- Request logging with a request id and duration

Usage:
    from deployer.logging_config import setup_logging, setup_request_logging

    setup_logging(app, level="INFO", json_format=True)
    setup_request_logging(app)
"""

import json
import logging
import sys
import time
import traceback
import uuid
from datetime import datetime, timezone

from flask import g, request

# LogRecord attributes that are not user-supplied extras
_RESERVED = set(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


class JSONFormatter(logging.Formatter):
    """JSON structured log formatter for production."""

    def format(self, record):
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for key, value in record.__dict__.items():
            if key not in _RESERVED and not key.startswith("_"):
                log_entry[key] = value

        if record.exc_info:
            log_entry["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "traceback": traceback.format_exception(*record.exc_info),
            }

        return json.dumps(log_entry, default=str)


class ColoredFormatter(logging.Formatter):
    """Colorized console formatter for development."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record):
        color = self.COLORS.get(record.levelname, "")
        timestamp = datetime.fromtimestamp(record.created).strftime("%Y-%m-%d %H:%M:%S")

        parts = [
            f"{color}[{timestamp}]{self.RESET}",
            f"{color}{record.levelname:8}{self.RESET}",
            f"{record.name}:",
            record.getMessage(),
        ]
        if hasattr(record, "request_id"):
            parts.insert(2, f"[{record.request_id[:8]}]")
        if hasattr(record, "duration_ms"):
            parts.append(f"({record.duration_ms}ms)")

        message = " ".join(parts)
        if record.exc_info:
            message += "\n" + "".join(traceback.format_exception(*record.exc_info))
        return message


def setup_logging(app, level="INFO", json_format=True):
    """
    Configure logging for the Flask application.

    Args:
        app: Flask application instance
        level: Logging level name
        json_format: JSON lines when true, colored console otherwise
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(JSONFormatter() if json_format else ColoredFormatter())
    root_logger.addHandler(console_handler)

    # Let Flask's logger propagate to the root handler instead of its own
    app.logger.handlers = []
    app.logger.setLevel(numeric_level)

    app.logger.info(
        "Logging configured",
        extra={"format": "json" if json_format else "colored", "level": level},
    )
    return root_logger


def setup_request_logging(app):
    """Log request start and completion, and echo the request id."""
    logger = logging.getLogger("deployer.requests")

    @app.before_request
    def before_request():
        g.request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))
        g.start_time = time.time()

        logger.info(
            f"{request.method} {request.path}",
            extra={
                "request_id": g.request_id,
                "method": request.method,
                "path": request.path,
                "remote_addr": request.remote_addr,
            },
        )

    @app.after_request
    def after_request(response):
        duration_ms = int((time.time() - g.get("start_time", time.time())) * 1000)

        if response.status_code >= 500:
            log_method = logger.error
        elif response.status_code >= 400:
            log_method = logger.warning
        else:
            log_method = logger.info

        request_id = g.get("request_id", "unknown")
        log_method(
            f"{request.method} {request.path} -> {response.status_code}",
            extra={
                "request_id": request_id,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
            },
        )

        response.headers["X-Request-ID"] = request_id
        return response
