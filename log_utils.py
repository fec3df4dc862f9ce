import json
import logging
import logging.handlers
import os
import time
import uuid
from pathlib import Path
from typing import Any, Optional

from flask import Flask, g, has_request_context, request

TEXT_FORMAT = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'


class EnhancedJSONFormatter(logging.Formatter):
    """JSON log formatter with request context."""

    def format(self, record: logging.LogRecord) -> str:
        log_record: dict[str, Any] = {
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "process_id": os.getpid(),
            "thread_id": record.thread
        }

        if has_request_context():
            log_record["request"] = {
                "method": request.method,
                "path": request.path,
                "remote_addr": request.remote_addr,
                "user_agent": request.headers.get('User-Agent', '')[:200],  # Truncate
                "request_id": g.get('request_id'),
            }
            api_version = g.get('api_version')
            if api_version is not None:
                log_record["api_version"] = str(api_version)

        if record.exc_info:
            log_record["exception"] = {
                "class": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "traceback": self.formatException(record.exc_info)
            }

        # Add custom fields from record
        for key, value in record.__dict__.items():
            if key.startswith('custom_') or key in ['duration', 'status_code']:
                log_record[key] = value

        return json.dumps(log_record, default=str)


def _formatter(use_json: bool) -> logging.Formatter:
    if use_json:
        return EnhancedJSONFormatter()
    return logging.Formatter(TEXT_FORMAT)


def setup_logging(log_file: Optional[str] = None,
                  level: int = logging.INFO,
                  stream=None,
                  use_json: bool = True,
                  max_file_size: int = 10 * 1024 * 1024,
                  backup_count: int = 5) -> None:
    """Configure root logging with a console handler and optional rotating file."""

    # Remove existing handlers to avoid duplicates
    root_logger = logging.getLogger()
    for existing_handler in root_logger.handlers[:]:
        root_logger.removeHandler(existing_handler)

    console_handler = logging.StreamHandler(stream)
    console_handler.setFormatter(_formatter(use_json))
    root_logger.addHandler(console_handler)

    log_file_path = log_file or os.environ.get('APIDEMO_LOG_FILE')
    if log_file_path:
        log_path = Path(log_file_path)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            filename=str(log_path),
            maxBytes=max_file_size,
            backupCount=backup_count,
            encoding='utf-8'
        )
        file_handler.setFormatter(_formatter(use_json))
        root_logger.addHandler(file_handler)

    root_logger.setLevel(level)


def setup_logging_from_config(logging_config, stream=None) -> None:
    """Apply a ``LoggingConfig`` section."""
    setup_logging(
        log_file=logging_config.file,
        level=logging.getLevelName(logging_config.level.upper()),
        stream=stream,
        use_json=logging_config.format == "json",
        max_file_size=logging_config.max_file_size,
        backup_count=logging_config.backup_count,
    )


def get_request_id() -> str:
    """Get or create a request ID for tracing."""
    if has_request_context():
        if 'request_id' not in g:
            g.request_id = request.headers.get('X-Request-ID') or str(uuid.uuid4())
        return g.request_id
    return str(uuid.uuid4())


def log_request_start(method: str, path: str, **kwargs) -> None:
    """Log the start of a request."""
    logger = logging.getLogger('apidemo.request')
    logger.debug(
        f"Request started: {method} {path}",
        extra={
            "custom_event": "request_start",
            "custom_method": method,
            "custom_path": path,
            **kwargs
        }
    )


def log_request_end(method: str, path: str, status_code: int, duration: float, **kwargs) -> None:
    """Log the end of a request with its status and duration."""
    logger = logging.getLogger('apidemo.request')
    logger.info(
        f"Request completed: {method} {path} {status_code} ({duration:.3f}s)",
        extra={
            "custom_event": "request_end",
            "custom_method": method,
            "custom_path": path,
            "status_code": status_code,
            "duration": duration,
            **kwargs
        }
    )


def init_request_logging(app: Flask) -> None:
    """Log every request with a request id, its duration and the served API version."""

    @app.before_request
    def _start_request_log():
        g.request_start_time = time.time()
        get_request_id()
        log_request_start(request.method, request.path)

    @app.after_request
    def _end_request_log(response):
        duration = time.time() - g.get('request_start_time', time.time())
        api_version = g.get('api_version')
        log_request_end(
            request.method,
            request.path,
            response.status_code,
            duration,
            custom_api_version=str(api_version) if api_version is not None else None,
        )
        response.headers.setdefault('X-Request-ID', get_request_id())
        return response
