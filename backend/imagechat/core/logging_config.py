"""
Centralized logging configuration for the ImageChat backend.

This module provides:
- Console output with colored formatting
- Rotating file output with JSON structured records
- A session-scoped adapter that stamps records with the session id
"""

import json
import logging
import logging.handlers
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict


class ColoredFormatter(logging.Formatter):
    """Adds ANSI colors to the level name for console output."""

    COLORS = {
        'DEBUG': '\033[36m',     # Cyan
        'INFO': '\033[32m',      # Green
        'WARNING': '\033[33m',   # Yellow
        'ERROR': '\033[31m',     # Red
        'CRITICAL': '\033[35m',  # Magenta
        'RESET': '\033[0m',
    }

    def format(self, record: logging.LogRecord) -> str:
        level_color = self.COLORS.get(record.levelname, self.COLORS['RESET'])
        record.levelname = f"{level_color}{record.levelname:8s}{self.COLORS['RESET']}"
        return super().format(record)


class JSONFormatter(logging.Formatter):
    """Renders a log record as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "function": record.funcName,
            "line": record.lineno,
            "message": record.getMessage(),
        }

        # Structured fields passed as extra={"extra_fields": {...}}
        if hasattr(record, 'extra_fields'):
            log_data.update(record.extra_fields)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, ensure_ascii=False, default=str)


def setup_logging(config: Any) -> None:
    """
    Configure the root logger from application settings.

    Args:
        config: Settings object with log_level, log_console_enabled,
            log_file_enabled and log_file_path
    """
    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    log_level = getattr(logging, config.log_level.upper(), logging.INFO)
    root_logger.setLevel(log_level)

    if config.log_console_enabled:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(log_level)
        console_handler.setFormatter(ColoredFormatter(
            "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        ))
        root_logger.addHandler(console_handler)

    if config.log_file_enabled:
        log_path = Path(config.log_file_path)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        # 10 MB per file, keep 5 backups
        file_handler = logging.handlers.RotatingFileHandler(
            filename=config.log_file_path,
            maxBytes=10 * 1024 * 1024,
            backupCount=5,
            encoding='utf-8'
        )
        file_handler.setLevel(log_level)

        # Files always get one JSON object per line
        file_handler.setFormatter(JSONFormatter())
        root_logger.addHandler(file_handler)

    # Quiet the HTTP client and server access logs
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    root_logger.info(
        f"Logging initialized: level={config.log_level.upper()}, "
        f"console={config.log_console_enabled}, "
        f"file={config.log_file_enabled}"
    )


class SessionLoggerAdapter(logging.LoggerAdapter):
    """
    Stamps every record with the adapter's context (e.g. session_id).

    Usage:
        logger = SessionLoggerAdapter(logging.getLogger(__name__), {"session_id": "default"})
        logger.info("Prompt submitted")
    """

    def process(self, msg: str, kwargs: Dict[str, Any]) -> tuple:
        if 'extra' not in kwargs:
            kwargs['extra'] = {}

        kwargs['extra']['extra_fields'] = {**self.extra, **kwargs['extra'].get('extra_fields', {})}

        return f"[{self.extra.get('session_id', '-')}] {msg}", kwargs


def truncate_large_data(data: str, max_length: int = 500) -> str:
    """
    Truncate long text before it goes into a log line.

    Args:
        data: Text to truncate
        max_length: Maximum length in characters

    Returns:
        The text, cut with a length note if it was longer than max_length
    """
    if len(data) <= max_length:
        return data
    return data[:max_length] + f"... (truncated, total length: {len(data)})"
