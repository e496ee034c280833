"""
Logging configuration for the recording session.

This module provides structured logging configuration with different loggers
for the components of the recording core.
"""

import logging
import logging.handlers
import json
import sys
from datetime import datetime
from pathlib import Path
from typing import Dict, Any, Optional
from dataclasses import asdict, is_dataclass
from enum import Enum

from .config import settings


class StructuredFormatter(logging.Formatter):
    """Custom formatter for structured JSON logging."""

    EXTRA_FIELDS = ('session_id', 'test_case', 'operation', 'status', 'metadata')

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as structured JSON."""
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno
        }

        for name in self.EXTRA_FIELDS:
            if hasattr(record, name):
                log_data[name] = getattr(record, name)

        if record.exc_info:
            log_data['exception'] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "traceback": self.formatException(record.exc_info)
            }

        return json.dumps(log_data, default=self._json_serializer)

    def _json_serializer(self, obj):
        """Custom JSON serializer for complex objects."""
        if isinstance(obj, Enum):
            return obj.value
        elif is_dataclass(obj):
            return asdict(obj)
        elif hasattr(obj, 'isoformat'):  # datetime objects
            return obj.isoformat()
        elif hasattr(obj, '__dict__'):
            return obj.__dict__
        else:
            return str(obj)


class RecordingLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that stamps records with the active test draft."""

    def process(self, msg: str, kwargs: Dict[str, Any]) -> tuple:
        """Process log message and add contextual information."""
        if 'extra' not in kwargs:
            kwargs['extra'] = {}
        kwargs['extra'].update(self.extra)
        return msg, kwargs

    def bind(self, session_id: str = None, test_case: str = None) -> 'RecordingLoggerAdapter':
        """Return an adapter carrying a new session context."""
        extra = dict(self.extra)
        if session_id:
            extra['session_id'] = session_id
        if test_case:
            extra['test_case'] = test_case
        return RecordingLoggerAdapter(self.logger, extra)

    def log_command(self, operation: str, status: str, **metadata):
        """Log a dispatched command and the lifecycle status it produced."""
        self.info(f"Applied {operation} ({status})", extra={
            'operation': operation,
            'status': status,
            'metadata': metadata
        })


def setup_recording_logging(log_level: Optional[str] = None, log_dir: Optional[str] = None) -> Dict[str, logging.Logger]:
    """
    Set up structured logging for the recording core.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR); defaults to
            settings.RECORDING_LOG_LEVEL
        log_dir: Directory to store log files; defaults to
            settings.RECORDING_LOG_DIR

    Returns:
        Dictionary of configured loggers
    """
    log_level = log_level or settings.RECORDING_LOG_LEVEL
    log_dir = log_dir or settings.RECORDING_LOG_DIR

    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, log_level.upper()))

    # Remove existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    structured_formatter = StructuredFormatter()
    console_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    # Console handler for development
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(console_formatter)
    console_handler.setLevel(getattr(logging, log_level.upper()))

    all_logs_handler = logging.handlers.RotatingFileHandler(
        log_path / "recording_all.log",
        maxBytes=10 * 1024 * 1024,  # 10MB
        backupCount=5
    )
    all_logs_handler.setFormatter(structured_formatter)
    all_logs_handler.setLevel(logging.DEBUG)

    # Session commands only
    session_handler = logging.handlers.RotatingFileHandler(
        log_path / "recording_sessions.log",
        maxBytes=10 * 1024 * 1024,  # 10MB
        backupCount=10
    )
    session_handler.setFormatter(structured_formatter)
    session_handler.setLevel(logging.INFO)

    error_handler = logging.handlers.RotatingFileHandler(
        log_path / "recording_errors.log",
        maxBytes=5 * 1024 * 1024,  # 5MB
        backupCount=10
    )
    error_handler.setFormatter(structured_formatter)
    error_handler.setLevel(logging.ERROR)

    root_logger.addHandler(console_handler)
    root_logger.addHandler(all_logs_handler)

    loggers = {}
    for component in ("session", "config"):
        component_logger = logging.getLogger(f"recording.{component}")
        component_logger.addHandler(session_handler)
        component_logger.addHandler(error_handler)
        loggers[component] = component_logger

    return loggers


def get_recording_logger(component: str, session_id: str = None, test_case: str = None) -> RecordingLoggerAdapter:
    """
    Get a recording logger adapter with contextual information.

    Args:
        component: Component name (session, config)
        session_id: Optional id of the test draft being recorded
        test_case: Optional test name

    Returns:
        RecordingLoggerAdapter instance
    """
    return RecordingLoggerAdapter(logging.getLogger(f"recording.{component}"), {}).bind(
        session_id=session_id, test_case=test_case
    )
