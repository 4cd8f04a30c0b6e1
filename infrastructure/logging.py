"""Structured JSON logging."""
import json
import logging
import sys
import traceback
from datetime import datetime, timezone


class StructuredLogger:
    """Logger that outputs one JSON object per line, with keyword context."""

    def __init__(self, service_name: str, level: int = logging.INFO):
        self.service_name = service_name
        self.logger = logging.getLogger(service_name)
        self.logger.setLevel(level)

        # Remove existing handlers to avoid duplicates
        self.logger.handlers.clear()

        handler = self._setup_handler(sys.stdout)
        self.logger.addHandler(handler)

    def _setup_handler(self, stream):
        handler = logging.StreamHandler(stream)
        handler.setFormatter(JsonFormatter(self.service_name))
        return handler

    def info(self, message: str, **context):
        self.logger.info(message, extra={"context": context})

    def warning(self, message: str, **context):
        self.logger.warning(message, extra={"context": context})

    def error(self, message: str, exc_info: bool = False, **context):
        self.logger.error(message, exc_info=exc_info, extra={"context": context})


class JsonFormatter(logging.Formatter):
    """Formats log records as JSON."""

    def __init__(self, service_name: str):
        super().__init__()
        self.service_name = service_name

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "service": self.service_name,
            "message": record.getMessage(),
        }

        context = getattr(record, "context", None)
        if context:
            log_entry.update(context)

        if record.exc_info:
            log_entry["exception"] = self._format_exception(record.exc_info)

        return json.dumps(log_entry, default=str)

    def _format_exception(self, exc_info) -> str:
        return "".join(traceback.format_exception(*exc_info))


def get_logger(service_name: str = "food-order-service", level: int = logging.INFO) -> StructuredLogger:
    """Get a structured logger for the service."""
    return StructuredLogger(service_name=service_name, level=level)
