# utils/logging.py
"""
Logging setup for the donation API.

Standard library logging with a readable console format by default and a
JSON formatter for log shippers (LOG_JSON=true).

Usage:
     from utils.logging import configure_logging

     configure_logging(level="INFO", json_logs=False)
     logger = logging.getLogger(__name__)
     logger.info("Recorded donation %s", donation.id)
"""
import json
import logging
import logging.config
import os
from typing import Any, Dict, Optional


class JsonFormatter(logging.Formatter):
     """One JSON object per log line."""

     def format(self, record: logging.LogRecord) -> str:
          payload: Dict[str, Any] = {
               "time": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
               "level": record.levelname,
               "logger": record.name,
               "message": record.getMessage(),
          }
          if record.exc_info:
               payload["exc_info"] = self.formatException(record.exc_info)
          for key in ("method", "path", "status_code", "duration_ms"):
               if hasattr(record, key):
                    payload[key] = getattr(record, key)
          return json.dumps(payload, default=str)


def configure_logging(level: Optional[str] = None, json_logs: Optional[bool] = None) -> None:
     """
     Configure root logging once at startup.

     Falls back to LOG_LEVEL (default INFO) and LOG_JSON (default false)
     when the arguments are not given.
     """
     level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
     if json_logs is None:
          json_logs = os.getenv("LOG_JSON", "false").lower() == "true"

     logging.config.dictConfig({
          "version": 1,
          "disable_existing_loggers": False,
          "formatters": {
               "console": {
                    "format": "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
                    "datefmt": "%Y-%m-%d %H:%M:%S",
               },
               "json": {
                    "()": JsonFormatter,
               },
          },
          "handlers": {
               "default": {
                    "class": "logging.StreamHandler",
                    "formatter": "json" if json_logs else "console",
                    "level": level,
               },
          },
          "root": {
               "handlers": ["default"],
               "level": level,
          },
     })
