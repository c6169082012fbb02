"""
Structured logging configuration using Loguru.
Provides consistent logging across all components with trace_id support.
"""

import json
import sys
import uuid
from contextlib import contextmanager
from typing import Any, Dict, Optional

from loguru import logger

from src.coinboard.config import settings


def serialize(record: Dict[str, Any]) -> str:
    """Serialize log record to JSON format."""
    subset = {
        "timestamp": record["time"].isoformat(),
        "level": record["level"].name,
        "service": settings.service_name,
        "message": record["message"],
        "module": record["module"],
        "function": record["function"],
        "line": record["line"],
    }

    if "trace_id" in record["extra"]:
        subset["trace_id"] = record["extra"]["trace_id"]

    for key, value in record["extra"].items():
        if key not in subset:
            subset[key] = value

    if record["exception"] is not None:
        subset["exception"] = {
            "type": record["exception"].type.__name__,
            "value": str(record["exception"].value),
        }

    # loguru formats the returned string, so braces must be escaped
    return json.dumps(subset, default=str).replace("{", "{{").replace("}", "}}") + "\n"


def format_text(record: Dict[str, Any]) -> str:
    """Format log record for text output."""
    format_string = "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan>"

    if "trace_id" in record["extra"]:
        format_string += " | <yellow>{extra[trace_id]}</yellow>"

    format_string += " - <level>{message}</level>\n"

    if record["exception"] is not None:
        format_string += "{exception}\n"

    return format_string


def configure_logging():
    """Configure logging based on settings."""
    logger.remove()

    if settings.monitoring.log_format == "json":
        logger.add(
            sys.stdout,
            format=serialize,
            level=settings.monitoring.log_level,
            backtrace=True,
            diagnose=False,
        )
    else:
        logger.add(
            sys.stdout,
            format=format_text,
            level=settings.monitoring.log_level,
            colorize=True,
            backtrace=True,
            diagnose=False,
        )

    if settings.monitoring.log_file:
        logger.add(
            settings.monitoring.log_file,
            format=serialize,
            level=settings.monitoring.log_level,
            rotation="100 MB",
            retention="7 days",
            compression="gz",
            backtrace=True,
            diagnose=False,
        )

    logger.info(
        "Logging configured",
        service=settings.service_name,
        environment=settings.environment.value,
        log_level=settings.monitoring.log_level,
        log_format=settings.monitoring.log_format,
    )


@contextmanager
def trace_context(trace_id: Optional[str] = None):
    """Context manager for adding trace_id to all logs within the context."""
    if trace_id is None:
        trace_id = str(uuid.uuid4())

    with logger.contextualize(trace_id=trace_id):
        yield trace_id


def get_logger(name: str):
    """Get a logger instance with the given name."""
    return logger.bind(component=name)


# Configure logging on import
configure_logging()


__all__ = ["logger", "get_logger", "trace_context", "configure_logging"]
