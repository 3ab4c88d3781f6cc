"""
Logger configuration for Persona Content Studio using Loguru.

Sinks:
- colored console output
- app.log (everything from DEBUG up)
- errors.log
- requests.log, fed by the HTTP middleware helpers
- performance.log, fed by ``log_performance``
- generations.log, fed by ``log_generation_transition``
"""

import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from fastapi import Request
from loguru import logger

from app.config.settings import settings

FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"
TAGGED_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {message}"
CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)


def _tagged(tag: str):
    return lambda record: record["message"].startswith(tag)


class LoguruConfig:
    """Loguru configuration class for the application."""

    def __init__(self, app_name: str = "persona-content-studio", logs_dir: str = "logs"):
        self.app_name = app_name
        self.logs_dir = Path(logs_dir)
        self.logs_dir.mkdir(parents=True, exist_ok=True)

    def file_sinks(self) -> List[Dict[str, Any]]:
        """Rotating file sinks as ``logger.add`` keyword arguments."""
        return [
            {"sink": self.logs_dir / "app.log", "format": FILE_FORMAT, "level": "DEBUG",
             "rotation": "10 MB", "retention": "7 days", "backtrace": True},
            {"sink": self.logs_dir / "errors.log", "format": FILE_FORMAT, "level": "ERROR",
             "rotation": "5 MB", "retention": "30 days", "backtrace": True},
            {"sink": self.logs_dir / "requests.log", "format": TAGGED_FORMAT, "level": "INFO",
             "rotation": "20 MB", "retention": "14 days", "filter": _tagged("REQUEST")},
            {"sink": self.logs_dir / "performance.log", "format": TAGGED_FORMAT, "level": "INFO",
             "rotation": "10 MB", "retention": "7 days", "filter": _tagged("PERFORMANCE")},
            {"sink": self.logs_dir / "generations.log", "format": TAGGED_FORMAT, "level": "INFO",
             "rotation": "10 MB", "retention": "30 days", "filter": _tagged("GENERATION")},
        ]

    def setup_logger(self, log_level: str = "INFO") -> None:
        """Configure Loguru logger for the application."""
        logger.remove()

        logger.add(
            sys.stdout,
            format=CONSOLE_FORMAT,
            level=log_level,
            colorize=True,
            backtrace=True,
            diagnose=False,
        )

        for sink in self.file_sinks():
            # Never log local variables: composed prompts and tokens live there
            logger.add(compression="zip", encoding="utf-8", diagnose=False, **sink)


def _client_ip(request: Request) -> Optional[str]:
    return request.client.host if request.client else None


def log_request_start(request: Request) -> None:
    """Log the start of a request."""
    logger.info(
        "REQUEST START: {method} {path}",
        method=request.method,
        path=request.url.path,
        extra={
            "query_params": str(request.query_params),
            "client_ip": _client_ip(request),
            "user_agent": request.headers.get("user-agent"),
            "timestamp": datetime.now().isoformat(),
        }
    )


def log_request_end(request: Request, status_code: int, process_time: float) -> None:
    """Log the completion of a request."""
    logger.info(
        "REQUEST END: {method} {path} - {status_code} ({process_time:.4f}s)",
        method=request.method,
        path=request.url.path,
        status_code=status_code,
        process_time=round(process_time, 4),
        extra={"client_ip": _client_ip(request)},
    )


def log_request_error(request: Request, error: Exception, process_time: float) -> None:
    """Log a request that raised before producing a response."""
    logger.error(
        "REQUEST ERROR: {method} {path} - {error} ({process_time:.4f}s)",
        method=request.method,
        path=request.url.path,
        error=str(error),
        process_time=round(process_time, 4),
        extra={
            "error_type": type(error).__name__,
            "client_ip": _client_ip(request),
        }
    )


def log_performance(operation: str, duration: float, **kwargs) -> None:
    """Log how long an operation took."""
    logger.info(
        "PERFORMANCE: {operation} completed in {duration:.4f}s",
        operation=operation,
        duration=duration,
        **kwargs
    )


def log_generation_transition(generation_id: str, status: str, detail: str = "", **kwargs) -> None:
    """Log a generation moving into ``status``.

    ``detail`` must be safe to persist: a model name or a normalized error
    message, never the composed prompt.
    """
    level = "WARNING" if status == "failed" else "INFO"
    logger.log(
        level,
        "GENERATION {generation_id} -> {status}" + (" ({detail})" if detail else ""),
        generation_id=generation_id,
        status=status,
        detail=detail,
        **kwargs
    )


loguru_config = LoguruConfig(logs_dir=settings.LOG_DIR)
loguru_config.setup_logger(settings.LOG_LEVEL)

# Export logger for use in other modules
app_logger = logger
