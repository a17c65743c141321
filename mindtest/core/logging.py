import logging
import sys
from typing import Any

from loguru import logger

from mindtest.config import get_settings

# Stdlib loggers whose output is routed through loguru
INTERCEPTED_LOGGERS = (
    "uvicorn",
    "uvicorn.error",
    "uvicorn.access",
    "sqlalchemy.engine",
    "httpx",
    "alembic",
)

DEBUG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level> {extra}"
)
PLAIN_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} | {message} {extra}"


class InterceptHandler(logging.Handler):
    """Intercept stdlib logging and redirect to loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Walk back to the frame that actually logged
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back  # type: ignore[assignment]
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def _quiet_health_filter(record: dict[str, Any]) -> bool:
    """Drop health check access lines unless running at DEBUG."""
    if "/api/health" in record.get("message", ""):
        return bool(record["level"].no <= 10)
    return True


def setup_logging() -> None:
    """
    Configure loguru for the application.

    Debug mode logs colored lines at DEBUG. Otherwise lines (or JSON records
    when ``log_json`` is set) go to stderr at ``log_level``, and to a rotating
    file when ``log_file`` is configured.
    """
    settings = get_settings()

    logger.remove()

    if settings.debug:
        logger.add(sys.stderr, level="DEBUG", format=DEBUG_FORMAT, backtrace=True, diagnose=True)
    else:
        logger.add(
            sys.stderr,
            level=settings.log_level,
            format=PLAIN_FORMAT,
            filter=_quiet_health_filter,
            serialize=settings.log_json,
            backtrace=True,
            diagnose=False,
        )

    if settings.log_file:
        logger.add(
            settings.log_file,
            level=settings.log_level,
            format=PLAIN_FORMAT,
            filter=_quiet_health_filter,
            serialize=settings.log_json,
            rotation=settings.log_rotation,
            retention=settings.log_retention,
            compression="gz",
            enqueue=True,
        )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for name in INTERCEPTED_LOGGERS:
        logging.getLogger(name).handlers = [InterceptHandler()]


def get_logger(name: str) -> Any:
    """Get a logger bound to a module name."""
    return logger.bind(name=name)
