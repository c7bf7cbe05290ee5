"""Logging utility."""

import logging
from pathlib import Path
from typing import Iterable, List, Optional


APP_LOGGER_NAME = "insight_agent"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Client libraries that log every HTTP request at INFO, including Google API URLs
NOISY_LOGGERS = ("httpx", "httpcore", "anthropic")


def _build_handlers(level: int, log_file: Optional[str]) -> List[logging.Handler]:
    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
    handlers: List[logging.Handler] = [logging.StreamHandler()]

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
    return handlers


def setup_logger(
    name: str,
    log_level: str = "INFO",
    log_file: Optional[str] = None
) -> logging.Logger:
    """
    Set up a logger with console and optional file output.

    Args:
        name: Logger name
        log_level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional path to log file, its directory is created

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    level = getattr(logging, log_level.upper(), logging.INFO)
    logger.setLevel(level)

    # Prevent duplicate handlers
    if not logger.handlers:
        for handler in _build_handlers(level, log_file):
            logger.addHandler(handler)

    return logger


def quiet_libraries(names: Iterable[str] = NOISY_LOGGERS, level: int = logging.WARNING) -> None:
    """Raise the threshold of chatty client-library loggers."""
    for name in names:
        logging.getLogger(name).setLevel(level)


# Application logger instance
app_logger: Optional[logging.Logger] = None


def init_app_logger(settings) -> logging.Logger:
    """
    Initialize the application logger with settings.

    Client-library request logging is kept at WARNING unless the service
    runs in debug mode.

    Args:
        settings: Application settings instance

    Returns:
        Configured application logger
    """
    global app_logger

    app_logger = setup_logger(
        name=APP_LOGGER_NAME,
        log_level=settings.log_level,
        log_file=settings.log_file
    )
    if not settings.debug:
        quiet_libraries()

    return app_logger


def get_app_logger() -> logging.Logger:
    """
    Get the application logger.

    Returns:
        Application logger instance
    """
    if app_logger is None:
        # Return a default logger if not initialized
        return setup_logger(APP_LOGGER_NAME)

    return app_logger


def mask_secret(value: Optional[str]) -> str:
    """Mask a secret for the startup banner."""
    if not value:
        return "Not set"
    if len(value) > 12:
        return value[:8] + "..." + value[-4:]
    return "***"
