"""
Logging Configuration
Sets up structlog for the CLI and the API server.
"""
import logging
import sys

import structlog


def _stderr_logger(*args) -> structlog.PrintLogger:
    # Resolve sys.stderr per call so redirected streams are honoured
    return structlog.PrintLogger(file=sys.stderr)


def setup_logging(level: str = "INFO", json_logs: bool = False) -> None:
    """
    Configures structlog's global pipeline.

    Args:
        level: Level name (e.g. "DEBUG", "INFO"); events below it are dropped.
        json_logs: Render one JSON object per line instead of console output.
    """
    level_value = logging.getLevelName(level.upper())
    if not isinstance(level_value, int):
        level_value = logging.INFO

    renderer = (
        structlog.processors.JSONRenderer()
        if json_logs
        else structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="%H:%M:%S"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level_value),
        logger_factory=_stderr_logger,
        cache_logger_on_first_use=False,
    )
