"""
Structured JSON logging for army-records

Every module logs through a child of the "army_records" package logger,
which owns the single stderr handler. stdout stays free for the JSON the
CLIs print.
"""
import logging
import os
import sys
import time

from pythonjsonlogger import jsonlogger

PACKAGE_LOGGER = "army_records"

# Log level mapping
LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

JSON_FORMAT = "%(timestamp)s %(level)s %(logger)s %(module)s %(function)s %(message)s"
TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(module)s:%(funcName)s - %(message)s"


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """
    JSON formatter adding timestamp, level, logger, module and function.

    Extra fields passed with a record (stage, stored_as, soldier_id, ...)
    are emitted as top-level keys.
    """

    def add_fields(self, log_record: dict, record: logging.LogRecord, message_dict: dict) -> None:
        super().add_fields(log_record, record, message_dict)

        if not log_record.get("timestamp"):
            log_record["timestamp"] = self.formatTime(record, self.datefmt)

        if log_record.get("level"):
            log_record["level"] = log_record["level"].upper()
        else:
            log_record["level"] = record.levelname

        log_record["logger"] = record.name
        log_record["module"] = record.module
        log_record["function"] = record.funcName


def build_formatter(format_type: str) -> logging.Formatter:
    """Formatter for "json" (default) or "text" output."""
    if format_type == "text":
        return logging.Formatter(fmt=TEXT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
    return CustomJsonFormatter(fmt=JSON_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S")


def setup_logger(
    name: str = PACKAGE_LOGGER,
    level: str | None = None,
    format_type: str | None = None,
) -> logging.Logger:
    """
    Attach a stderr handler to a logger, replacing any existing one.

    Args:
        name: Logger name (the package logger by default)
        level: Log level name, env LOG_LEVEL by default
        format_type: "json" or "text", env LOG_FORMAT by default

    Returns:
        Configured logger instance
    """
    level_name = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    log_level = LOG_LEVELS.get(level_name, logging.INFO)
    format_type = (format_type or os.getenv("LOG_FORMAT", "json")).lower()

    logger = logging.getLogger(name)
    logger.setLevel(log_level)
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(log_level)
    handler.setFormatter(build_formatter(format_type))
    logger.addHandler(handler)

    # Stop records reaching the root logger
    logger.propagate = False

    return logger


def configure_logging(settings) -> logging.Logger:
    """Configure the package logger from Settings (log_level, log_format)."""
    return setup_logger(PACKAGE_LOGGER, level=settings.log_level, format_type=settings.log_format)


def get_logger(name: str = PACKAGE_LOGGER) -> logging.Logger:
    """
    Get a logger, setting up the package logger on first use.

    Module loggers ("army_records.batch.pipeline") have no handler of
    their own and propagate to the package logger.
    """
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    if not package_logger.handlers:
        setup_logger(PACKAGE_LOGGER)

    return logging.getLogger(name)


def log_stage(logger: logging.Logger, stage: str, message: str, level: int = logging.INFO, **fields) -> None:
    """
    Log a pipeline stage transition.

    Args:
        logger: Logger to emit on
        stage: received, parsing, validating, accepted or rejected
        message: Human-readable message
        level: Logging level
        **fields: Extra structured fields (stored_as, kind, outcome, ...)
    """
    logger.log(level, message, extra={"stage": stage, **fields})


class log_operation:
    """
    Context manager for logging operation duration

    Usage:
        with log_operation("Processing file", logger=logger, stored_as="1-ab-roster.xml"):
            # do work
            pass
    """

    def __init__(self, operation_name: str, logger: logging.Logger | None = None, **extra_fields):
        """
        Initialize operation logger

        Args:
            operation_name: Name of the operation
            logger: Logger instance (the package logger if None)
            **extra_fields: Additional fields to include in logs
        """
        self.operation_name = operation_name
        self.logger = logger or get_logger()
        self.extra_fields = extra_fields
        self.start_time = None

    def __enter__(self):
        """Start operation"""
        self.start_time = time.time()
        self.logger.info(
            f"Starting: {self.operation_name}",
            extra={"operation": self.operation_name, **self.extra_fields}
        )
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """End operation"""
        duration = round(time.time() - self.start_time, 3)

        if exc_type is None:
            self.logger.info(
                f"Completed: {self.operation_name}",
                extra={
                    "operation": self.operation_name,
                    "duration_seconds": duration,
                    "status": "success",
                    **self.extra_fields
                }
            )
        else:
            self.logger.error(
                f"Failed: {self.operation_name}",
                extra={
                    "operation": self.operation_name,
                    "duration_seconds": duration,
                    "status": "error",
                    "error_type": exc_type.__name__,
                    "error_message": str(exc_val),
                    **self.extra_fields
                },
                exc_info=True
            )
        return False  # Don't suppress exceptions
