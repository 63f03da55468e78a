"""
Logging infrastructure for the portal calculation core.

Provides:
- Structured logging with timestamps
- Different log levels (DEBUG, INFO, WARNING, ERROR)
- File and console output
- Error and warning tracking for end-of-run summaries
"""

import logging
import sys
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(filename)s:%(lineno)d | %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S,%f"


class MillisecondsFormatter(logging.Formatter):
    """Custom formatter that includes milliseconds and aligns log levels."""

    def formatTime(self, record, datefmt=None):  # noqa: N802 - must match parent class method name
        """Override formatTime to include milliseconds."""
        ct = datetime.fromtimestamp(record.created)
        if datefmt and "%f" in datefmt:
            # Format without %f, then append milliseconds (3 digits)
            s = ct.strftime(datefmt.replace(",%f", ""))
            return s + f",{int(record.msecs):03d}"
        elif datefmt:
            return ct.strftime(datefmt)
        else:
            return ct.strftime("%Y-%m-%d %H:%M:%S") + f",{int(record.msecs):03d}"


def _format_kwargs(message: str, kwargs: dict) -> str:
    if not kwargs:
        return message
    formatted_data = " ".join(f"{k}={v}" for k, v in kwargs.items())
    return f"{message} [{formatted_data}]"


class PortalLogger:
    """
    Centralized logger for CLI runs with structured output.
    """

    def __init__(
        self,
        name: str = "pb_portal",
        log_level: str = "INFO",
        log_file: Optional[str] = None,
        log_dir: Optional[Path] = None,
    ):
        """
        Initialize the portal logger.

        Args:
            name: Logger name
            log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
            log_file: Optional log file name
            log_dir: Directory for log files (required when log_file is set)
        """
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, log_level.upper()))

        # Prevent propagation to root logger to avoid duplicate logs
        self.logger.propagate = False

        if self.logger.handlers:
            self.logger.handlers.clear()

        formatter = MillisecondsFormatter(LOG_FORMAT, datefmt=LOG_DATEFMT)

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(getattr(logging, log_level.upper()))
        console_handler.setFormatter(formatter)
        self.logger.addHandler(console_handler)

        if log_file:
            if log_dir is None:
                raise ValueError("log_dir is required when log_file is set")
            log_dir.mkdir(parents=True, exist_ok=True)
            log_path = log_dir / log_file

            file_handler = logging.FileHandler(log_path)
            file_handler.setLevel(logging.DEBUG)  # Log everything to file
            file_handler.setFormatter(formatter)
            self.logger.addHandler(file_handler)

            self.info(f"Logging to file: {log_path}")

        self.errors = []
        self.warnings = []

    def debug(self, message: str, **kwargs):
        """Log debug message with optional structured data."""
        self.logger.debug(_format_kwargs(message, kwargs), stacklevel=2)

    def info(self, message: str, **kwargs):
        """Log info message with optional structured data."""
        self.logger.info(_format_kwargs(message, kwargs), stacklevel=2)

    def warning(self, message: str, **kwargs):
        """Log warning message and track for reporting."""
        message = _format_kwargs(message, kwargs)
        self.logger.warning(message, stacklevel=2)
        self.warnings.append(
            {
                "message": message,
                "timestamp": datetime.now().isoformat(),
                "data": kwargs,
            }
        )

    def error(self, message: str, exception: Optional[Exception] = None, **kwargs):
        """Log error message and track for reporting."""
        if exception:
            message = f"{message} | Exception: {str(exception)}"
        message = _format_kwargs(message, kwargs)

        self.logger.error(message, exc_info=exception is not None, stacklevel=2)
        self.errors.append(
            {
                "message": message,
                "exception": str(exception) if exception else None,
                "timestamp": datetime.now().isoformat(),
                "data": kwargs,
            }
        )

    @contextmanager
    def time_operation(self, operation: str, **context):
        """
        Context manager to time and log a CLI operation.

        Usage:
            with logger.time_operation("finance report", round_id="2025"):
                # ... perform operation ...
        """
        start_time = datetime.now()
        self.debug(f"Starting {operation}", **context)
        try:
            yield
            duration = (datetime.now() - start_time).total_seconds()
            self.info(f"Completed {operation}", duration_seconds=round(duration, 3), **context)
        except Exception as e:
            duration = (datetime.now() - start_time).total_seconds()
            self.error(f"Failed {operation}", exception=e, duration_seconds=round(duration, 3), **context)
            raise

    def get_error_summary(self) -> dict:
        """Get summary of errors and warnings for reporting."""
        return {
            "total_errors": len(self.errors),
            "total_warnings": len(self.warnings),
            "errors": self.errors,
            "warnings": self.warnings,
        }

    def clear_tracking(self):
        """Clear tracked errors and warnings."""
        self.errors = []
        self.warnings = []


# ============================================================================
# Global Logger Instance
# ============================================================================

# Default logger instance for convenience
_default_logger: Optional[PortalLogger] = None


def setup_logger(
    name: str = "pb_portal",
    log_level: str = "INFO",
    log_file: Optional[str] = None,
    log_dir: Optional[Path] = None,
) -> PortalLogger:
    """
    Get or create the default portal logger.

    Args:
        name: Logger name
        log_level: Logging level
        log_file: Optional log file
        log_dir: Directory for the log file

    Returns:
        PortalLogger instance
    """
    global _default_logger

    if _default_logger is None:
        _default_logger = PortalLogger(
            name=name,
            log_level=log_level,
            log_file=log_file,
            log_dir=log_dir,
        )

    return _default_logger


def reset_logger():
    """Drop the default logger so the next setup_logger() call builds a new one."""
    global _default_logger
    _default_logger = None


def configure_global_logging(log_level: str = "INFO"):
    """
    Configure the root logger with the unified format.

    Library modules log through ``logging.getLogger(__name__)``; calling this
    early in CLI startup makes their output match PortalLogger's.
    """
    formatter = MillisecondsFormatter(LOG_FORMAT, datefmt=LOG_DATEFMT)

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, log_level.upper()))
    root_logger.handlers.clear()

    root_handler = logging.StreamHandler(sys.stdout)
    root_handler.setLevel(getattr(logging, log_level.upper()))
    root_handler.setFormatter(formatter)
    root_logger.addHandler(root_handler)
