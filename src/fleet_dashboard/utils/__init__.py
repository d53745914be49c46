"""Shared utility helpers for the Fleet dashboard."""

from .logging import LoggingOptions, configure_logging, get_logger, log_file_path
from .errors import ErrorDescriptor, ErrorSeverity, describe_exception

__all__ = [
    "LoggingOptions",
    "configure_logging",
    "get_logger",
    "log_file_path",
    "ErrorDescriptor",
    "ErrorSeverity",
    "describe_exception",
]
