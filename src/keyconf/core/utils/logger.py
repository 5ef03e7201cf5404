# keyconf/core/utils/logger.py

"""
Logging configuration and utilities for keyconf.

This module provides centralized logging configuration and the standardized
message helpers used by the configuration store, the storage backends and
the CLI.

Key Features:
- Global logger instance with lazy initialization
- Standardized ``[MODULE] message | Context: ...`` format
- Configuration change and file operation logging
"""

import logging
import os
import sys
from typing import Any

# Global logger instance for singleton pattern
_logger: logging.Logger | None = None

# Library default is quiet; the CLI and host applications raise it as needed
DEFAULT_LOG_LEVEL = os.getenv("KEYCONF_LOG_LEVEL", "WARNING")
DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(
    level: str = DEFAULT_LOG_LEVEL,
    log_file: str | None = None,
    format_string: str | None = None,
) -> logging.Logger:
    """
    Set up logging configuration for keyconf.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Path to log file (optional). If provided, logs will be
                 written to both the console and the file.
        format_string: Custom log format string (optional)

    Returns:
        Configured logger instance

    Note:
        Calling this again replaces the handlers of the ``keyconf`` logger,
        so it can be used to change the level at runtime.
    """
    global _logger

    logger = logging.getLogger("keyconf")
    logger.disabled = False
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    log_level = getattr(logging, level.upper(), logging.WARNING)
    logger.setLevel(log_level)

    formatter = logging.Formatter(format_string or DEFAULT_LOG_FORMAT)

    # Log records go to stderr
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    _logger = logger
    return logger


def get_logger() -> logging.Logger:
    """
    Get the global logger instance, setting it up with defaults on first use.

    Returns:
        The global logger instance
    """
    if _logger is None:
        return setup_logging()
    return _logger


def reset_logging() -> None:
    """Drop the global logger so the next get_logger() sets it up again."""
    global _logger
    if _logger is not None:
        for handler in list(_logger.handlers):
            _logger.removeHandler(handler)
            handler.close()
    _logger = None


def _format(module: str, message: str, context: str = "") -> str:
    text = f"[{module.upper()}] {message}"
    if context:
        text += f" | Context: {context}"
    return text


def log_error(
    module: str, error: str, context: str = "", exception: Exception | None = None
) -> None:
    """
    Log a standardized error message.

    Args:
        module: Name of the module where the error occurred
        error: Error message describing what went wrong
        context: Additional context information (optional)
        exception: Exception object to include stack trace (optional)
    """
    logger = get_logger()
    message = _format(module, error, context)
    if exception:
        logger.error(message, exc_info=exception)
    else:
        logger.error(message)


def log_warning(module: str, warning: str, context: str = "") -> None:
    """
    Log a standardized warning message.

    Args:
        module: Name of the module where the warning occurred
        warning: Warning message describing the potential issue
        context: Additional context information (optional)
    """
    get_logger().warning(_format(module, warning, context))


def log_info(module: str, message: str, context: str = "") -> None:
    """Log a standardized info message."""
    get_logger().info(_format(module, message, context))


def log_debug(module: str, message: str, context: str = "") -> None:
    """Log a standardized debug message."""
    get_logger().debug(_format(module, message, context))


def log_configuration_change(setting: str, old_value: Any, new_value: Any) -> None:
    """
    Log a configuration change.

    Args:
        setting: Name of the setting that changed
        old_value: Previous value of the setting
        new_value: New value of the setting
    """
    get_logger().info(f"Configuration changed: {setting} = {old_value!r} -> {new_value!r}")


def log_file_operation(
    operation: str, file_path: str, success: bool, error: str | None = None
) -> None:
    """
    Log a file operation.

    Args:
        operation: Type of operation (read, write, ...)
        file_path: Path to the file being operated on
        success: Whether the operation was successful
        error: Error message if the operation failed (optional)
    """
    logger = get_logger()
    if success:
        logger.debug(f"File {operation}: {file_path}")
    else:
        logger.error(f"File {operation} failed: {file_path} - {error}")
