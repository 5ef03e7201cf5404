"""
Standardized exit codes for keyconf CLI commands.
"""

from typing import Optional

import typer


EXIT_SUCCESS = 0
EXIT_ERROR = 1
EXIT_CONFIG_ERROR = 2


class CliExit(typer.Exit):
    """
    CLI exit exception that extends typer.Exit with consistent codes.

    Usage:
        raise CliExit.error("Operation failed")
        raise CliExit.config_error("Invalid value")
    """

    def __init__(self, code: int, message: Optional[str] = None):
        self.message = message
        super().__init__(code)
        if message:
            print(message)

    @classmethod
    def error(cls, message: Optional[str] = None) -> "CliExit":
        return cls(EXIT_ERROR, message)

    @classmethod
    def config_error(cls, message: Optional[str] = None) -> "CliExit":
        return cls(EXIT_CONFIG_ERROR, message)
