"""
Exit codes of the daemonparams CLI.

A setting that cannot be resolved, or a configured value that does not
parse, exits with ``EXIT_CONFIG_ERROR`` so scripts can tell a broken
configuration apart from a usage error.
"""

from typing import Optional

import typer
from rich import print
from rich.markup import escape

from daemonparams.core.config.errors import ConfigError

EXIT_SUCCESS = 0
EXIT_ERROR = 1
EXIT_CONFIG_ERROR = 2


class CliExit(typer.Exit):
    """
    typer.Exit carrying one of the codes above and an optional message.

    Usage:
        raise CliExit.error("Unknown setting: FOO")
        raise CliExit.from_config_error(exc) from exc
    """

    def __init__(self, code: int, message: Optional[str] = None):
        self.message = message
        super().__init__(code)
        if message:
            print(escape(message))

    @classmethod
    def error(cls, message: Optional[str] = None) -> "CliExit":
        return cls(EXIT_ERROR, message)

    @classmethod
    def config_error(cls, message: Optional[str] = None) -> "CliExit":
        return cls(EXIT_CONFIG_ERROR, message)

    @classmethod
    def from_config_error(cls, error: ConfigError) -> "CliExit":
        return cls.config_error(error.message)
