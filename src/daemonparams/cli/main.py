"""
Typer-based CLI for daemonparams.

Shows how every daemon setting resolves for the current directory, which
makes it easy to check that a property file or environment variable is
actually picked up:

    daemonparams show
    daemonparams get KEEP_ALIVE -D daemon.keepAlive=1s
    daemonparams opts --json
    daemonparams discriminator --cd path/to/project
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from daemonparams import __version__
from daemonparams.core.config.catalog import SETTINGS, get_setting
from daemonparams.core.config.errors import ConfigError
from daemonparams.core.daemon_parameters import DaemonParameters
from daemonparams.core.utils.logger import log_error, setup_logging

from .exit_codes import CliExit

console = Console()

app = typer.Typer(
    name="daemonparams",
    help="Inspect the resolved configuration of the build daemon client",
    no_args_is_help=True,
)

DEFINE_OPTION = typer.Option(
    None, "-D", "--define", help="Override a property, as key=value (repeatable)"
)
CD_OPTION = typer.Option(None, "--cd", help="Resolve as if started from this directory")


def parse_defines(defines: Optional[List[str]]) -> Dict[str, str]:
    """Turn ``key=value`` strings into overrides; a bare ``key`` maps to ``""``."""
    overrides: Dict[str, str] = {}
    for define in defines or []:
        key, _, value = define.partition("=")
        key = key.strip()
        if not key:
            raise CliExit.error(f"Invalid property definition: {define!r}")
        overrides[key] = value
    return overrides


def build_parameters(defines: Optional[List[str]], cd: Optional[Path]) -> DaemonParameters:
    parameters = DaemonParameters(parse_defines(defines))
    if cd is not None:
        parameters = parameters.cd(cd.resolve())
    return parameters


def resolve_all(parameters: DaemonParameters) -> Dict[str, Dict[str, Optional[str]]]:
    """Resolve every catalog setting, capturing errors instead of raising."""
    report: Dict[str, Dict[str, Optional[str]]] = {}
    for name, setting in SETTINGS.items():
        try:
            value = parameters.property(setting).as_string()
            report[name] = {"property": setting.property, "value": value, "error": None}
        except ConfigError as exc:
            report[name] = {"property": setting.property, "value": None, "error": exc.message}
    return report


@app.callback()
def main_callback(
    log_level: str = typer.Option(
        "WARNING", "--log-level", envvar="DAEMONPARAMS_LOG_LEVEL", help="Logging level"
    ),
) -> None:
    setup_logging(level=log_level)


@app.command()
def version() -> None:
    """Print the daemonparams version."""
    console.print(__version__)


@app.command()
def show(
    json_output: bool = typer.Option(False, "--json", help="Emit JSON report"),
    define: Optional[List[str]] = DEFINE_OPTION,
    cd: Optional[Path] = CD_OPTION,
) -> None:
    """Show every setting with its resolved value."""
    report = resolve_all(build_parameters(define, cd))
    if json_output:
        print(json.dumps(report, indent=2))
        return
    table = Table(title="Daemon parameters")
    table.add_column("Setting")
    table.add_column("Property")
    table.add_column("Value")
    for name, entry in report.items():
        if entry["error"] is not None:
            value = f"[red]{escape(entry['error'])}[/red]"
        elif entry["value"] is None:
            value = "[dim]<unset>[/dim]"
        else:
            value = escape(entry["value"])
        table.add_row(name, entry["property"] or "", value)
    console.print(table)


@app.command()
def get(
    name: str = typer.Argument(..., help="Setting name or property key"),
    define: Optional[List[str]] = DEFINE_OPTION,
    cd: Optional[Path] = CD_OPTION,
) -> None:
    """Print the resolved value of one setting."""
    try:
        setting = get_setting(name)
    except KeyError:
        raise CliExit.error(f"Unknown setting: {name}") from None
    parameters = build_parameters(define, cd)
    try:
        value = parameters.property(setting).with_failure_if_unresolved().as_string()
    except ConfigError as exc:
        log_error("cli", exc.message)
        raise CliExit.from_config_error(exc) from exc
    print(value)


@app.command()
def opts(
    json_output: bool = typer.Option(False, "--json", help="Emit a JSON object"),
    define: Optional[List[str]] = DEFINE_OPTION,
    cd: Optional[Path] = CD_OPTION,
) -> None:
    """Print the discriminating options passed to the daemon."""
    parameters = build_parameters(define, cd)
    try:
        if json_output:
            print(json.dumps(parameters.daemon_opts_map(), indent=2))
        else:
            for option in parameters.daemon_opts():
                print(option)
    except ConfigError as exc:
        raise CliExit.from_config_error(exc) from exc


@app.command()
def discriminator(
    define: Optional[List[str]] = DEFINE_OPTION,
    cd: Optional[Path] = CD_OPTION,
) -> None:
    """Print the core extensions discriminator hash."""
    parameters = build_parameters(define, cd)
    try:
        print(parameters.property("CORE_EXTENSIONS_DISCRIMINATOR").as_string())
    except ConfigError as exc:
        raise CliExit.from_config_error(exc) from exc


def main() -> None:
    app()


if __name__ == "__main__":
    main()
