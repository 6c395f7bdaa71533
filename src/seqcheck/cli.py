# src/seqcheck/cli.py
"""seqcheck Command Line Interface.

Entry point for the seqcheck CLI tool: checks recorded histories offline
and validates run settings.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import TYPE_CHECKING

import typer
from dynaconf.vendor.ruamel.yaml.parser import ParserError as YamlParserError
from dynaconf.vendor.ruamel.yaml.scanner import ScannerError as YamlScannerError
from pydantic import ValidationError

from seqcheck import __version__
from seqcheck.contracts import CheckOptions, ComposedVerdict, History, HistoryError, SequentialVerdict, StatsVerdict
from seqcheck.core.config import load_settings, resolve_config

if TYPE_CHECKING:
    from seqcheck.plugins.manager import PluginManager

__all__ = ["app"]

DEFAULT_CHECKERS = ["sequential", "stats"]

# Module-level singleton for plugin manager
_plugin_manager_cache: PluginManager | None = None


def _get_plugin_manager() -> PluginManager:
    """Get initialized plugin manager (singleton)."""
    global _plugin_manager_cache

    from seqcheck.plugins.manager import PluginManager

    if _plugin_manager_cache is None:
        manager = PluginManager()
        manager.register_builtin_plugins()
        _plugin_manager_cache = manager
    return _plugin_manager_cache


app = typer.Typer(
    name="seqcheck",
    help="seqcheck: sequential-consistency workloads and history checking.",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"seqcheck version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose/debug logging.",
    ),
    json_logs: bool = typer.Option(
        False,
        "--json-logs",
        help="Output structured JSON logs (for machine processing).",
    ),
) -> None:
    """seqcheck: sequential-consistency workloads and history checking."""
    from seqcheck.core.logging import configure_logging

    log_level = "DEBUG" if verbose else "INFO"
    configure_logging(json_output=json_logs, level=log_level)


def _format_error(title: str, message: str, hint: str | None = None, details: list[str] | None = None) -> None:
    """Display a formatted error panel on stderr."""
    from rich.console import Console
    from rich.panel import Panel
    from rich.text import Text

    content = Text()
    content.append(message)
    if details:
        content.append("\n\n")
        for detail in details:
            content.append(f"  - {detail}\n", style="dim")
    if hint:
        content.append("\n")
        content.append("Hint: ", style="yellow bold")
        content.append(hint, style="yellow")

    Console(stderr=True).print(Panel(content, title=f"[red bold]{title}[/]", border_style="red", expand=False))


def _print_verdict(verdict: ComposedVerdict) -> None:
    for name, result in verdict.results.items():
        status = "valid" if result.valid else "INVALID"
        typer.secho(f"{name}: {status}", fg=typer.colors.GREEN if result.valid else typer.colors.RED, bold=True)
        if isinstance(result, SequentialVerdict):
            counts = ", ".join(f"{category.value}={n}" for category, n in result.counts.items())
            typer.echo(f"  reads: {counts}")
            for op in result.violations:
                typer.echo(f"  violation: process {op.process} read {op.key!r} -> {list(op.value)}")
        elif isinstance(result, StatsVerdict):
            for function, counts in sorted(result.by_function.items()):
                summary = ", ".join(f"{kind}={n}" for kind, n in counts.items())
                typer.echo(f"  {function}: {summary}")
            if result.errors:
                summary = ", ".join(f"{kind}={n}" for kind, n in sorted(result.errors.items()))
                typer.echo(f"  errors: {summary}")
    typer.secho(
        "History is valid" if verdict.valid else "History is INVALID",
        fg=typer.colors.GREEN if verdict.valid else typer.colors.RED,
        bold=True,
    )


@app.command()
def check(
    history_path: Path = typer.Argument(
        ...,
        metavar="HISTORY",
        help="Recorded history, one JSON operation per line.",
    ),
    key_count: int = typer.Option(
        5,
        "--key-count",
        "-k",
        min=1,
        help="Sub-keys per logical key used when the history was recorded.",
    ),
    checker_names: list[str] | None = typer.Option(
        None,
        "--checker",
        "-c",
        help="Checker to run (repeatable). Defaults to sequential and stats.",
    ),
    as_json: bool = typer.Option(
        False,
        "--json",
        help="Print the verdict as JSON.",
    ),
) -> None:
    """Check a recorded history for sequential-consistency violations.

    Exits 0 when valid, 1 when any checker finds the history invalid and
    2 when the history cannot be read.
    """
    from seqcheck.plugins.checkers import ComposedChecker

    manager = _get_plugin_manager()
    names = checker_names or DEFAULT_CHECKERS
    try:
        checkers = {name: manager.create_checker(name) for name in names}
    except ValueError as e:
        _format_error("Unknown Checker", str(e))
        raise typer.Exit(2) from None

    try:
        history = History.from_jsonl(history_path)
        history.validate()
        verdict = ComposedChecker(checkers).check(history, CheckOptions(key_count=key_count))
    except FileNotFoundError:
        _format_error("File Not Found", f"History file does not exist: {history_path}")
        raise typer.Exit(2) from None
    except (HistoryError, OSError) as e:
        _format_error("Unreadable History", str(e), hint="Each line must be one operation record.")
        raise typer.Exit(2) from None

    if as_json:
        typer.echo(json.dumps(verdict.to_dict(), indent=2))
    else:
        _print_verdict(verdict)

    if not verdict.valid:
        raise typer.Exit(1)


@app.command()
def validate(
    settings: str = typer.Option(
        ...,
        "--settings",
        "-s",
        help="Path to settings YAML file.",
    ),
) -> None:
    """Validate a settings file and print the resolved configuration."""
    settings_path = Path(settings).expanduser()

    try:
        config = load_settings(settings_path)
    except (YamlParserError, YamlScannerError) as e:
        _format_error(
            "YAML Syntax Error",
            f"Failed to parse {settings_path.name}",
            details=[str(e.problem)] if hasattr(e, "problem") else None,
            hint="Check for unclosed brackets, incorrect indentation, or invalid characters.",
        )
        raise typer.Exit(1) from None
    except FileNotFoundError:
        _format_error(
            "File Not Found",
            f"Settings file does not exist: {settings}",
            hint="Check the path and ensure the file exists.",
        )
        raise typer.Exit(1) from None
    except ValidationError as e:
        details = [f"{'.'.join(str(x) for x in error['loc'])}: {error['msg']}" for error in e.errors()]
        _format_error(
            "Configuration Validation Failed",
            f"Invalid settings in {settings_path.name}",
            details=details,
            hint="Check field names, types, and required values.",
        )
        raise typer.Exit(1) from None

    typer.echo(json.dumps(resolve_config(config), indent=2))


if __name__ == "__main__":
    app()
