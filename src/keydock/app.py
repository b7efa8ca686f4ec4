"""Typer application and CLI entry point for keydock.

This module wires together the top-level Typer application and registers
the built-in sub-command groups (``auth``, ``channels``).

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. It installs signal handlers and invokes the Typer app.
Unhandled exceptions are written to a crash log under the data directory.

See Also:
    :mod:`keydock.config`: Directory and gateway configuration resolution.
    :mod:`keydock.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import logging
import signal
import sys
import traceback
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

import typer

from keydock import __version__
from keydock.commands.auth import auth_app
from keydock.commands.channels import channels_app
from keydock.exit_codes import EXIT_GENERIC_FAILURE

app = typer.Typer(
    name="keydock",
    help="Inspect provider credential resolution and channel docks.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

app.add_typer(auth_app, name="auth", help="Provider credential resolution and profiles.")
app.add_typer(channels_app, name="channels", help="Channel dock inspection.")


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"keydock {__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool, handler: logging.Handler) -> None:
    """Route ``keydock.*`` log records to stderr when *verbose* is set."""
    logger = logging.getLogger("keydock")
    for existing in list(logger.handlers):
        logger.removeHandler(existing)
    if verbose:
        logger.addHandler(handler)
        logger.setLevel(logging.DEBUG)
    else:
        logger.setLevel(logging.WARNING)


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    json_output: bool = typer.Option(
        False, "--json", help="JSON output format."
    ),
    plain_output: bool = typer.Option(
        False, "--plain", help="Plain text output."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output."
    ),
    agent_dir: Optional[Path] = typer.Option(
        None, "--agent-dir", help="Agent directory holding auth-profiles.json."
    ),
    config_path: Optional[Path] = typer.Option(
        None, "--config", help="Gateway config file (defaults to config.json in the config dir)."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Initialises the global :class:`~keydock.output.OutputManager` from CLI
    flags and stores shared options in ``ctx.obj`` so that sub-commands can
    read them.

    Args:
        ctx: Typer invocation context.
        version: If ``True``, print the version string and exit.
        json_output: Force JSON output format.
        plain_output: Force plain-text output format.
        no_color: Disable all colour and Rich markup.
        quiet: Suppress non-essential diagnostic output.
        verbose: Enable debug-level diagnostics and library logging.
        agent_dir: Agent directory override (highest precedence).
        config_path: Gateway config file override (highest precedence).
    """
    from keydock.output import OutputFormat, OutputManager, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    output = OutputManager(
        format=fmt,
        no_color=no_color,
        quiet=quiet,
        verbose=verbose,
    )
    set_output(output)
    _configure_logging(verbose, output.log_handler())

    ctx.ensure_object(dict)
    ctx.obj["agent_dir"] = agent_dir
    ctx.obj["config_path"] = config_path
    ctx.obj["verbose"] = verbose


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path.

    Only the exception type and traceback frames are written; exception
    messages from secret backends never reach the log.
    """
    from keydock.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    frames = traceback.format_tb(exc.__traceback__)
    log_path.write_text("".join(frames) + f"{type(exc).__name__}\n")
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``keydock`` console script.

    Unhandled :class:`~keydock.exceptions.KeydockError` instances cause a
    clean exit with the error's ``exit_code``. All other exceptions produce
    a crash log and a generic failure exit.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from keydock.exceptions import KeydockError
        from keydock.output import error

        if isinstance(exc, KeydockError):
            error(str(exc))
            sys.exit(exc.exit_code)
        else:
            log_path = _write_crash_log(exc)
            error(f"Unexpected error. Debug log: {log_path}")
            sys.exit(EXIT_GENERIC_FAILURE)
