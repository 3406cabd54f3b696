"""session-reveal CLI - open the file an agent session last referenced."""

import logging
import os
import sys
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import NoReturn

import click
from rich.markup import escape

from .actions import ActionContext
from .actions import ConsoleNotifier
from .actions import SubprocessExecutor
from .actions import preview_latest
from .actions import reveal_latest
from .commands.session import sessions
from .console import err_console
from .logging_setup import init_json_logging
from .models import ActionOutcome
from .resolver import find_latest_reference
from .session_store import SessionLog
from .session_store import SessionStore
from .session_store import load_transcript
from .settings import SettingsManager

logger = logging.getLogger(__name__)


@dataclass
class CliState:
    """Values resolved once at startup and shared by all commands."""

    settings: SettingsManager
    sessions_dir: Path | None = None

    def store(self) -> SessionStore:
        return SessionStore(base_dir=self.sessions_dir)


def session_source_options(f: Callable) -> Callable:
    """Options selecting which session history to search."""
    f = click.option(
        "--cwd",
        type=click.Path(file_okay=False),
        help="Directory relative references resolve against (default: current directory)",
    )(f)
    f = click.option(
        "--transcript",
        "-t",
        type=click.Path(exists=True, dir_okay=False, path_type=Path),
        help="Read history from a transcript JSONL file instead of the session store",
    )(f)
    f = click.option(
        "--session",
        "-s",
        "session_id",
        help="Session ID to search (default: most recent session)",
    )(f)
    return f


def _fail(message: str) -> NoReturn:
    err_console.print(f"[red]Error:[/red] {escape(message)}")
    sys.exit(1)


def open_session(state: CliState, session_id: str | None, transcript: Path | None) -> SessionLog:
    """Load the session history selected on the command line."""
    if transcript is not None:
        try:
            return SessionLog(load_transcript(transcript))
        except (OSError, ValueError) as e:
            _fail(f"Could not read transcript {transcript}: {e}")

    store = state.store()
    if session_id is None:
        session_id = store.latest_session()
        if session_id is None:
            _fail(f"No sessions found in {store.base_dir}")

    try:
        return store.open_log(session_id)
    except (FileNotFoundError, ValueError) as e:
        _fail(str(e))


@click.group(invoke_without_command=True)
@click.version_option(package_name="session-reveal")
@click.option(
    "--sessions-dir",
    type=click.Path(file_okay=False, path_type=Path),
    envvar="SESSION_REVEAL_SESSIONS_DIR",
    help="Directory holding session transcripts (overrides settings)",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default=None,
    help="Log level for the JSONL log file",
)
@click.option("--log-file", type=click.Path(dir_okay=False), default=None, help="JSONL log file path")
@click.pass_context
def cli(ctx: click.Context, sessions_dir: Path | None, log_level: str | None, log_file: str | None):
    """Find the file an agent session last referenced and reveal or preview it."""
    init_json_logging(log_file, log_level)

    settings = SettingsManager()
    ctx.obj = CliState(settings=settings, sessions_dir=sessions_dir or settings.get_sessions_dir())

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())
        ctx.exit()


@cli.command()
@session_source_options
@click.option("--check", is_flag=True, help="Exit with an error if the path does not exist")
@click.pass_obj
def latest(state: CliState, session_id: str | None, transcript: Path | None, cwd: str | None, check: bool):
    """Print the most recently referenced file path."""
    log = open_session(state, session_id, transcript)
    path = find_latest_reference(log.get_branch(), cwd or os.getcwd())

    if path is None:
        err_console.print("[yellow]No file reference found in the session[/yellow]")
        sys.exit(1)

    if check and not os.path.exists(path):
        err_console.print(f"[red]File not found:[/red] {escape(path)}", soft_wrap=True)
        sys.exit(1)

    click.echo(path)


def _run_action(
    state: CliState,
    action: Callable[[ActionContext], ActionOutcome],
    session_id: str | None,
    transcript: Path | None,
    cwd: str | None,
) -> None:
    log = open_session(state, session_id, transcript)
    ctx = ActionContext(
        session=log,
        cwd=cwd or os.getcwd(),
        executor=SubprocessExecutor(timeout=state.settings.get_command_timeout()),
        ui=ConsoleNotifier(err_console),
    )
    outcome = action(ctx)
    logger.debug(f"{action.__name__}: {outcome.status}", extra={"status": outcome.status, "path": outcome.path})
    if not outcome.succeeded:
        sys.exit(1)


@cli.command()
@session_source_options
@click.pass_obj
def reveal(state: CliState, session_id: str | None, transcript: Path | None, cwd: str | None):
    """Reveal the latest referenced file in the file manager."""
    _run_action(state, reveal_latest, session_id, transcript, cwd)


@cli.command()
@session_source_options
@click.pass_obj
def preview(state: CliState, session_id: str | None, transcript: Path | None, cwd: str | None):
    """Open the latest referenced file in Quick Look (macOS)."""
    _run_action(state, preview_latest, session_id, transcript, cwd)


cli.add_command(sessions)


def main():
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
