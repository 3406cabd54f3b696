"""Reveal and Quick Look actions for the latest session file reference.

Both actions resolve the latest reference from the session branch, check it
against the filesystem, and hand it to a platform utility. Problems are
reported through the notifier and the returned ActionOutcome; nothing here
raises into the caller for an expected failure.
"""

from __future__ import annotations

import logging
import os
import subprocess
import sys
from dataclasses import dataclass
from dataclasses import field
from pathlib import Path
from typing import Any
from typing import Protocol

from rich.console import Console

from .models import ActionOutcome
from .models import ActionStatus
from .models import ExecResult
from .models import NotificationLevel
from .resolver import find_latest_reference

logger = logging.getLogger(__name__)

DEFAULT_COMMAND_TIMEOUT = 10.0


class SessionSource(Protocol):
    """Provides the entries of the active session branch."""

    def get_branch(self) -> list[Any]: ...


class Notifier(Protocol):
    """Shows a short message to the user."""

    def notify(self, message: str, level: NotificationLevel = "info") -> None: ...


class CommandExecutor(Protocol):
    """Runs an external command and reports its result."""

    def exec(self, command: str, args: list[str]) -> ExecResult: ...


class SubprocessExecutor:
    """Runs commands with subprocess, never raising for command failures."""

    def __init__(self, timeout: float | None = DEFAULT_COMMAND_TIMEOUT):
        self.timeout = timeout

    def exec(self, command: str, args: list[str]) -> ExecResult:
        logger.debug(f"Running {command} {args}")
        try:
            result = subprocess.run(
                [command, *args],
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except FileNotFoundError:
            return ExecResult(code=127, stderr=f"Command not found: {command}")
        except subprocess.TimeoutExpired:
            return ExecResult(code=124, stderr=f"{command} timed out after {self.timeout}s")
        except OSError as e:
            return ExecResult(code=126, stderr=f"Failed to run {command}: {e}")

        return ExecResult(code=result.returncode, stdout=result.stdout or "", stderr=result.stderr or "")


_LEVEL_STYLES = {
    "info": "cyan",
    "warning": "yellow",
    "error": "red",
}


class ConsoleNotifier:
    """Notifier that prints to a Rich console."""

    def __init__(self, console: Console):
        self.console = console

    def notify(self, message: str, level: NotificationLevel = "info") -> None:
        style = _LEVEL_STYLES.get(level, "white")
        # Paths may contain [brackets]; print them literally
        self.console.print(message, style=style, markup=False, highlight=False, soft_wrap=True)


@dataclass
class ActionContext:
    """Collaborators an action needs.

    Attributes:
        session: Source of the active session branch
        cwd: Working directory used for relative references
        executor: Runs the platform utility
        ui: Notifier, or None when running without a UI
        platform: Value compared against sys.platform names
        home_dir: Directory used to expand ~ (default: the user's home)
    """

    session: SessionSource
    cwd: str | Path
    executor: CommandExecutor
    ui: Notifier | None = None
    platform: str = field(default_factory=lambda: sys.platform)
    home_dir: str | Path | None = None

    def notify(self, message: str, level: NotificationLevel) -> None:
        if self.ui is not None:
            self.ui.notify(message, level)


def _finish(
    ctx: ActionContext,
    status: ActionStatus,
    path: str | None = None,
    message: str | None = None,
    level: NotificationLevel = "warning",
) -> ActionOutcome:
    if message:
        ctx.notify(message, level)
    return ActionOutcome(status=status, path=path, message=message)


def _resolve_existing(ctx: ActionContext) -> str | ActionOutcome:
    """Resolve the latest reference and check it exists.

    Returns the path, or the outcome to return when the action should stop.
    """
    latest = find_latest_reference(ctx.session.get_branch(), ctx.cwd, ctx.home_dir)
    if not latest:
        return _finish(ctx, "no_reference", message="No file reference found in the session")

    if not os.path.exists(latest):
        return _finish(ctx, "not_found", latest, f"File not found: {latest}", "error")

    return latest


def reveal_command(path: str, is_directory: bool, platform: str) -> tuple[str, list[str]]:
    """Build the file manager command for a path.

    macOS selects a file in Finder (`open -R`). Elsewhere the containing
    directory is opened with xdg-open.
    """
    if platform == "darwin":
        return "open", [path] if is_directory else ["-R", path]
    return "xdg-open", [path if is_directory else os.path.dirname(path)]


def reveal_latest(ctx: ActionContext) -> ActionOutcome:
    """Reveal the latest referenced file in the platform file manager."""
    latest = _resolve_existing(ctx)
    if isinstance(latest, ActionOutcome):
        return latest

    command, args = reveal_command(latest, os.path.isdir(latest), ctx.platform)
    result = ctx.executor.exec(command, args)
    if not result.ok:
        logger.warning(f"{command} exited with {result.code} for {latest}")
        message = result.stderr.strip() or f"Failed to reveal {latest}"
        return _finish(ctx, "command_failed", latest, message, "error")

    logger.info(f"Revealed {latest}")
    return ActionOutcome(status="revealed", path=latest)


def preview_latest(ctx: ActionContext) -> ActionOutcome:
    """Open the latest referenced file in Quick Look (macOS only)."""
    latest = _resolve_existing(ctx)
    if isinstance(latest, ActionOutcome):
        return latest

    if os.path.isdir(latest):
        return _finish(ctx, "is_directory", latest, "Quick Look only works on files")

    if ctx.platform != "darwin":
        return _finish(ctx, "unsupported_platform", latest, "Quick Look is only available on macOS")

    result = ctx.executor.exec("qlmanage", ["-p", latest])
    if not result.ok:
        logger.warning(f"qlmanage exited with {result.code} for {latest}")
        message = result.stderr.strip() or f"Failed to Quick Look {latest}"
        return _finish(ctx, "command_failed", latest, message, "error")

    logger.info(f"Previewed {latest}")
    return ActionOutcome(status="previewed", path=latest)
