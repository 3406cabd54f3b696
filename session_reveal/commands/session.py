"""Session listing commands."""

from __future__ import annotations

import os
from datetime import UTC
from datetime import datetime

import click
from rich.markup import escape
from rich.table import Table

from ..console import console
from ..resolver import find_latest_reference
from ..session_store import TRANSCRIPT_FILE
from ..session_store import SessionLog


@click.group(invoke_without_command=True)
@click.pass_context
def sessions(ctx: click.Context):
    """Inspect stored sessions."""
    if ctx.invoked_subcommand is None:
        click.echo("\n" + ctx.get_help())
        ctx.exit()


@sessions.command(name="list")
@click.option("--limit", "-n", default=20, help="Number of sessions to show")
@click.pass_obj
def sessions_list(state, limit: int):
    """List recent sessions with their latest file reference."""
    store = state.store()
    session_ids = store.list_sessions()[:limit]

    if not session_ids:
        console.print("[yellow]No sessions found.[/yellow]")
        return

    table = Table(title="Recent Sessions", show_header=True, header_style="bold cyan")
    table.add_column("Session ID", style="green", no_wrap=True)
    table.add_column("Last Modified", style="yellow")
    table.add_column("Entries", justify="right")
    table.add_column("Latest Reference", style="white")

    cwd = os.getcwd()
    for session_id in session_ids:
        session_path = store.base_dir / session_id
        transcript_file = session_path / TRANSCRIPT_FILE
        target = transcript_file if transcript_file.exists() else session_path
        modified = datetime.fromtimestamp(target.stat().st_mtime, tz=UTC).strftime("%Y-%m-%d %H:%M:%S")

        entries = store.load(session_id)
        latest = find_latest_reference(SessionLog(entries).get_branch(), cwd)
        table.add_row(session_id, modified, str(len(entries)), escape(latest) if latest else "[dim]-[/dim]")

    console.print(table)
