"""Shared Rich console instances for CLI output."""

from rich.console import Console

console = Console()

# Warnings and errors go to stderr so `session-reveal latest` output stays pipeable
err_console = Console(stderr=True)

__all__ = ["console", "err_console"]
