"""CLI command groups."""

from .session import sessions

__all__ = ["sessions"]
