"""
Session transcript access for session-reveal.

Reads session transcripts written by the agent host. Each session lives in
its own directory with a transcript.jsonl file (one entry per line) and an
optional transcript.jsonl.backup used for corruption recovery.
"""

import json
import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

TRANSCRIPT_FILE = "transcript.jsonl"
BACKUP_FILE = "transcript.jsonl.backup"


def project_slug(project_path: Path) -> str:
    """Turn a project directory into a directory-safe slug.

    Examples:
        >>> project_slug(Path("/home/u/work/app"))
        '-home-u-work-app'
    """
    slug = str(project_path).replace("/", "-").replace("\\", "-").replace(":", "")
    if not slug.startswith("-"):
        slug = "-" + slug
    return slug


def default_sessions_dir(project_path: Path | None = None) -> Path:
    """Sessions directory for a project: ~/.session-reveal/projects/<slug>/sessions."""
    if project_path is None:
        project_path = Path.cwd()
    return Path.home() / ".session-reveal" / "projects" / project_slug(project_path.resolve()) / "sessions"


def load_transcript(path: Path) -> list[dict[str, Any]]:
    """Read a JSONL transcript file.

    Blank lines and lines that are not JSON objects are skipped.

    Raises:
        OSError: If the file cannot be read
        json.JSONDecodeError: If a line is not valid JSON
    """
    entries = []
    with open(path, encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line:
                continue
            entry = json.loads(line)
            if isinstance(entry, dict):
                entries.append(entry)
    return entries


class SessionLog:
    """In-memory view of one session's entries.

    Entries written by tree-structured hosts carry `id` and `parentId`; the
    active branch is the chain of parents ending at the leaf. Linear
    transcripts without ids are returned as-is.
    """

    def __init__(self, entries: Sequence[dict[str, Any]]):
        self.entries = list(entries)

    def get_branch(self, leaf_id: str | None = None) -> list[dict[str, Any]]:
        """Return entries on the path from the root to leaf_id (default: latest entry).

        Raises:
            KeyError: If leaf_id is not the id of an entry in this session
        """
        by_id = {entry["id"]: entry for entry in self.entries if isinstance(entry.get("id"), str)}
        if not by_id:
            return list(self.entries)

        if leaf_id is None:
            leaf_id = next(entry["id"] for entry in reversed(self.entries) if isinstance(entry.get("id"), str))

        if leaf_id not in by_id:
            raise KeyError(f"Entry '{leaf_id}' not found in session")

        branch = []
        seen = set()
        current = by_id.get(leaf_id)
        while current is not None and current["id"] not in seen:
            seen.add(current["id"])
            branch.append(current)
            parent_id = current.get("parentId")
            current = by_id.get(parent_id) if isinstance(parent_id, str) else None

        branch.reverse()
        return branch


class SessionStore:
    """
    Read access to session transcripts on disk.

    Contract:
    - Inputs: session_id (str)
    - Outputs: Lists of raw entry dicts, session id listings
    - Side Effects: None (read-only)
    - Errors: FileNotFoundError for missing sessions, ValueError for invalid ids
    """

    def __init__(self, base_dir: Path | None = None):
        """Initialize with base directory for sessions.

        Args:
            base_dir: Directory holding one subdirectory per session.
                Defaults to the current project's sessions directory.
        """
        if base_dir is None:
            base_dir = default_sessions_dir()
        self.base_dir = base_dir

    @staticmethod
    def _validate_id(session_id: str) -> None:
        if not session_id or not session_id.strip():
            raise ValueError("session_id cannot be empty")

        # Sanitize session_id to prevent path traversal
        if "/" in session_id or "\\" in session_id or session_id in (".", ".."):
            raise ValueError(f"Invalid session_id: {session_id}")

    def load(self, session_id: str) -> list[dict[str, Any]]:
        """Load a session transcript with corruption recovery.

        Args:
            session_id: Session identifier to load

        Returns:
            List of entry dicts in chronological order

        Raises:
            FileNotFoundError: If session does not exist
            ValueError: If session_id is invalid
        """
        self._validate_id(session_id)

        session_dir = self.base_dir / session_id
        if not session_dir.is_dir():
            raise FileNotFoundError(f"Session '{session_id}' not found")

        entries = self._load_transcript(session_dir)
        logger.debug(f"Session {session_id} loaded with {len(entries)} entries")
        return entries

    def _load_transcript(self, session_dir: Path) -> list[dict[str, Any]]:
        """Load transcript, falling back to the backup copy."""
        transcript_file = session_dir / TRANSCRIPT_FILE
        backup_file = session_dir / BACKUP_FILE

        # Try main file first
        if transcript_file.exists():
            try:
                return load_transcript(transcript_file)
            except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
                logger.warning(f"Failed to load transcript, trying backup: {e}")

        # Try backup if main file failed or missing
        if backup_file.exists():
            try:
                entries = load_transcript(backup_file)
                logger.info("Loaded transcript from backup")
                return entries
            except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
                logger.error(f"Backup also corrupted: {e}")

        logger.warning(f"No readable transcript in {session_dir}, returning empty history")
        return []

    def exists(self, session_id: str) -> bool:
        """Check if session exists."""
        try:
            self._validate_id(session_id)
        except ValueError:
            return False

        session_dir = self.base_dir / session_id
        return session_dir.is_dir()

    def list_sessions(self) -> list[str]:
        """List all session IDs.

        Returns:
            List of session identifiers, sorted by modification time (newest first)
        """
        if not self.base_dir.exists():
            return []

        sessions = []
        for session_dir in self.base_dir.iterdir():
            if session_dir.is_dir() and not session_dir.name.startswith("."):
                # Appending to a transcript does not touch the directory mtime
                transcript_file = session_dir / TRANSCRIPT_FILE
                target = transcript_file if transcript_file.exists() else session_dir
                try:
                    mtime = target.stat().st_mtime
                except OSError:
                    mtime = 0
                sessions.append((session_dir.name, mtime))

        sessions.sort(key=lambda x: x[1], reverse=True)
        return [name for name, _ in sessions]

    def latest_session(self) -> str | None:
        """Return the most recently modified session ID, or None if there are none."""
        sessions = self.list_sessions()
        return sessions[0] if sessions else None

    def open_log(self, session_id: str) -> SessionLog:
        """Load a session and wrap it for branch access."""
        return SessionLog(self.load(session_id))
