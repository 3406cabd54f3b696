"""Resolution of the latest file reference in a session history.

Raw references come from utils.references; this module turns them into
absolute paths and drives the newest-first search. Nothing here touches the
filesystem: whether the resolved path exists is for the caller to decide.
"""

import logging
import os
import re
from collections.abc import Iterator
from collections.abc import Sequence
from pathlib import Path
from typing import Any
from urllib.parse import unquote
from urllib.parse import urlsplit
from urllib.request import url2pathname

from .utils.references import extract_references

logger = logging.getLogger(__name__)

FILE_URI_PREFIX = "file://"

_LEADING_JUNK = re.compile(r"""^["'`(<\[]+""")
_TRAILING_JUNK = re.compile(r"""[>"'`,;).\]]+$""")
_TRAILING_PUNCTUATION = re.compile(r"[.,;:]+$")


def sanitize_reference(raw: str) -> str:
    """Strip surrounding whitespace, quotes, brackets and sentence punctuation."""
    value = raw.strip()
    value = _LEADING_JUNK.sub("", value)
    value = _TRAILING_JUNK.sub("", value)
    return _TRAILING_PUNCTUATION.sub("", value)


def file_uri_to_path(uri: str) -> str:
    """Convert a file:// URI to a local filesystem path.

    Raises:
        ValueError: If the URI names a remote host, encodes a path separator,
            or its percent-encoding does not decode as UTF-8
    """
    parts = urlsplit(uri)
    if parts.scheme != "file":
        raise ValueError(f"Not a file URI: {uri}")

    if os.name != "nt" and parts.netloc not in ("", "localhost"):
        raise ValueError(f"File URI host must be empty or localhost: {uri}")

    lowered = parts.path.lower()
    if "%2f" in lowered or (os.name == "nt" and "%5c" in lowered):
        raise ValueError(f"File URI path must not include encoded separators: {uri}")

    path = parts.path or "/"
    if os.name != "nt":
        # UnicodeDecodeError is a ValueError
        return unquote(path, errors="strict")

    if parts.netloc and parts.netloc != "localhost":
        # UNC path: file://server/share/file -> \\server\share\file
        path = f"//{parts.netloc}{path}"
    return url2pathname(path)


def normalize_reference(raw: str, working_dir: str | Path, home_dir: str | Path | None = None) -> str | None:
    """Normalize a raw reference into an absolute path.

    Steps: sanitize, unwrap file:// URIs, expand a leading ~, then resolve
    relative paths against working_dir. Absolute paths come back unchanged.

    Args:
        raw: Reference as extracted from session content
        working_dir: Directory that relative references are resolved against
        home_dir: Directory substituted for ~ (default: the user's home)

    Returns:
        Absolute path string, or None if the reference is unusable
    """
    candidate = sanitize_reference(raw)
    if not candidate:
        return None

    if candidate.startswith(FILE_URI_PREFIX):
        try:
            candidate = file_uri_to_path(candidate)
        except ValueError as e:
            logger.debug(f"Rejected file URI {candidate!r}: {e}")
            return None

    if candidate.startswith("~"):
        home = str(home_dir) if home_dir is not None else str(Path.home())
        remainder = candidate[1:].lstrip("/\\")
        candidate = os.path.normpath(os.path.join(home, remainder))

    if not os.path.isabs(candidate):
        candidate = os.path.abspath(os.path.join(os.fspath(working_dir), candidate))

    return candidate


def iter_candidates(
    entries: Sequence[Any], working_dir: str | Path, home_dir: str | Path | None = None
) -> Iterator[str]:
    """Yield normalized references, most recent first.

    Entries are visited newest first and, within an entry, the last reference
    comes first. References that fail to normalize are skipped. The generator
    is lazy, so taking the first item stops the scan.
    """
    for entry in reversed(entries):
        refs = extract_references(entry)
        for raw in reversed(refs):
            normalized = normalize_reference(raw, working_dir, home_dir)
            if normalized:
                yield normalized


def find_latest_reference(
    entries: Sequence[Any], working_dir: str | Path, home_dir: str | Path | None = None
) -> str | None:
    """Return the most recently referenced path in the history, or None."""
    latest = next(iter_candidates(entries, working_dir, home_dir), None)
    if latest is None:
        logger.debug(f"No file reference found in {len(entries)} entries")
    else:
        logger.debug(f"Latest file reference: {latest}")
    return latest


class ReferenceResolver:
    """Resolves session file references relative to a working directory.

    Resolution order:
    1. Most recent entry first
    2. Within an entry, last reference first (tool arguments after text)
    3. First reference that normalizes wins

    The result is a syntactically absolute path. It may not exist; callers
    that act on it check the filesystem themselves.
    """

    def __init__(self, working_dir: str | Path, home_dir: str | Path | None = None):
        """Initialize resolver.

        Args:
            working_dir: Base directory for relative references
            home_dir: Directory used to expand ~ (default: the user's home)
        """
        self.working_dir = working_dir
        self.home_dir = home_dir

    def normalize(self, raw: str) -> str | None:
        """Normalize one raw reference."""
        return normalize_reference(raw, self.working_dir, self.home_dir)

    def candidates(self, entries: Sequence[Any]) -> Iterator[str]:
        """Iterate normalized references, most recent first."""
        return iter_candidates(entries, self.working_dir, self.home_dir)

    def find_latest(self, entries: Sequence[Any]) -> str | None:
        """Find the latest file reference in entries."""
        return find_latest_reference(entries, self.working_dir, self.home_dir)
