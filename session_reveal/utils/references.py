"""Pure text processing for file references in session entries - no file I/O."""

import re
from collections.abc import Mapping
from collections.abc import Sequence
from re import Pattern
from typing import Any

# <file name="..."> annotations attached to user messages
FILE_TAG_PATTERN: Pattern = re.compile(r"""<file\s+name=["']([^"']+)["']>""")

# file:// URIs up to the next whitespace, quote or angle bracket
FILE_URL_PATTERN: Pattern = re.compile(r"""file://[^\s"'<>]+""")

# Absolute or home-relative paths, only after a boundary character
PATH_PATTERN: Pattern = re.compile(r"""(?:^|[\s"'`(\[{<])((?:~|/)[^\s"'`<>)}\]]+)""")

DIRECT_ARG_KEYS = ("path", "file", "filePath", "filepath", "fileName", "filename")
LIST_ARG_KEYS = ("paths", "files", "filePaths")


def _get(obj: Any, key: str) -> Any:
    """Read a field from a raw JSONL record or a model object."""
    if isinstance(obj, Mapping):
        return obj.get(key)
    return getattr(obj, key, None)


def extract_references_from_text(text: str) -> list[str]:
    """
    Extract raw file references from text.

    Three independent scans are concatenated: file tags first, then file://
    URIs, then bare paths. The result is grouped by kind, not ordered by
    position in the text.

    Args:
        text: Text to scan

    Returns:
        Raw reference strings, unsanitized

    Examples:
        >>> extract_references_from_text('see /tmp/b.txt and <file name="a.md">')
        ['a.md', '/tmp/b.txt']
        >>> extract_references_from_text("open file:///tmp/x.png")
        ['file:///tmp/x.png']
        >>> extract_references_from_text("nothing here")
        []
    """
    tags = FILE_TAG_PATTERN.findall(text)
    urls = FILE_URL_PATTERN.findall(text)
    paths = PATH_PATTERN.findall(text)
    return tags + urls + paths


def extract_paths_from_tool_args(args: Any) -> list[str]:
    """
    Extract path-like argument values from a tool call.

    Only the known path keys are examined. Values of the wrong type are
    skipped.

    Examples:
        >>> extract_paths_from_tool_args({"path": "src/a.py", "limit": 10})
        ['src/a.py']
        >>> extract_paths_from_tool_args({"paths": ["a", 3, "b"]})
        ['a', 'b']
        >>> extract_paths_from_tool_args({"path": 123})
        []
    """
    if not isinstance(args, Mapping):
        return []

    refs = []
    for key in DIRECT_ARG_KEYS:
        value = args.get(key)
        if isinstance(value, str):
            refs.append(value)

    for key in LIST_ARG_KEYS:
        value = args.get(key)
        if isinstance(value, list | tuple):
            refs.extend(item for item in value if isinstance(item, str))

    return refs


def extract_references_from_content(content: Any) -> list[str]:
    """
    Extract raw file references from message content.

    Content is either a plain string or a list of blocks. Text blocks are
    scanned; toolCall blocks contribute their path arguments. Anything else
    (images, thinking blocks, unexpected shapes) is ignored.
    """
    if isinstance(content, str):
        return extract_references_from_text(content)

    if not isinstance(content, Sequence):
        return []

    refs = []
    for block in content:
        if block is None or isinstance(block, str | bytes):
            continue

        block_type = _get(block, "type")
        if block_type == "text":
            text = _get(block, "text")
            if isinstance(text, str):
                refs.extend(extract_references_from_text(text))
        elif block_type == "toolCall":
            refs.extend(extract_paths_from_tool_args(_get(block, "arguments")))

    return refs


def extract_references(entry: Any) -> list[str]:
    """
    Extract raw file references from a session entry.

    Only `message` and `custom_message` entries carry references; every other
    entry kind (model changes, compaction markers, session headers) yields an
    empty list.

    Args:
        entry: Raw JSONL record (dict) or an object with the same attributes

    Returns:
        Raw references in order of appearance within the entry
    """
    entry_type = _get(entry, "type")

    if entry_type == "message":
        message = _get(entry, "message")
        if message is None:
            return []
        return extract_references_from_content(_get(message, "content"))

    if entry_type == "custom_message":
        return extract_references_from_content(_get(entry, "content"))

    return []
