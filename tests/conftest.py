"""Pytest configuration for session-reveal tests."""

import json
import logging
import sys
from pathlib import Path

import pytest

# Allow running the suite from a checkout without installing the package
repo_root = Path(__file__).parent.parent
sys.path.insert(0, str(repo_root))


@pytest.fixture(autouse=True)
def restore_root_logging():
    """Undo handlers and level changes made by init_json_logging."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)


def write_transcript(path: Path, entries: list) -> Path:
    """Write entries as JSONL, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        for entry in entries:
            f.write(json.dumps(entry) + "\n")
    return path


def user_message(content):
    return {"type": "message", "message": {"role": "user", "content": content}}


def assistant_message(content):
    return {"type": "message", "message": {"role": "assistant", "content": content}}


def tool_call(**arguments):
    return {"type": "toolCall", "id": "call_1", "name": "read", "arguments": arguments}
