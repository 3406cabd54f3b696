"""Tests for raw file reference extraction from session entries."""

from types import SimpleNamespace

from conftest import assistant_message
from conftest import tool_call
from conftest import user_message

from session_reveal.utils.references import extract_paths_from_tool_args
from session_reveal.utils.references import extract_references
from session_reveal.utils.references import extract_references_from_content
from session_reveal.utils.references import extract_references_from_text


class TestExtractReferencesFromText:
    def test_groups_by_kind_not_position(self):
        """Tags come first, then URIs, then bare paths, wherever they appear."""
        text = 'see /abs/path.txt, then file:///tmp/u.png and <file name="tagged.md">'

        assert extract_references_from_text(text) == [
            "tagged.md",
            "file:///tmp/u.png",
            "/abs/path.txt,",
        ]

    def test_file_tag_single_quotes(self):
        assert extract_references_from_text("<file name='notes/today.md'>") == ["notes/today.md"]

    def test_file_tag_with_absolute_path_also_matches_as_path(self):
        refs = extract_references_from_text('<file name="/tmp/a.txt">')
        assert refs == ["/tmp/a.txt", "/tmp/a.txt"]

    def test_home_relative_path(self):
        assert extract_references_from_text("edit ~/notes/todo.md now") == ["~/notes/todo.md"]

    def test_path_at_start_of_string(self):
        assert extract_references_from_text("/etc/hosts is there") == ["/etc/hosts"]

    def test_path_after_each_boundary_character(self):
        text = "a (/p1) b [/p2] c {/p3} d </p4> e '/p5' f \"/p6\" g `/p7`"
        assert extract_references_from_text(text) == ["/p1", "/p2", "/p3", "/p4", "/p5", "/p6", "/p7"]

    def test_paths_on_separate_lines(self):
        assert extract_references_from_text("/first/one\n/second/two") == ["/first/one", "/second/two"]

    def test_relative_paths_are_not_bare_path_tokens(self):
        assert extract_references_from_text("look at src/app.py") == []

    def test_web_urls_are_not_paths(self):
        assert extract_references_from_text("docs at https://example.com/guide") == []

    def test_file_url_stops_at_quote(self):
        assert extract_references_from_text('"file:///tmp/q.txt"') == ["file:///tmp/q.txt"]

    def test_no_references(self):
        assert extract_references_from_text("nothing to see here") == []


class TestExtractPathsFromToolArgs:
    def test_direct_key(self):
        assert extract_paths_from_tool_args({"path": "src/a.py", "limit": 10}) == ["src/a.py"]

    def test_non_string_value_is_skipped(self):
        assert extract_paths_from_tool_args({"path": 123}) == []

    def test_list_key(self):
        assert extract_paths_from_tool_args({"paths": ["a", "b"]}) == ["a", "b"]

    def test_list_skips_non_strings(self):
        assert extract_paths_from_tool_args({"files": ["a", 3, None, "b"]}) == ["a", "b"]

    def test_list_key_with_string_value_is_skipped(self):
        assert extract_paths_from_tool_args({"paths": "not-a-list"}) == []

    def test_key_order_direct_then_list(self):
        args = {"files": ["f"], "filename": "z", "path": "p", "filePath": "fp"}
        assert extract_paths_from_tool_args(args) == ["p", "fp", "z", "f"]

    def test_unknown_keys_ignored(self):
        assert extract_paths_from_tool_args({"command": "cat /etc/hosts", "dir": "/tmp"}) == []

    def test_non_mapping_arguments(self):
        assert extract_paths_from_tool_args(None) == []
        assert extract_paths_from_tool_args(["path"]) == []
        assert extract_paths_from_tool_args("path") == []


class TestExtractReferencesFromContent:
    def test_plain_string(self):
        assert extract_references_from_content("open /tmp/x") == ["/tmp/x"]

    def test_blocks_in_order(self):
        content = [
            tool_call(path="first.py"),
            {"type": "text", "text": "then /tmp/second"},
            tool_call(paths=["third.py"]),
        ]
        assert extract_references_from_content(content) == ["first.py", "/tmp/second", "third.py"]

    def test_unrecognized_blocks_ignored(self):
        content = [
            {"type": "image", "data": "aGVsbG8=", "mimeType": "image/png"},
            {"type": "thinking", "thinking": "maybe /tmp/not-this"},
            None,
            "stray string",
            42,
            {"type": "text", "text": "/tmp/this"},
        ]
        assert extract_references_from_content(content) == ["/tmp/this"]

    def test_text_block_without_string_text(self):
        assert extract_references_from_content([{"type": "text", "text": None}]) == []

    def test_tool_call_without_arguments(self):
        assert extract_references_from_content([{"type": "toolCall", "name": "ls"}]) == []

    def test_unexpected_content_shapes(self):
        assert extract_references_from_content(None) == []
        assert extract_references_from_content(12) == []
        assert extract_references_from_content({"type": "text", "text": "/tmp/x"}) == []


class TestExtractReferences:
    def test_message_entry(self):
        assert extract_references(user_message("read /tmp/a.md")) == ["/tmp/a.md"]

    def test_assistant_tool_call(self):
        entry = assistant_message([{"type": "text", "text": "Reading it."}, tool_call(path="README.md")])
        assert extract_references(entry) == ["README.md"]

    def test_custom_message_entry(self):
        entry = {"type": "custom_message", "customType": "note", "content": "saved to ~/out.csv"}
        assert extract_references(entry) == ["~/out.csv"]

    def test_other_entry_kinds_yield_nothing(self):
        assert extract_references({"type": "model_change", "content": "/tmp/x"}) == []
        assert extract_references({"type": "session", "cwd": "/work"}) == []
        assert extract_references({}) == []

    def test_message_without_payload(self):
        assert extract_references({"type": "message"}) == []

    def test_attribute_objects(self):
        entry = SimpleNamespace(
            type="message",
            message=SimpleNamespace(content=[SimpleNamespace(type="text", text="see /tmp/obj.txt")]),
        )
        assert extract_references(entry) == ["/tmp/obj.txt"]

    def test_non_entry_values(self):
        assert extract_references(None) == []
        assert extract_references("message") == []
