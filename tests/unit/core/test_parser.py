"""
Unit tests for tool-call parsing.
Based on real model output: 'Let me check. <tool_call>{"name": "shell", ...}</tool_call>'
"""

from toolloop.core.parser import extract_text_outside_tool_calls, parse_tool_calls


class TestParseToolCalls:
    """Test extraction of <tool_call> directives."""

    def test_parse_single_tool_call(self):
        response = 'Let me check. <tool_call>{"name":"shell","arguments":{"command":"ls"}}</tool_call>'

        calls = parse_tool_calls(response)

        assert len(calls) == 1
        assert calls[0].name == "shell"
        assert calls[0].arguments == {"command": "ls"}

    def test_parse_multiple_tool_calls_in_order(self):
        response = (
            '<tool_call>{"name": "file_read", "arguments": {"path": "README.md"}}</tool_call>\n'
            'Also: <tool_call>{"name": "shell", "arguments": {"command": "pwd"}}</tool_call>\n'
            '<tool_call>{"name": "memory_recall", "arguments": {"query": "x"}}</tool_call>'
        )

        calls = parse_tool_calls(response)

        assert [c.name for c in calls] == ["file_read", "shell", "memory_recall"]
        assert calls[0].arguments == {"path": "README.md"}

    def test_parse_no_tool_calls(self):
        assert parse_tool_calls("Just a plain text response with no tools.") == []

    def test_parse_malformed_json_skipped(self):
        assert parse_tool_calls("<tool_call>not json</tool_call>") == []

    def test_malformed_block_does_not_stop_scanning(self):
        response = (
            "<tool_call>not json</tool_call>"
            '<tool_call>{"name": "shell", "arguments": {}}</tool_call>'
        )

        calls = parse_tool_calls(response)

        assert len(calls) == 1
        assert calls[0].name == "shell"

    def test_parse_empty_tool_call_tag(self):
        assert parse_tool_calls("<tool_call></tool_call>") == []

    def test_parse_missing_name_skipped(self):
        assert parse_tool_calls('<tool_call>{"arguments": {"x": 1}}</tool_call>') == []

    def test_parse_non_string_name_skipped(self):
        assert parse_tool_calls('<tool_call>{"name": 42}</tool_call>') == []

    def test_parse_non_object_json_skipped(self):
        assert parse_tool_calls('<tool_call>["shell"]</tool_call>') == []

    def test_parse_missing_arguments_defaults_to_empty(self):
        calls = parse_tool_calls('<tool_call>{"name": "memory_recall"}</tool_call>')

        assert len(calls) == 1
        assert calls[0].name == "memory_recall"
        assert calls[0].arguments == {}

    def test_parse_explicit_null_arguments_kept(self):
        calls = parse_tool_calls('<tool_call>{"name": "x", "arguments": null}</tool_call>')

        assert len(calls) == 1
        assert calls[0].arguments is None

    def test_parse_deeply_nested_json_skipped(self):
        depth = 100_000
        response = "<tool_call>" + "[" * depth + "]" * depth + "</tool_call>"

        assert parse_tool_calls(response) == []

    def test_parse_trims_whitespace_inside_block(self):
        calls = parse_tool_calls('<tool_call>\n  {"name": "shell"}  \n</tool_call>')

        assert len(calls) == 1

    def test_parse_unclosed_tag_ignored(self):
        assert parse_tool_calls('<tool_call>{"name": "shell", "arguments": {}}') == []

    def test_unclosed_tag_stops_scanning(self):
        """Directives after an unterminated opening tag are never reached."""
        response = (
            '<tool_call>{"name": "first"}</tool_call>'
            '<tool_call>{"name": "broken"}'
            '<tool_call>{"name": "never"}'
        )

        calls = parse_tool_calls(response)

        # The second opening tag pairs with nothing after it, so only the
        # first block is produced.
        assert [c.name for c in calls] == ["first"]


class TestExtractTextOutsideToolCalls:
    """Test extraction of free text around directives."""

    def test_extract_text_outside_calls(self):
        response = 'Before <tool_call>{"name":"x","arguments":{}}</tool_call> After'

        assert extract_text_outside_tool_calls(response) == "Before  After"

    def test_extract_text_no_calls(self):
        assert extract_text_outside_tool_calls("Just plain text.") == "Just plain text."

    def test_extract_trims_only_the_ends(self):
        response = '  one <tool_call>{"name":"x"}</tool_call>\n two  '

        assert extract_text_outside_tool_calls(response) == "one \n two"

    def test_extract_drops_everything_after_unclosed_tag(self):
        response = 'Start <tool_call>{"name":"x"}</tool_call> middle <tool_call>{"name": "y"} tail'

        assert extract_text_outside_tool_calls(response) == "Start  middle"

    def test_extract_only_directives_is_empty(self):
        response = '<tool_call>{"name":"x"}</tool_call><tool_call>{"name":"y"}</tool_call>'

        assert extract_text_outside_tool_calls(response) == ""
