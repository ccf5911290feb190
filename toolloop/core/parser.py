"""
Extraction of <tool_call> directives from model output
"""

import json
from dataclasses import dataclass, field
from typing import Any

TOOL_CALL_OPEN = "<tool_call>"
TOOL_CALL_CLOSE = "</tool_call>"


@dataclass
class ToolCall:
    """A tool invocation requested by the model"""

    name: str
    arguments: Any = field(default_factory=dict)


def parse_tool_calls(response: str) -> list[ToolCall]:
    """
    Parse all `<tool_call>...</tool_call>` blocks from a response, left to right.

    Blocks whose body is not JSON, or has no string "name", are skipped and
    scanning resumes after their closing tag. An opening tag without a
    closing tag ends the scan.
    """
    calls: list[ToolCall] = []
    search_from = 0

    while True:
        start = response.find(TOOL_CALL_OPEN, search_from)
        if start == -1:
            break
        content_start = start + len(TOOL_CALL_OPEN)

        end = response.find(TOOL_CALL_CLOSE, content_start)
        if end == -1:
            break

        call = _parse_directive(response[content_start:end].strip())
        if call is not None:
            calls.append(call)

        search_from = end + len(TOOL_CALL_CLOSE)

    return calls


def _parse_directive(body: str) -> ToolCall | None:
    try:
        parsed = json.loads(body)
    except (ValueError, RecursionError):
        return None

    if not isinstance(parsed, dict):
        return None

    name = parsed.get("name")
    if not isinstance(name, str):
        return None

    return ToolCall(name=name, arguments=parsed.get("arguments", {}))


def extract_text_outside_tool_calls(response: str) -> str:
    """
    Return everything outside `<tool_call>` blocks, trimmed at both ends.

    An unterminated opening tag drops all text from that tag onward.
    """
    parts: list[str] = []
    search_from = 0

    while True:
        start = response.find(TOOL_CALL_OPEN, search_from)
        if start == -1:
            parts.append(response[search_from:])
            break
        parts.append(response[search_from:start])

        content_start = start + len(TOOL_CALL_OPEN)
        end = response.find(TOOL_CALL_CLOSE, content_start)
        if end == -1:
            break
        search_from = end + len(TOOL_CALL_CLOSE)

    return "".join(parts).strip()
