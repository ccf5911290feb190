"""
Rendering of tool results into the <tool_result> blocks the model reads
"""

import json

from toolloop.core.tools import ToolResult


def format_tool_result(name: str, result: ToolResult) -> str:
    payload = json.dumps(
        {
            "success": result.success,
            "output": result.output,
            "error": result.error,
        },
        separators=(",", ":"),
        ensure_ascii=False,
    )
    return f'<tool_result name="{name}">{payload}</tool_result>\n'


def format_tool_results(results: list[tuple[str, ToolResult]]) -> str:
    """Format results as one block per line, in call order"""
    return "".join(format_tool_result(name, result) for name, result in results)
