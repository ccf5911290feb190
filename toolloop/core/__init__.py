"""
Core agent implementation
Contains the tool-call parser, executor, result formatter and tool registry
"""

from toolloop.core.executor import execute_tool_calls
from toolloop.core.formatter import format_tool_results
from toolloop.core.parser import ToolCall, extract_text_outside_tool_calls, parse_tool_calls
from toolloop.core.tools import FunctionTool, Tool, ToolRegistry, ToolResult, ToolSpec

__all__ = [
    "ToolCall",
    "ToolResult",
    "ToolSpec",
    "Tool",
    "FunctionTool",
    "ToolRegistry",
    "parse_tool_calls",
    "extract_text_outside_tool_calls",
    "execute_tool_calls",
    "format_tool_results",
]
