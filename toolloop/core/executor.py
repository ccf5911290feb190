"""
Tool execution: dispatches parsed calls to the registry one at a time
"""

from typing import Mapping, Union

from lmnr import observe

from toolloop.core.parser import ToolCall
from toolloop.core.tools import Tool, ToolRegistry, ToolResult

ToolLookup = Union[ToolRegistry, Mapping[str, Tool]]


@observe(name="call_tool")
async def execute_tool_call(tools: ToolLookup, call: ToolCall) -> ToolResult:
    """Execute a single call, shaping unknown tools and exceptions into results"""
    tool = tools.get(call.name)
    if tool is None:
        return ToolResult(success=False, output="", error=f"Unknown tool: {call.name}")

    try:
        return await tool.execute(call.arguments)
    except Exception as e:
        return ToolResult(
            success=False, output="", error=f"Tool execution error: {e}"
        )


async def execute_tool_calls(
    tools: ToolLookup, calls: list[ToolCall]
) -> list[tuple[str, ToolResult]]:
    """
    Execute calls strictly in order. Each call finishes before the next starts.

    Returns (tool name, result) pairs in the same order as `calls`.
    """
    results: list[tuple[str, ToolResult]] = []
    for call in calls:
        result = await execute_tool_call(tools, call)
        results.append((call.name, result))
    return results
