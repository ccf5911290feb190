"""
Tool system for the agent
Provides the Tool capability, ToolRegistry and the built-in memory tools
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Iterable, Optional

from pydantic import BaseModel

from toolloop.memory import Memory, MemoryCategory

logger = logging.getLogger(__name__)


class ToolResult(BaseModel):
    """Outcome of a tool execution, fed back to the model verbatim"""

    success: bool
    output: str = ""
    error: Optional[str] = None


@dataclass
class ToolSpec:
    """Tool specification for the system prompt"""

    name: str
    description: str
    parameters: dict[str, Any]


class Tool(ABC):
    """A capability the model can invoke by name"""

    name: str
    description: str = ""
    parameters: dict[str, Any] = {"type": "object", "properties": {}}

    @abstractmethod
    async def execute(self, arguments: Any) -> ToolResult:
        """Run the tool. May raise; the executor turns exceptions into results"""

    def spec(self) -> ToolSpec:
        return ToolSpec(
            name=self.name,
            description=self.description,
            parameters=self.parameters,
        )


class FunctionTool(Tool):
    """Tool backed by a plain async handler"""

    def __init__(
        self,
        name: str,
        description: str,
        parameters: dict[str, Any],
        handler: Callable[[Any], Awaitable[ToolResult]],
    ):
        self.name = name
        self.description = description
        self.parameters = parameters
        self.handler = handler

    async def execute(self, arguments: Any) -> ToolResult:
        return await self.handler(arguments)


class ToolRegistry:
    """
    Maps tool names to tools. Lookups are exact string matches.

    The registry is only read while the agent runs, so one instance can be
    shared by every session.
    """

    def __init__(self, tools: Iterable[Tool] = ()):
        self.tools: dict[str, Tool] = {}
        for tool in tools:
            self.register_tool(tool)

    def register_tool(self, tool: Tool) -> None:
        if not tool.name or not isinstance(tool.name, str):
            raise ValueError("Tool must have a valid string name.")
        if tool.name in self.tools:
            logger.warning("Replacing already registered tool: %s", tool.name)
        self.tools[tool.name] = tool

    def get(self, tool_name: str) -> Tool | None:
        return self.tools.get(tool_name)

    def __contains__(self, tool_name: object) -> bool:
        return tool_name in self.tools

    def __len__(self) -> int:
        return len(self.tools)

    def names(self) -> list[str]:
        return list(self.tools)

    def get_tool_specs(self) -> list[ToolSpec]:
        return [tool.spec() for tool in self.tools.values()]


# ============================================================================
# BUILT-IN MEMORY TOOLS
# ============================================================================


def _argument(arguments: Any, key: str) -> Any:
    if isinstance(arguments, dict):
        return arguments.get(key)
    return None


class MemoryStoreTool(Tool):
    name = "memory_store"
    description = (
        "Store a fact, preference or note in long-term memory so it can be "
        "recalled in later conversations"
    )
    parameters = {
        "type": "object",
        "properties": {
            "key": {"type": "string", "description": "Unique key for this memory"},
            "content": {"type": "string", "description": "What to remember"},
            "category": {
                "type": "string",
                "enum": [c.value for c in MemoryCategory],
                "description": "Memory category (default: core)",
            },
        },
        "required": ["key", "content"],
    }

    def __init__(self, memory: Memory):
        self.memory = memory

    async def execute(self, arguments: Any) -> ToolResult:
        key = _argument(arguments, "key")
        content = _argument(arguments, "content")
        if not isinstance(key, str) or not key:
            return ToolResult(success=False, error="Missing 'key' parameter")
        if not isinstance(content, str):
            return ToolResult(success=False, error="Missing 'content' parameter")

        raw_category = _argument(arguments, "category") or MemoryCategory.CORE.value
        try:
            category = MemoryCategory(raw_category)
        except ValueError:
            category = MemoryCategory.CUSTOM

        await self.memory.store(key, content, category)
        return ToolResult(success=True, output=f"Stored memory: {key}")


class MemoryRecallTool(Tool):
    name = "memory_recall"
    description = "Search long-term memory for entries relevant to a query"
    parameters = {
        "type": "object",
        "properties": {
            "query": {"type": "string", "description": "What to look for"},
            "limit": {
                "type": "integer",
                "description": "Maximum number of results (default: 5)",
            },
        },
        "required": ["query"],
    }

    def __init__(self, memory: Memory):
        self.memory = memory

    async def execute(self, arguments: Any) -> ToolResult:
        query = _argument(arguments, "query")
        if not isinstance(query, str):
            return ToolResult(success=False, error="Missing 'query' parameter")

        limit = _argument(arguments, "limit")
        if not isinstance(limit, int) or isinstance(limit, bool) or limit <= 0:
            limit = 5

        entries = await self.memory.recall(query, limit)
        if not entries:
            return ToolResult(success=True, output="No memories found matching that query.")

        lines = [f"Found {len(entries)} memories:"]
        for entry in entries:
            score = f" [{entry.score:.0%}]" if entry.score is not None else ""
            lines.append(f"- [{entry.category.value}] {entry.key}: {entry.content}{score}")
        return ToolResult(success=True, output="\n".join(lines))


class MemoryForgetTool(Tool):
    name = "memory_forget"
    description = "Remove a memory by key"
    parameters = {
        "type": "object",
        "properties": {
            "key": {"type": "string", "description": "Key of the memory to forget"},
        },
        "required": ["key"],
    }

    def __init__(self, memory: Memory):
        self.memory = memory

    async def execute(self, arguments: Any) -> ToolResult:
        key = _argument(arguments, "key")
        if not isinstance(key, str) or not key:
            return ToolResult(success=False, error="Missing 'key' parameter")

        if await self.memory.forget(key):
            return ToolResult(success=True, output=f"Forgot memory: {key}")
        return ToolResult(success=True, output=f"No memory found with key: {key}")


def create_builtin_tools(memory: Memory) -> list[Tool]:
    """Create the built-in tools bound to the shared memory"""
    return [
        MemoryStoreTool(memory),
        MemoryRecallTool(memory),
        MemoryForgetTool(memory),
    ]
