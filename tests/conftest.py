"""
Shared pytest fixtures for the agent loop tests.
Providers and tools are scripted fakes; no network access is needed.
"""

import asyncio
from typing import Any

import pytest

from toolloop.config import Config, MemoryConfig, ObservabilityConfig
from toolloop.core.session import Session
from toolloop.core.tools import FunctionTool, Tool, ToolRegistry, ToolResult
from toolloop.memory import InMemoryMemory, Memory, MemoryEntry
from toolloop.providers import Provider


class ScriptedProvider(Provider):
    """Returns canned responses in order and records every request"""

    name = "scripted"

    def __init__(self, responses: list[str] | None = None, repeat: str | None = None):
        self.responses = list(responses or [])
        self.repeat = repeat
        self.requests: list[dict[str, Any]] = []

    async def chat_with_system(self, system_prompt, message, model, temperature):
        self.requests.append(
            {
                "system_prompt": system_prompt,
                "message": message,
                "model": model,
                "temperature": temperature,
            }
        )
        if self.responses:
            return self.responses.pop(0)
        if self.repeat is not None:
            return self.repeat
        raise AssertionError("ScriptedProvider ran out of responses")


class EchoTool(Tool):
    """Returns its arguments' "text" field, recording each call"""

    name = "echo"
    description = "Echo text back"

    def __init__(self):
        self.calls: list[Any] = []

    async def execute(self, arguments: Any) -> ToolResult:
        self.calls.append(arguments)
        return ToolResult(success=True, output=str(arguments.get("text", "")))


class FailingMemory(Memory):
    """Memory whose every operation raises"""

    name = "failing"

    async def store(self, key, content, category):
        raise RuntimeError("store unavailable")

    async def recall(self, query, limit):
        raise RuntimeError("recall unavailable")

    async def get(self, key):
        raise RuntimeError("get unavailable")

    async def forget(self, key):
        raise RuntimeError("forget unavailable")

    async def count(self):
        raise RuntimeError("count unavailable")


class StaticMemory(InMemoryMemory):
    """Recall always returns the given entries, recording the queries"""

    def __init__(self, entries: list[MemoryEntry]):
        super().__init__()
        self.static_entries = entries
        self.queries: list[tuple[str, int]] = []

    async def recall(self, query, limit):
        self.queries.append((query, limit))
        return self.static_entries[:limit]


def tool_call(name: str, arguments: str | None = None) -> str:
    """Build a <tool_call> directive as the model would write it"""
    if arguments is None:
        return f'<tool_call>{{"name": "{name}"}}</tool_call>'
    return f'<tool_call>{{"name": "{name}", "arguments": {arguments}}}</tool_call>'


@pytest.fixture
def echo_tool():
    return EchoTool()


@pytest.fixture
def failing_tool():
    async def boom(arguments):
        raise RuntimeError("disk on fire")

    return FunctionTool(
        name="boom",
        description="Always raises",
        parameters={"type": "object", "properties": {}},
        handler=boom,
    )


@pytest.fixture
def registry(echo_tool, failing_tool):
    return ToolRegistry([echo_tool, failing_tool])


@pytest.fixture
def memory():
    return InMemoryMemory()


@pytest.fixture
def config():
    return Config(
        memory=MemoryConfig(backend="in_memory", auto_save=True),
        observability=ObservabilityConfig(backend="none"),
    )


@pytest.fixture
def make_session(config, registry, memory):
    """Factory for sessions wired to a scripted provider"""

    def _make(provider: Provider, event_queue: asyncio.Queue | None = None, **kwargs):
        return Session(
            event_queue,
            config=kwargs.pop("config", config),
            provider=provider,
            tools=kwargs.pop("tools", registry),
            memory=kwargs.pop("memory", memory),
            system_prompt=kwargs.pop("system_prompt", "You are a test assistant."),
            **kwargs,
        )

    return _make


def drain(queue: asyncio.Queue) -> list:
    """Pull every event currently in the queue"""
    events = []
    while not queue.empty():
        events.append(queue.get_nowait())
    return events
