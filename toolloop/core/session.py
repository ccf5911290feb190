import asyncio
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from toolloop.config import Config
from toolloop.core.tools import ToolRegistry
from toolloop.memory import Memory
from toolloop.observability import NoopObserver, Observer
from toolloop.providers import Provider


class OpType(Enum):
    USER_INPUT = "user_input"
    SHUTDOWN = "shutdown"


@dataclass
class Event:
    event_type: str
    data: Optional[dict[str, Any]] = None


class Session:
    """
    Maintains agent session state: the collaborators one run is wired to.

    The tool registry and memory are shared by reference; a session only
    owns its event queue.
    """

    def __init__(
        self,
        event_queue: asyncio.Queue | None,
        config: Config,
        provider: Provider,
        tools: ToolRegistry,
        memory: Memory,
        system_prompt: str,
        observer: Observer | None = None,
        provider_name: str | None = None,
        model_name: str | None = None,
    ):
        self.event_queue = event_queue
        self.config = config
        self.provider = provider
        self.tools = tools
        self.memory = memory
        self.system_prompt = system_prompt
        self.observer = observer or NoopObserver()
        self.provider_name = provider_name or config.default_provider
        self.model_name = model_name or config.default_model
        self.session_id = str(uuid.uuid4())
        self.is_running = True

    async def send_event(self, event: Event) -> None:
        """Send event back to client. Dropped when the session has no queue"""
        if self.event_queue is not None:
            await self.event_queue.put(event)
