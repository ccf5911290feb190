"""
Observers receive lifecycle events for one agent run
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Union

from toolloop.config import ConfigError, ObservabilityConfig

logger = logging.getLogger(__name__)


@dataclass
class AgentStart:
    provider: str
    model: str


@dataclass
class AgentEnd:
    duration: float
    tokens_used: Optional[int] = None


ObserverEvent = Union[AgentStart, AgentEnd]


class Observer(ABC):
    name: str = "observer"

    @abstractmethod
    def record_event(self, event: ObserverEvent) -> None:
        """Record a lifecycle event. Must not raise"""


class LogObserver(Observer):
    """Writes lifecycle events to the standard logger"""

    name = "log"

    def record_event(self, event: ObserverEvent) -> None:
        if isinstance(event, AgentStart):
            logger.info("agent.start provider=%s model=%s", event.provider, event.model)
        elif isinstance(event, AgentEnd):
            logger.info(
                "agent.end duration_ms=%d tokens=%s",
                int(event.duration * 1000),
                event.tokens_used,
            )


class NoopObserver(Observer):
    name = "noop"

    def record_event(self, event: ObserverEvent) -> None:
        pass


def create_observer(config: ObservabilityConfig) -> Observer:
    if config.backend == "log":
        return LogObserver()
    if config.backend == "none":
        return NoopObserver()
    raise ConfigError(f"Unknown observability backend: {config.backend}")
