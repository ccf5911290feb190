"""
Memory interface consumed by the agent loop and the memory tools
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


class MemoryCategory(Enum):
    CORE = "core"
    DAILY = "daily"
    CONVERSATION = "conversation"
    CUSTOM = "custom"


@dataclass
class MemoryEntry:
    """A single stored memory"""

    key: str
    content: str
    category: MemoryCategory = MemoryCategory.CORE
    timestamp: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )
    score: float | None = None


class Memory(ABC):
    """
    Storage for recalled context.

    Implementations must be safe to share by reference between concurrent
    callers; they guard their own state.
    """

    name: str = "memory"

    @abstractmethod
    async def store(self, key: str, content: str, category: MemoryCategory) -> None:
        """Store content under key, replacing any previous entry with that key"""

    @abstractmethod
    async def recall(self, query: str, limit: int) -> list[MemoryEntry]:
        """Return up to `limit` entries relevant to `query`, best match first"""

    @abstractmethod
    async def get(self, key: str) -> MemoryEntry | None:
        """Look up an entry by exact key"""

    @abstractmethod
    async def forget(self, key: str) -> bool:
        """Delete an entry. Returns True when something was removed"""

    @abstractmethod
    async def count(self) -> int:
        """Number of stored entries"""
