"""
Memory subsystem: recall of relevant context and best-effort storage
"""

from pathlib import Path

from toolloop.config import ConfigError, MemoryConfig
from toolloop.memory.base import Memory, MemoryCategory, MemoryEntry
from toolloop.memory.implementations import (
    InMemoryMemory,
    JsonFileMemory,
    NoneMemory,
)

DEFAULT_MEMORY_FILE = "memory.json"


def create_memory(config: MemoryConfig, workspace_dir: str | Path = ".") -> Memory:
    """Build the memory backend named in the config"""
    if config.backend == "in_memory":
        return InMemoryMemory()
    if config.backend == "json":
        path = Path(config.path) if config.path else Path(workspace_dir) / DEFAULT_MEMORY_FILE
        return JsonFileMemory(path)
    if config.backend == "none":
        return NoneMemory()
    raise ConfigError(f"Unknown memory backend: {config.backend}")


__all__ = [
    "Memory",
    "MemoryCategory",
    "MemoryEntry",
    "InMemoryMemory",
    "JsonFileMemory",
    "NoneMemory",
    "create_memory",
]
