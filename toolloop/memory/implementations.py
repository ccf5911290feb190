"""
Memory backends: an in-process store, a JSON-file store and a no-op store.
"""

import asyncio
import json
import logging
import re
from dataclasses import asdict
from pathlib import Path

from toolloop.config import ConfigError
from toolloop.memory.base import Memory, MemoryCategory, MemoryEntry

logger = logging.getLogger(__name__)

_WORD_RE = re.compile(r"\w+")


def _tokenize(text: str) -> set[str]:
    return {word.lower() for word in _WORD_RE.findall(text)}


def keyword_score(query: str, entry: MemoryEntry) -> float:
    """Fraction of query words that appear in the entry's key or content"""
    query_words = _tokenize(query)
    if not query_words:
        return 0.0
    entry_words = _tokenize(entry.key) | _tokenize(entry.content)
    return len(query_words & entry_words) / len(query_words)


class InMemoryMemory(Memory):
    """
    Memory held in a dict for the lifetime of the process.

    Recall ranks entries by keyword overlap with the query; entries with no
    overlap are never returned. Ties keep the most recent entry first.
    """

    name = "in_memory"

    def __init__(self) -> None:
        self.entries: dict[str, MemoryEntry] = {}
        self._lock = asyncio.Lock()

    async def store(self, key: str, content: str, category: MemoryCategory) -> None:
        async with self._lock:
            # re-insert so the dict order tracks recency
            self.entries.pop(key, None)
            self.entries[key] = MemoryEntry(key=key, content=content, category=category)
            await self._persist()

    async def recall(self, query: str, limit: int) -> list[MemoryEntry]:
        if limit <= 0:
            return []

        async with self._lock:
            candidates = list(reversed(self.entries.values()))

        scored = []
        for entry in candidates:
            score = keyword_score(query, entry)
            if score > 0:
                scored.append(
                    MemoryEntry(
                        key=entry.key,
                        content=entry.content,
                        category=entry.category,
                        timestamp=entry.timestamp,
                        score=score,
                    )
                )

        scored.sort(key=lambda e: e.score, reverse=True)
        return scored[:limit]

    async def get(self, key: str) -> MemoryEntry | None:
        async with self._lock:
            return self.entries.get(key)

    async def forget(self, key: str) -> bool:
        async with self._lock:
            removed = self.entries.pop(key, None) is not None
            if removed:
                await self._persist()
            return removed

    async def count(self) -> int:
        async with self._lock:
            return len(self.entries)

    async def _persist(self) -> None:
        """Hook for subclasses that write through to storage. Called under the lock"""


class JsonFileMemory(InMemoryMemory):
    """InMemoryMemory that writes every change through to a JSON file"""

    name = "json"

    def __init__(self, storage_path: str | Path) -> None:
        super().__init__()
        self.storage_path = Path(storage_path)
        try:
            self._load_from_storage()
        except FileNotFoundError:
            logger.info("Memory file %s not found, starting empty", self.storage_path)
        except (OSError, ValueError, KeyError, TypeError, AttributeError) as e:
            raise ConfigError(
                f"Cannot load memory file {self.storage_path}: {e}"
            ) from e

    def _load_from_storage(self) -> None:
        with open(self.storage_path, "r", encoding="utf-8") as f:
            data = json.load(f)

        for item in data.get("entries", []):
            entry = MemoryEntry(
                key=item["key"],
                content=item["content"],
                category=MemoryCategory(item.get("category", "core")),
                timestamp=item.get("timestamp", ""),
            )
            self.entries[entry.key] = entry

    async def _persist(self) -> None:
        payload = {
            "entries": [
                {**asdict(entry), "category": entry.category.value, "score": None}
                for entry in self.entries.values()
            ]
        }
        text = json.dumps(payload, indent=2, ensure_ascii=False)
        await asyncio.to_thread(self._write, text)

    def _write(self, text: str) -> None:
        self.storage_path.parent.mkdir(parents=True, exist_ok=True)
        self.storage_path.write_text(text, encoding="utf-8")


class NoneMemory(Memory):
    """Memory that stores nothing and recalls nothing"""

    name = "none"

    async def store(self, key: str, content: str, category: MemoryCategory) -> None:
        return None

    async def recall(self, query: str, limit: int) -> list[MemoryEntry]:
        return []

    async def get(self, key: str) -> MemoryEntry | None:
        return None

    async def forget(self, key: str) -> bool:
        return False

    async def count(self) -> int:
        return 0
