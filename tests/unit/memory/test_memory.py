"""
Unit tests for memory backends.
"""

import json

import pytest

from toolloop.config import ConfigError, MemoryConfig
from toolloop.memory import (
    InMemoryMemory,
    JsonFileMemory,
    MemoryCategory,
    NoneMemory,
    create_memory,
)


class TestInMemoryMemory:
    """Test storing and keyword recall."""

    async def test_store_and_get(self):
        memory = InMemoryMemory()

        await memory.store("lang", "Prefers Python", MemoryCategory.CORE)

        entry = await memory.get("lang")
        assert entry.content == "Prefers Python"
        assert entry.category == MemoryCategory.CORE
        assert await memory.count() == 1

    async def test_store_same_key_replaces(self):
        memory = InMemoryMemory()

        await memory.store("k", "old", MemoryCategory.CORE)
        await memory.store("k", "new", MemoryCategory.DAILY)

        assert await memory.count() == 1
        assert (await memory.get("k")).content == "new"

    async def test_recall_ranks_by_overlap(self):
        memory = InMemoryMemory()
        await memory.store("a", "python testing with pytest", MemoryCategory.CORE)
        await memory.store("b", "rust compiler", MemoryCategory.CORE)
        await memory.store("c", "python packaging", MemoryCategory.CORE)

        entries = await memory.recall("python pytest", 5)

        assert [e.key for e in entries] == ["a", "c"]
        assert entries[0].score == 1.0
        assert entries[1].score == 0.5

    async def test_recall_respects_limit(self):
        memory = InMemoryMemory()
        for i in range(8):
            await memory.store(f"k{i}", "shared word", MemoryCategory.CORE)

        assert len(await memory.recall("shared", 5)) == 5
        assert await memory.recall("shared", 0) == []

    async def test_recall_prefers_recent_on_tie(self):
        memory = InMemoryMemory()
        await memory.store("old", "coffee", MemoryCategory.CORE)
        await memory.store("new", "coffee", MemoryCategory.CORE)

        entries = await memory.recall("coffee", 1)

        assert entries[0].key == "new"

    async def test_recall_nothing_relevant(self):
        memory = InMemoryMemory()
        await memory.store("a", "apples", MemoryCategory.CORE)

        assert await memory.recall("bananas", 5) == []
        assert await memory.recall("", 5) == []

    async def test_forget(self):
        memory = InMemoryMemory()
        await memory.store("a", "apples", MemoryCategory.CORE)

        assert await memory.forget("a") is True
        assert await memory.forget("a") is False
        assert await memory.get("a") is None


class TestJsonFileMemory:
    """Test write-through persistence."""

    async def test_persists_and_reloads(self, tmp_path):
        path = tmp_path / "mem" / "memory.json"
        memory = JsonFileMemory(path)

        await memory.store("city", "Lisbon", MemoryCategory.CORE)

        data = json.loads(path.read_text())
        assert data["entries"][0]["key"] == "city"
        assert data["entries"][0]["category"] == "core"

        reloaded = JsonFileMemory(path)
        entry = await reloaded.get("city")
        assert entry.content == "Lisbon"
        assert entry.category == MemoryCategory.CORE

    async def test_forget_persisted(self, tmp_path):
        path = tmp_path / "memory.json"
        memory = JsonFileMemory(path)
        await memory.store("a", "x", MemoryCategory.CORE)

        await memory.forget("a")

        assert await JsonFileMemory(path).count() == 0

    async def test_missing_file_starts_empty(self, tmp_path):
        memory = JsonFileMemory(tmp_path / "absent.json")

        assert await memory.count() == 0

    @pytest.mark.parametrize(
        "contents",
        [
            "{not json",
            '{"entries": [{"content": "no key"}]}',
            '{"entries": [{"key": "a", "content": "b", "category": "weekly"}]}',
            "[]",
        ],
    )
    def test_corrupt_file_is_config_error(self, tmp_path, contents):
        path = tmp_path / "memory.json"
        path.write_text(contents)

        with pytest.raises(ConfigError, match="Cannot load memory file"):
            JsonFileMemory(path)


class TestNoneMemory:
    async def test_stores_nothing(self):
        memory = NoneMemory()
        await memory.store("a", "b", MemoryCategory.CORE)

        assert await memory.recall("b", 5) == []
        assert await memory.count() == 0


class TestCreateMemory:
    def test_backends(self, tmp_path):
        assert isinstance(create_memory(MemoryConfig(backend="in_memory")), InMemoryMemory)
        assert isinstance(create_memory(MemoryConfig(backend="none")), NoneMemory)

        json_memory = create_memory(MemoryConfig(backend="json"), tmp_path)
        assert isinstance(json_memory, JsonFileMemory)
        assert json_memory.storage_path == tmp_path / "memory.json"

    def test_explicit_path(self, tmp_path):
        config = MemoryConfig(backend="json", path=str(tmp_path / "x.json"))

        assert create_memory(config).storage_path == tmp_path / "x.json"

    def test_unknown_backend(self):
        config = MemoryConfig.model_construct(backend="redis")

        with pytest.raises(ConfigError):
            create_memory(config)
