"""
Settings Store
==============

Durable key/value storage for model configuration, index schema,
example corpus and the debug flag.
"""

import asyncio
import copy
import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from nl_to_es.models import LLMConfig, SampleQuery
from nl_to_es.schema import PLACEHOLDER_SCHEMA

logger = logging.getLogger(__name__)

CONFIG_KEY = "llmConfig"
SCHEMA_KEY = "elasticsearchSchema"
CORPUS_KEY = "sampleQueries"
DEBUG_KEY = "debugMode"


class SettingsStore(ABC):
    """
    Asynchronous settings store.

    Subclasses implement raw ``get_item``/``set_item``; the typed accessors
    apply the documented defaults for missing keys.
    """

    @abstractmethod
    async def get_item(self, key: str) -> Any:
        """Return the stored value for key, or None."""
        pass

    @abstractmethod
    async def set_item(self, key: str, value: Any) -> None:
        """Persist value under key."""
        pass

    async def get_config(self) -> LLMConfig | None:
        data = await self.get_item(CONFIG_KEY)
        if not isinstance(data, dict):
            return None
        try:
            return LLMConfig.from_dict(data)
        except (TypeError, ValueError) as e:
            logger.warning("Ignoring unreadable %s: %s", CONFIG_KEY, e)
            return None

    async def set_config(self, config: LLMConfig) -> None:
        await self.set_item(CONFIG_KEY, config.to_dict())

    async def get_schema(self) -> dict:
        data = await self.get_item(SCHEMA_KEY)
        return data if isinstance(data, dict) else copy.deepcopy(PLACEHOLDER_SCHEMA)

    async def set_schema(self, schema: dict) -> None:
        await self.set_item(SCHEMA_KEY, schema)

    async def get_example_corpus(self) -> list[SampleQuery]:
        data = await self.get_item(CORPUS_KEY)
        if not isinstance(data, list):
            return []
        return [SampleQuery.from_dict(item) for item in data if isinstance(item, dict)]

    async def set_example_corpus(self, samples: list[SampleQuery]) -> None:
        await self.set_item(CORPUS_KEY, [s.to_dict() for s in samples])

    async def get_debug(self) -> bool:
        return await self.get_item(DEBUG_KEY) is True

    async def set_debug(self, debug: bool) -> None:
        await self.set_item(DEBUG_KEY, bool(debug))


class InMemorySettingsStore(SettingsStore):
    """Non-durable store, mainly for tests and the demo app."""

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = copy.deepcopy(initial or {})

    async def get_item(self, key: str) -> Any:
        return copy.deepcopy(self._data.get(key))

    async def set_item(self, key: str, value: Any) -> None:
        self._data[key] = copy.deepcopy(value)


class JsonFileSettingsStore(SettingsStore):
    """Stores all settings in a single JSON document on disk."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._lock = asyncio.Lock()

    def _read(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text("utf-8"))
        except (OSError, ValueError) as e:
            logger.warning("Could not read %s, using defaults: %s", self.path, e)
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(data, indent=2), encoding="utf-8")
        tmp.replace(self.path)

    async def get_item(self, key: str) -> Any:
        data = await asyncio.to_thread(self._read)
        return data.get(key)

    async def set_item(self, key: str, value: Any) -> None:
        async with self._lock:
            data = await asyncio.to_thread(self._read)
            data[key] = value
            await asyncio.to_thread(self._write, data)
        logger.info("Saved setting %s to %s", key, self.path)
