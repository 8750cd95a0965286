"""
Storefront Backend - Category Registry
========================================

What:  The deduplicated list of product category names, persisted as a JSON
       side file: {"categories": ["hats", "shoes", ...]}.
How:   aiofiles for non-blocking reads/writes. merge() reads the current
       list, appends unseen names in order, and writes the whole file to a
       temp sibling that is then swapped in with os.replace.
Who:   ProductService (create/update with `newCategories`) and
       GET /product/categories.

Concurrency:
    An asyncio.Lock serialises merges inside one process, so concurrent
    requests cannot lose each other's names. The swap is atomic on POSIX,
    so readers never see a half-written file. Separate worker processes
    writing the same file can still race (last writer wins).

The registry only grows; there is no removal path.
"""

import asyncio
import json
import logging
import uuid
from pathlib import Path
from typing import Iterable, List, Union

import aiofiles
import aiofiles.os

from app.exceptions import FileStorageError

logger = logging.getLogger(__name__)


def _dedupe(names: Iterable[str]) -> List[str]:
    seen = set()
    ordered = []
    for name in names:
        if name not in seen:
            seen.add(name)
            ordered.append(name)
    return ordered


class CategoryRegistry:
    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._lock = asyncio.Lock()

    async def read(self) -> List[str]:
        """
        Return the registered categories in insertion order.

        A missing file is an empty registry.
        """
        if not await aiofiles.os.path.exists(self.path):
            return []
        try:
            async with aiofiles.open(self.path, "r", encoding="utf-8") as f:
                raw = await f.read()
        except OSError as e:
            logger.error("Failed to read category registry %s: %s", self.path, str(e))
            raise FileStorageError(
                message="Error reading categories",
                context={"path": str(self.path), "os_error": str(e)},
            )

        if not raw.strip():
            return []
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.error("Category registry %s is not valid JSON: %s", self.path, str(e))
            raise FileStorageError(
                message="Error reading categories",
                context={"path": str(self.path), "json_error": str(e)},
            )
        if not isinstance(data, dict):
            logger.error("Category registry %s is not a JSON object", self.path)
            raise FileStorageError(
                message="Error reading categories",
                context={"path": str(self.path), "json_type": type(data).__name__},
            )
        return _dedupe(str(name) for name in data.get("categories") or [])

    async def merge(self, names: Iterable[str]) -> List[str]:
        """
        Union `names` into the registry and persist the result.

        Creates the file (and its directory) when absent. Returns the full
        list after the merge.
        """
        incoming = [name for name in _dedupe(names) if name]
        async with self._lock:
            existing = await self.read()
            merged = _dedupe(existing + incoming)
            if merged == existing and await aiofiles.os.path.exists(self.path):
                return merged
            await self._write(merged)

        added = len(merged) - len(existing)
        if added:
            logger.info("Category registry: added %d new categories", added)
        return merged

    async def _write(self, categories: List[str]) -> None:
        tmp_path = self.path.with_name(f".{self.path.name}.{uuid.uuid4().hex[:8]}.tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(tmp_path, "w", encoding="utf-8") as f:
                await f.write(json.dumps({"categories": categories}, indent=2))
            await aiofiles.os.replace(tmp_path, self.path)
        except OSError as e:
            logger.error("Failed to write category registry %s: %s", self.path, str(e))
            if await aiofiles.os.path.exists(tmp_path):
                await aiofiles.os.remove(tmp_path)
            raise FileStorageError(
                message="Error saving categories",
                context={"path": str(self.path), "os_error": str(e)},
            )
