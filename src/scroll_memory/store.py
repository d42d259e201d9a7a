"""Durable JSON store for scroll positions.

The store is a single JSON object whose keys are document paths and whose
values are ``{"scroll": <number>}`` objects (``{}`` when no offset is known).
File access goes through a :class:`StorageAdapter` so the host can supply
its own storage layer.
"""

from __future__ import annotations

import json
from pathlib import Path, PurePosixPath
from typing import Any, Protocol

from loguru import logger

from .state import EphemeralState, StateCache


class StorageAdapter(Protocol):
    def exists(self, path: str) -> bool: ...

    def read(self, path: str) -> str: ...

    def write(self, path: str, data: str) -> None: ...

    def mkdir(self, path: str) -> None: ...


class LocalStorageAdapter:
    """Storage adapter backed by the local file system, rooted at a vault directory."""

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    def resolve(self, path: str) -> Path:
        p = Path(path)
        if p.is_absolute():
            return p
        return self.root / p

    def exists(self, path: str) -> bool:
        return self.resolve(path).exists()

    def read(self, path: str) -> str:
        return self.resolve(path).read_text(encoding="utf-8")

    def write(self, path: str, data: str) -> None:
        target = self.resolve(path)
        tmp_path = target.with_suffix(target.suffix + ".tmp")
        tmp_path.write_text(data, encoding="utf-8")
        tmp_path.replace(target)

    def mkdir(self, path: str) -> None:
        self.resolve(path).mkdir(parents=True, exist_ok=True)


def parent_dir(path: str) -> str:
    """Parent of a vault-relative path, '' when the file sits at the root."""
    parent = str(PurePosixPath(path.replace("\\", "/")).parent)
    return "" if parent == "." else parent


def parse_db(text: str) -> dict[str, EphemeralState]:
    """Parse store contents; raises ValueError when the top level is not an object."""
    payload: Any = json.loads(text)
    if not isinstance(payload, dict):
        raise ValueError(f"Expected JSON object but got {type(payload).__name__}")

    entries: dict[str, EphemeralState] = {}
    for path, raw in payload.items():
        try:
            entries[str(path)] = EphemeralState.from_json(raw)
        except ValueError as e:
            logger.warning(f"Dropping invalid entry for {path!r}: {e}")
    return entries


class ScrollStore:
    """Reads and writes the position database through a storage adapter."""

    def __init__(self, storage: StorageAdapter, db_file_name: str) -> None:
        self.storage = storage
        self.db_file_name = db_file_name

    def read(self) -> dict[str, EphemeralState]:
        if not self.storage.exists(self.db_file_name):
            return {}
        return parse_db(self.storage.read(self.db_file_name))

    def write(self, text: str) -> None:
        folder = parent_dir(self.db_file_name)
        if folder and not self.storage.exists(folder):
            self.storage.mkdir(folder)
        self.storage.write(self.db_file_name, text)

    def load_cache(self) -> StateCache:
        """Build a cache from disk, starting empty if the store can't be read."""
        try:
            entries = self.read()
        except (OSError, ValueError) as e:
            logger.error(f"Can't read scroll position database {self.db_file_name}: {e}")
            entries = {}
        logger.debug(f"Loaded {len(entries)} scroll position(s) from {self.db_file_name}")
        return StateCache(entries)
