#!/usr/bin/env python3
# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""
JSON file store shared by the transient cache and the notice board.

On-disk format:
    {"version": <schema>, "items": {<key>: <value>, ...}}

Several update checks may run at once (cron + manual), so every write re-reads the
file under an fcntl lock and merges: the writer's keys win, keys it deleted stay
deleted, everything else on disk is preserved.
"""

from __future__ import annotations

import json
import os
import time
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from threading import Lock
from typing import Any, Dict, Iterator, Optional, Set, Tuple

try:
    import fcntl  # type: ignore
except ImportError:  # pragma: no cover - best-effort on non-POSIX
    fcntl = None  # type: ignore

LOCK_TIMEOUT_S = 10.0
LOCK_POLL_S = 0.1


@dataclass
class BaseCacheStats:
    """Lookup counters for one store instance (process-local)."""
    hit: int = 0
    miss: int = 0
    write: int = 0


class BaseDiskCache:
    """Thread-safe key/value store persisted to one JSON file.

    Subclasses hold `self._mu` while calling `_load_once()` and the `_*_item()`
    helpers, and call `_persist()` (or let the owner call `flush()`) to write back.
    """

    def __init__(self, *, cache_file: Path, schema_version: int = 1):
        self._mu = Lock()
        self._cache_file = Path(cache_file)
        self._schema_version = int(schema_version)
        self._items: Dict[str, Any] = {}
        self._removed: Set[str] = set()
        self._loaded = False
        self._dirty = False
        self._disk_count_at_load = 0
        self.stats = BaseCacheStats()

    @property
    def cache_file(self) -> Path:
        return self._cache_file

    # -----------------------------------------------------------------------------
    # Disk access
    # -----------------------------------------------------------------------------

    @contextmanager
    def _disk_lock(self) -> Iterator[bool]:
        """Hold an exclusive lock on `.<cache>.lock`; yields False if it could not be taken."""
        lock_path = self._cache_file.with_name(f".{self._cache_file.name}.lock")
        if fcntl is None:
            yield False
            return
        try:
            lock_path.parent.mkdir(parents=True, exist_ok=True)
            fh = open(lock_path, "w")
        except OSError:
            yield False
            return

        locked = False
        try:
            deadline = time.monotonic() + LOCK_TIMEOUT_S
            while time.monotonic() < deadline:
                try:
                    fcntl.flock(fh.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
                    locked = True
                    break
                except OSError:
                    time.sleep(LOCK_POLL_S)
            yield locked
        finally:
            if locked:
                try:
                    fcntl.flock(fh.fileno(), fcntl.LOCK_UN)
                except OSError:
                    pass
            fh.close()

    def _read_disk_items(self) -> Dict[str, Any]:
        """Items currently on disk ({} when the file is missing or unreadable)."""
        try:
            raw = json.loads(self._cache_file.read_text() or "{}")
        except (OSError, ValueError):
            return {}
        items = raw.get("items") if isinstance(raw, dict) else None
        return dict(items) if isinstance(items, dict) else {}

    def _write_disk_items(self, items: Dict[str, Any]) -> None:
        payload = json.dumps({"version": self._schema_version, "items": items}, separators=(",", ":"))
        tmp = self._cache_file.with_name(f"{self._cache_file.name}.tmp.{os.getpid()}")
        tmp.write_text(payload)
        os.replace(tmp, self._cache_file)

    def _load_once(self) -> None:
        if self._loaded:
            return
        self._loaded = True
        self._items = self._read_disk_items()
        self._disk_count_at_load = len(self._items)

    def _persist(self) -> None:
        """Merge this instance's changes into the file (no-op when nothing changed)."""
        if not self._dirty:
            return
        self._cache_file.parent.mkdir(parents=True, exist_ok=True)
        with self._disk_lock():
            merged = self._read_disk_items()
            merged.update(self._items)
            for key in self._removed:
                merged.pop(key, None)
            self._write_disk_items(merged)
        self._items = merged
        self._removed.clear()
        self._dirty = False

    def flush(self) -> None:
        with self._mu:
            self._persist()

    def get_cache_sizes(self) -> Tuple[int, int]:
        """(entries in memory now, entries on disk when first loaded)."""
        with self._mu:
            self._load_once()
            return (len(self._items), self._disk_count_at_load)

    # -----------------------------------------------------------------------------
    # Item helpers (caller holds self._mu)
    # -----------------------------------------------------------------------------

    def _get_items(self) -> Dict[str, Any]:
        return self._items

    def _check_item(self, key: str) -> Optional[Any]:
        """Raw value for `key` (None if absent); counts a hit or miss."""
        value = self._items.get(key)
        if value is None:
            self.stats.miss += 1
        else:
            self.stats.hit += 1
        return value

    def _set_item(self, key: str, value: Any) -> None:
        self._items[key] = value
        self._removed.discard(key)
        self._dirty = True
        self.stats.write += 1

    def _delete_item(self, key: str) -> bool:
        if key not in self._items:
            return False
        del self._items[key]
        self._removed.add(key)
        self._dirty = True
        return True
