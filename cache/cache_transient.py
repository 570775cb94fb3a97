"""Persistent transient store for per-repo response fragments.

Caching strategy:
  - Key: transient id (string, e.g. "gitlab:acme/widget:tags")
  - Value: {"v": <payload>, "meta": {"fetched_at": <epoch_s>, "ttl_s": <seconds>}}
  - An entry past fetched_at + ttl_s reads as missing; it stays on disk until
    `purge_expired()` is called (readers never reap).
"""
from __future__ import annotations

import time
from pathlib import Path
from typing import Any, Dict, Optional

from cache.cache_base import BaseDiskCache
from common import DEFAULT_TRANSIENT_TTL_S, resolve_cache_path

CACHE_ENTRY_VALUE_KEY = "v"
CACHE_ENTRY_META_KEY = "meta"
CACHE_ENTRY_FETCHED_AT_KEY = "fetched_at"
CACHE_ENTRY_TTL_S_KEY = "ttl_s"

CACHE_FILE_DEFAULT = "transients.json"


def make_cache_entry(*, value: Any, fetched_at: int, ttl_s: Optional[int] = None) -> Dict[str, Any]:
    """Standard on-disk cache entry schema.

    Format:
      {"v": <value>, "meta": {"fetched_at": <epoch_seconds>, "ttl_s": <seconds?>}}
    """
    meta: Dict[str, Any] = {CACHE_ENTRY_FETCHED_AT_KEY: int(fetched_at)}
    if ttl_s is not None:
        meta[CACHE_ENTRY_TTL_S_KEY] = int(ttl_s)
    return {CACHE_ENTRY_VALUE_KEY: value, CACHE_ENTRY_META_KEY: meta}


def is_cache_entry(obj: Any) -> bool:
    return (
        isinstance(obj, dict)
        and CACHE_ENTRY_VALUE_KEY in obj
        and CACHE_ENTRY_META_KEY in obj
        and isinstance(obj.get(CACHE_ENTRY_META_KEY), dict)
    )


def cache_entry_value(entry: Dict[str, Any]) -> Any:
    return entry.get(CACHE_ENTRY_VALUE_KEY)


def cache_entry_expires_at(entry: Dict[str, Any]) -> Optional[int]:
    """Epoch second at which the entry stops being served (None = never)."""
    meta = entry.get(CACHE_ENTRY_META_KEY)
    if not isinstance(meta, dict):
        return None
    fetched_at = meta.get(CACHE_ENTRY_FETCHED_AT_KEY)
    ttl_s = meta.get(CACHE_ENTRY_TTL_S_KEY)
    if not isinstance(fetched_at, int) or not isinstance(ttl_s, int):
        return None
    return fetched_at + ttl_s


def is_cache_entry_fresh(entry: Dict[str, Any], *, now: int) -> bool:
    expires_at = cache_entry_expires_at(entry)
    return expires_at is None or int(now) < expires_at


class TransientStore(BaseDiskCache):
    """Keyed, time-bounded store backing the per-repo response caches.

    Stats (hit/miss/write) are tracked automatically by BaseDiskCache; an expired
    entry counts as a miss.
    """

    _SCHEMA_VERSION = 1

    def __init__(self, *, cache_file: Path):
        super().__init__(cache_file=cache_file, schema_version=self._SCHEMA_VERSION)

    def get_transient(self, transient_id: str, *, now: Optional[int] = None) -> Optional[Any]:
        """Return the live payload for `transient_id`, or None if missing/expired."""
        now_i = int(time.time()) if now is None else int(now)
        with self._mu:
            self._load_once()
            entry = self._check_item(transient_id)
            if not is_cache_entry(entry):
                return None
            if not is_cache_entry_fresh(entry, now=now_i):
                self.stats.hit -= 1
                self.stats.miss += 1
                return None
            return cache_entry_value(entry)

    def set_transient(
        self,
        transient_id: str,
        value: Any,
        ttl_s: int = DEFAULT_TRANSIENT_TTL_S,
        *,
        now: Optional[int] = None,
    ) -> None:
        """Store `value` under `transient_id` for `ttl_s` seconds (overwrites)."""
        fetched_at = int(time.time()) if now is None else int(now)
        with self._mu:
            self._load_once()
            self._set_item(transient_id, make_cache_entry(value=value, fetched_at=fetched_at, ttl_s=int(ttl_s)))

    def delete_transient(self, transient_id: str) -> bool:
        with self._mu:
            self._load_once()
            return self._delete_item(transient_id)

    def delete_prefix(self, prefix: str) -> int:
        """Drop every entry whose id starts with `prefix` (used to reset one repo)."""
        with self._mu:
            self._load_once()
            keys = [k for k in self._get_items() if str(k).startswith(prefix)]
            for k in keys:
                self._delete_item(k)
            return len(keys)

    def purge_expired(self, *, now: Optional[int] = None) -> int:
        """Garbage-collect expired entries. Returns the number removed."""
        now_i = int(time.time()) if now is None else int(now)
        with self._mu:
            self._load_once()
            stale = [
                k
                for (k, entry) in self._get_items().items()
                if not is_cache_entry(entry) or not is_cache_entry_fresh(entry, now=now_i)
            ]
            for k in stale:
                self._delete_item(k)
            return len(stale)


# Singleton cache instance
TRANSIENT_CACHE = TransientStore(cache_file=resolve_cache_path(CACHE_FILE_DEFAULT))
