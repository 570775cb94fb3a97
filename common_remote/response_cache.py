# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Per-repo response cache.

One live entry per (repo, CacheKey); each entry carries its own TTL and expires
independently. Expired entries are left in the backing TransientStore for its
`purge_expired()` pass.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from cache.cache_transient import TransientStore
from common import DEFAULT_TRANSIENT_TTL_S
from common_types import CacheKey

from .stats import REMOTE_API_STATS

_logger = logging.getLogger(__name__)


class ResponseCache:
    """Typed view of a TransientStore scoped to one repo identity."""

    def __init__(self, repo_id: str, store: TransientStore, *, ttl_s: int = DEFAULT_TRANSIENT_TTL_S):
        self.repo_id = str(repo_id)
        self.store = store
        self.ttl_s = int(ttl_s)

    def transient_id(self, key: CacheKey) -> str:
        return f"{self.repo_id}:{CacheKey(key).value}"

    def get(self, key: CacheKey) -> Optional[Any]:
        """Cached payload for `key`, or None on miss/expiry (absence is not an error)."""
        key = CacheKey(key)
        value = self.store.get_transient(self.transient_id(key))
        if value is None:
            REMOTE_API_STATS.cache_miss(key.value)
            _logger.debug("cache miss %s", self.transient_id(key))
        else:
            REMOTE_API_STATS.cache_hit(key.value)
        return value

    def put(self, key: CacheKey, payload: Any, ttl_s: Optional[int] = None) -> None:
        key = CacheKey(key)
        self.store.set_transient(self.transient_id(key), payload, self.ttl_s if ttl_s is None else int(ttl_s))
        REMOTE_API_STATS.cache_write(key.value)

    def clear(self) -> int:
        """Forget everything cached for this repo."""
        return self.store.delete_prefix(f"{self.repo_id}:")
