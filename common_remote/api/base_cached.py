# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Base class for cached remote resources.

Goal: make each fetcher readable + debuggable by enforcing a small interface:
- the cache slot it owns
- API call "display format"
- optional local-file fallback
- the actual provider fetch
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Generic, Optional, TypeVar, TYPE_CHECKING

from common_types import CacheKey

if TYPE_CHECKING:  # pragma: no cover
    from .. import RemoteAPI

T = TypeVar("T")

_logger = logging.getLogger(__name__)


class CachedResourceBase(ABC, Generic[T]):
    """Shared flow: cache lookup -> local fallback (no update pending) -> fetch -> cache write."""

    def __init__(self, api: "RemoteAPI"):
        self.api = api

    @property
    @abstractmethod
    def cache_key(self) -> CacheKey:
        """Response cache slot owned by this resource."""

    @abstractmethod
    def api_call_format(self) -> str:
        """Human-readable description of the remote call this resource performs."""

    @abstractmethod
    def fetch(self) -> Optional[T]:
        """Fetch from the provider and normalize; None when nothing usable came back."""

    def local(self) -> Optional[T]:
        """Payload built from bundled local files, or None if this resource has no fallback."""
        return None

    def should_cache(self, value: Optional[T]) -> bool:
        return value is not None

    def peek(self) -> Optional[Any]:
        """Cached payload only (no fallback, no network)."""
        return self.api.cache.get(self.cache_key)

    def load(self) -> Optional[T]:
        """Skip the cache read: local fallback when no update is pending, else network."""
        if not self.api.can_update():
            value = self.local()
            if value is not None:
                _logger.debug("%s: %s served from local files", self.api.descriptor.cache_id, self.cache_key.value)
                self.api.cache.put(self.cache_key, value)
                return value

        _logger.debug("%s: %s", self.api.descriptor.cache_id, self.api_call_format())
        value = self.fetch()
        if self.should_cache(value):
            self.api.cache.put(self.cache_key, value)
        return value

    def get(self) -> Optional[Any]:
        value = self.peek()
        if value is not None:
            return value
        return self.load()
