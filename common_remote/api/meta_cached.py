"""Remote repository metadata (provider-specific blob)."""

from __future__ import annotations

from typing import Any, Dict, Optional

from common_types import CacheKey

from .base_cached import CachedResourceBase


class MetaCached(CachedResourceBase[Dict[str, Any]]):
    @property
    def cache_key(self) -> CacheKey:
        return CacheKey.META

    def api_call_format(self) -> str:
        return "GET repo metadata"

    def fetch(self) -> Optional[Dict[str, Any]]:
        return self.api.fetch_meta()
