"""Remote tag list.

Resource:
  provider tag listing -> [tag_name, ...]

An empty listing is cached as {"message": "No tags found"} so later calls within the
TTL fail the validity check without another round trip.
"""

from __future__ import annotations

from typing import Any, Optional

from common_types import CacheKey

from .base_cached import CachedResourceBase

NO_TAGS_PAYLOAD = {"message": "No tags found"}


class TagsCached(CachedResourceBase[Any]):
    @property
    def cache_key(self) -> CacheKey:
        return CacheKey.TAGS

    def api_call_format(self) -> str:
        return "GET tags"

    def fetch(self) -> Optional[Any]:
        names = self.api.fetch_tags()
        if not names:
            return dict(NO_TAGS_PAYLOAD)
        return list(names)

    def should_cache(self, value: Optional[Any]) -> bool:
        return True
