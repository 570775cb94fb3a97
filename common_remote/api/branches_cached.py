"""Remote branches -> download links.

Resource:
  provider branch listing -> {branch_name: download_url}

The computed mapping (not the raw listing) is what gets cached, without tokens;
RemoteAPI.get_remote_branches adds the current token on read.
"""

from __future__ import annotations

from typing import Dict, Optional

from common_types import CacheKey

from .base_cached import CachedResourceBase


class BranchesCached(CachedResourceBase[Dict[str, str]]):
    @property
    def cache_key(self) -> CacheKey:
        return CacheKey.BRANCHES

    def api_call_format(self) -> str:
        return "GET branches"

    def fetch(self) -> Optional[Dict[str, str]]:
        names = self.api.fetch_branches()
        if not names:
            return None
        return {name: self.api.download_url(self.api.resolve_download_ref(branch_switch=name)) for name in names}
