"""Remote changelog.

Resources:
  changes:   raw CHANGES file text -> {"content": <text>}
  changelog: rendered HTML of the above, cached separately
"""

from __future__ import annotations

from typing import Dict, Optional, TYPE_CHECKING

from common_types import ApiMethod, CacheKey

from ..changelog import render_markdown
from .base_cached import CachedResourceBase

if TYPE_CHECKING:  # pragma: no cover
    from .. import RemoteAPI


class ChangesCached(CachedResourceBase[Dict[str, str]]):
    def __init__(self, api: "RemoteAPI", changes: str):
        super().__init__(api)
        self.changes = str(changes)

    @property
    def cache_key(self) -> CacheKey:
        return CacheKey.CHANGES

    def api_call_format(self) -> str:
        return f"GET file {self.changes}?ref=<branch>"

    def local(self) -> Optional[Dict[str, str]]:
        content = self.api.get_local_info(self.changes)
        return {"content": content} if content else None

    def fetch(self) -> Optional[Dict[str, str]]:
        content = self.api.fetch_file(self.changes, ApiMethod.CHANGES)
        return {"content": content} if content is not None else None


class ChangelogCached(CachedResourceBase[str]):
    """Rendered changelog; never touches the network."""

    def __init__(self, api: "RemoteAPI", content: str):
        super().__init__(api)
        self.content = str(content or "")

    @property
    def cache_key(self) -> CacheKey:
        return CacheKey.CHANGELOG

    def api_call_format(self) -> str:
        return "render(changes.content)"

    def fetch(self) -> Optional[str]:
        return render_markdown(self.content)
