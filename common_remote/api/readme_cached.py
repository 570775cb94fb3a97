"""Remote readme.txt.

Resource:
  provider file read of readme.txt at ref=<branch> (or the bundled copy when no
  update is pending), parsed into a StructuredReadme dict
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from common_types import ApiMethod, CacheKey

from ..readme_parser import parse_readme
from .base_cached import CachedResourceBase

README_FILE = "readme.txt"


class ReadmeCached(CachedResourceBase[Dict[str, Any]]):
    @property
    def cache_key(self) -> CacheKey:
        return CacheKey.README

    def api_call_format(self) -> str:
        return f"GET file {README_FILE}?ref=<branch>"

    def local(self) -> Optional[Dict[str, Any]]:
        content = self.api.get_local_info(README_FILE)
        return parse_readme(content).to_dict() if content else None

    def fetch(self) -> Optional[Dict[str, Any]]:
        content = self.api.fetch_file(README_FILE, ApiMethod.README)
        return parse_readme(content).to_dict() if content is not None else None
