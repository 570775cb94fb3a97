"""Remote plugin/theme file headers.

Resource:
  provider file read of <file> at ref=<branch>, parsed into {header_key: value}
"""

from __future__ import annotations

from typing import Dict, Optional, TYPE_CHECKING

from common_types import ApiMethod, CacheKey

from ..file_headers import get_file_headers
from .base_cached import CachedResourceBase

if TYPE_CHECKING:  # pragma: no cover
    from .. import RemoteAPI


class FileHeadersCached(CachedResourceBase[Dict[str, str]]):
    def __init__(self, api: "RemoteAPI", file: str):
        super().__init__(api)
        self.file = str(file)

    @property
    def cache_key(self) -> CacheKey:
        return CacheKey.FILE

    def api_call_format(self) -> str:
        return f"GET file {self.file}?ref=<branch>"

    def fetch(self) -> Optional[Dict[str, str]]:
        contents = self.api.fetch_file(self.file, ApiMethod.FILE)
        if contents is None:
            return None
        return get_file_headers(contents, self.api.descriptor.type)
