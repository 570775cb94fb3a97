# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Persistent, user-visible notices (one per host).

A configuration error stays on the board across runs until `clear()` is called
for its host (the latest message per host wins).
"""

from __future__ import annotations

import time
from pathlib import Path
from typing import Dict

from cache.cache_base import BaseDiskCache
from common import resolve_cache_path

NOTICES_FILE_DEFAULT = "notices.json"


class NoticeBoard(BaseDiskCache):
    _SCHEMA_VERSION = 1

    def __init__(self, *, cache_file: Path):
        super().__init__(cache_file=cache_file, schema_version=self._SCHEMA_VERSION)

    def create_error_message(self, host: str, message: str) -> None:
        with self._mu:
            self._load_once()
            self._set_item(str(host), {"message": str(message), "ts": int(time.time())})
            self._persist()

    def clear(self, host: str) -> None:
        with self._mu:
            self._load_once()
            if self._delete_item(str(host)):
                self._persist()

    def messages(self) -> Dict[str, str]:
        with self._mu:
            self._load_once()
            return {
                str(k): str(v.get("message") or "")
                for (k, v) in self._get_items().items()
                if isinstance(v, dict)
            }


NOTICES = NoticeBoard(cache_file=resolve_cache_path(NOTICES_FILE_DEFAULT))
