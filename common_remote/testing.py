# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""In-memory stand-ins for the HTTP transport and the disk caches (used by the test modules)."""

from __future__ import annotations

import urllib.parse
from pathlib import Path
from typing import Any, Dict, List, Optional

from cache.cache_transient import TransientStore

from .exceptions import RemoteNotFoundError
from .notices import NoticeBoard


class FakeTransport:
    """Drop-in for RemoteHTTPClient: routes by URL path suffix, records every call.

    A route value that is an exception instance is raised; unknown paths raise 404.
    """

    def __init__(self, routes: Optional[Dict[str, Any]] = None):
        self.routes: Dict[str, Any] = dict(routes or {})
        self.calls: List[str] = []
        self.headers: List[Dict[str, str]] = []

    def get(
        self,
        url: str,
        *,
        headers: Optional[Dict[str, str]] = None,
        label: Optional[str] = None,
        expect_json: bool = True,
    ) -> Any:
        self.calls.append(url)
        self.headers.append(dict(headers or {}))
        path = urllib.parse.urlsplit(url).path
        # Longest suffix wins so "/projects" never shadows "/projects/42/repository/tags".
        for suffix in sorted(self.routes, key=len, reverse=True):
            if path.endswith(suffix):
                payload = self.routes[suffix]
                if isinstance(payload, Exception):
                    raise payload
                return payload
        raise RemoteNotFoundError(status_code=404, endpoint=path, message=f"404 Not Found for {path}")

    def calls_to(self, suffix: str) -> List[str]:
        return [u for u in self.calls if urllib.parse.urlsplit(u).path.endswith(suffix)]


def make_store(directory: Path) -> TransientStore:
    return TransientStore(cache_file=Path(directory) / "transients.json")


def make_notices(directory: Path) -> NoticeBoard:
    return NoticeBoard(cache_file=Path(directory) / "notices.json")
