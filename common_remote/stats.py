# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Process-wide REST + response-cache statistics.

Key conventions: REST calls are grouped by logical label (the ApiMethod value),
cache operations by CacheKey value.
"""

from __future__ import annotations

import threading
from typing import Any, Dict, Optional


class _RemoteAPIStats:
    """Global singleton for tracking remote REST + cache statistics."""

    def __init__(self):
        self._mu = threading.Lock()
        self.reset()

    def reset(self) -> None:
        # REST call stats (by logical label/category).
        self.rest_calls_total = 0
        self.rest_calls_by_label: Dict[str, int] = {}
        self.rest_success_total = 0
        self.rest_time_total_s = 0.0
        self.rest_time_by_label_s: Dict[str, float] = {}

        # Error stats
        self.rest_errors_total = 0
        self.rest_errors_by_status: Dict[int, int] = {}
        self.rest_last_error: Dict[str, Any] = {}

        # Response cache stats (by cache key)
        self.cache_hits: Dict[str, int] = {}
        self.cache_misses: Dict[str, int] = {}
        self.cache_writes: Dict[str, int] = {}

    def record_rest(self, *, label: str, endpoint: str, status_code: Optional[int], dt_s: float) -> None:
        """Record one REST call."""
        lbl = str(label or "").strip() or "unknown"
        dt = max(0.0, float(dt_s or 0.0))
        with self._mu:
            self.rest_calls_total += 1
            self.rest_calls_by_label[lbl] = self.rest_calls_by_label.get(lbl, 0) + 1
            self.rest_time_total_s += dt
            self.rest_time_by_label_s[lbl] = self.rest_time_by_label_s.get(lbl, 0.0) + dt

            if status_code is None:
                return
            sc = int(status_code)
            if 200 <= sc < 300:
                self.rest_success_total += 1
            elif sc >= 400:
                self.rest_errors_total += 1
                self.rest_errors_by_status[sc] = self.rest_errors_by_status.get(sc, 0) + 1
                self.rest_last_error = {"status": sc, "endpoint": str(endpoint or ""), "label": lbl}

    def cache_hit(self, name: str) -> None:
        k = str(name or "").strip() or "unknown"
        with self._mu:
            self.cache_hits[k] = self.cache_hits.get(k, 0) + 1

    def cache_miss(self, name: str) -> None:
        k = str(name or "").strip() or "unknown"
        with self._mu:
            self.cache_misses[k] = self.cache_misses.get(k, 0) + 1

    def cache_write(self, name: str) -> None:
        k = str(name or "").strip() or "unknown"
        with self._mu:
            self.cache_writes[k] = self.cache_writes.get(k, 0) + 1

    def to_dict(self) -> Dict[str, Any]:
        """Snapshot for `update_check.py --stats`."""
        with self._mu:
            return {
                "rest": {
                    "total": int(self.rest_calls_total),
                    "success_total": int(self.rest_success_total),
                    "error_total": int(self.rest_errors_total),
                    "time_total_s": round(float(self.rest_time_total_s), 3),
                    "by_label": dict(sorted(self.rest_calls_by_label.items(), key=lambda kv: (-kv[1], kv[0]))),
                    "time_by_label_s": {k: round(v, 3) for (k, v) in sorted(self.rest_time_by_label_s.items())},
                    "errors_by_status": dict(sorted(self.rest_errors_by_status.items())),
                    "last_error": dict(self.rest_last_error),
                },
                "cache": {
                    "hits_total": int(sum(self.cache_hits.values())),
                    "misses_total": int(sum(self.cache_misses.values())),
                    "writes_total": int(sum(self.cache_writes.values())),
                    "hits_by": dict(sorted(self.cache_hits.items())),
                    "misses_by": dict(sorted(self.cache_misses.items())),
                    "writes_by": dict(sorted(self.cache_writes.items())),
                },
            }


REMOTE_API_STATS = _RemoteAPIStats()
