# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Blocking HTTP transport shared by every provider.

No retries: a failed or malformed response is reported once and the caller treats it
as "no info available" for that fetch.
"""

from __future__ import annotations

import logging
import time
import urllib.parse
from typing import Any, Dict, Optional

import requests

from common import DEFAULT_HTTP_TIMEOUT_S

from .exceptions import (
    RemoteAuthError,
    RemoteForbiddenError,
    RemoteNotFoundError,
    RemoteRequestError,
)
from .stats import REMOTE_API_STATS

_logger = logging.getLogger(__name__)

USER_AGENT = "remote-updater/1.0"


def redact_url(url: str) -> str:
    """Strip the query string (it may carry a token) for logs and stats."""
    parts = urllib.parse.urlsplit(str(url or ""))
    return urllib.parse.urlunsplit(parts._replace(query=""))


class RemoteHTTPClient:
    """Thin wrapper around `requests.get` with error translation and REST stats."""

    def __init__(self, *, timeout: int = DEFAULT_HTTP_TIMEOUT_S, session: Optional[requests.Session] = None):
        self.timeout = int(timeout)
        self.session = session

    def get(
        self,
        url: str,
        *,
        headers: Optional[Dict[str, str]] = None,
        label: Optional[str] = None,
        expect_json: bool = True,
    ) -> Any:
        """GET `url` and return decoded JSON (dict/list) or text, or raise a RemoteAPIError."""
        ep = redact_url(url)
        lbl = str(label or "").strip() or "unknown"
        hdrs = {"User-Agent": USER_AGENT}
        hdrs.update(headers or {})
        t0 = time.monotonic()
        status_code: Optional[int] = None
        getter = self.session.get if self.session is not None else requests.get

        try:
            response = getter(url, headers=hdrs, timeout=self.timeout)
            status_code = int(response.status_code)

            if status_code == 401:
                raise RemoteAuthError(status_code=401, endpoint=ep, message=f"401 Unauthorized for {ep}. Check your token.")
            if status_code == 403:
                raise RemoteForbiddenError(status_code=403, endpoint=ep, message=f"403 Forbidden for {ep}. Token may lack permissions.")
            if status_code == 404:
                raise RemoteNotFoundError(status_code=404, endpoint=ep, message=f"404 Not Found for {ep}")

            response.raise_for_status()
            if not expect_json:
                return response.text
            return response.json()
        except requests.exceptions.RequestException as e:
            raise RemoteRequestError(
                status_code=int(status_code or 0), endpoint=ep, message=f"Request failed for {ep}: {e}"
            ) from e
        except ValueError as e:
            # Body was not JSON.
            raise RemoteRequestError(
                status_code=int(status_code or 0), endpoint=ep, message=f"Undecodable response from {ep}: {e}"
            ) from e
        finally:
            dt = max(0.0, time.monotonic() - t0)
            REMOTE_API_STATS.record_rest(label=lbl, endpoint=ep, status_code=status_code, dt_s=dt)
            _logger.debug("GET %s [%s] -> %s (%.2fs)", ep, lbl, status_code, dt)
