# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""GitHub provider for remote update resolution.

Endpoints (api.github.com, or <enterprise>/api/v3):
  GET /repos/{owner}/{repo}/contents/{path}?ref=   -> file content (base64)
  GET /repos/{owner}/{repo}/tags                   -> tags
  GET /repos/{owner}/{repo}/branches               -> branches
  GET /repos/{owner}/{repo}                        -> meta (pushed_at, private)

Auth: `Authorization: token <token>` header; download links carry no token.
GitHub rejects tokens in the query string, so a private repository's zipball link
404s when fetched bare: send `GitHubAPI.download_headers()` with the download.
"""

from __future__ import annotations

import logging
import urllib.parse
from typing import Any, Dict, List, Optional

from common_remote.payloads import decode_file_payload, ref_names
from common_remote import RemoteAPI
from common_remote.endpoints import HostProfile, api_base_for, token_for
from common_types import ApiMethod, GitHost

_logger = logging.getLogger(__name__)

GITHUB_PROFILE = HostProfile(
    host=GitHost.GITHUB,
    web_base="https://github.com",
    api_base="https://api.github.com",
    enterprise_api_suffix="/api/v3",
    token_param=None,
)

REFS_PER_PAGE = "100"


class GitHubAPI(RemoteAPI):
    """Remote update info from a GitHub (github.com or Enterprise Server) repository."""

    PROFILE = GITHUB_PROFILE
    # Public repos are readable anonymously (at a lower rate limit).
    requires_public_token = False
    requires_enterprise_token = True

    def auth_headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/vnd.github.v3+json"}
        token = token_for(self.credentials, enterprise=self.descriptor.is_enterprise)
        if token:
            headers["Authorization"] = f"token {token}"
        return headers

    def download_headers(self) -> Dict[str, str]:
        """Headers needed to fetch `download_link` (private repos need the token)."""
        token = token_for(self.credentials, enterprise=self.descriptor.is_enterprise)
        return {"Authorization": f"token {token}"} if token else {}

    def _repo_path(self) -> str:
        d = self.descriptor
        return f"/repos/{d.owner}/{d.repo}"

    def fetch_file(self, path: str, method: ApiMethod) -> Optional[str]:
        file_path = urllib.parse.quote(path)
        return decode_file_payload(self.api(method, f"{self._repo_path()}/contents/{file_path}"))

    def fetch_tags(self) -> Optional[List[str]]:
        return ref_names(self.api(ApiMethod.TAGS, f"{self._repo_path()}/tags", params={"per_page": REFS_PER_PAGE}))

    def fetch_branches(self) -> Optional[List[str]]:
        return ref_names(
            self.api(ApiMethod.BRANCHES, f"{self._repo_path()}/branches", params={"per_page": REFS_PER_PAGE})
        )

    def fetch_meta(self) -> Optional[Dict[str, Any]]:
        response = self.api(ApiMethod.META, self._repo_path())
        return response if isinstance(response, dict) else None

    def add_meta_repo_object(self) -> None:
        d = self.descriptor
        meta = d.repo_meta or {}
        d.last_updated = meta.get("pushed_at") or d.last_updated
        if "private" in meta:
            d.private = bool(meta["private"])

    def download_url(self, ref: Optional[str]) -> str:
        url = api_base_for(self.descriptor, self.PROFILE) + f"{self._repo_path()}/zipball"
        if ref:
            url += "/" + urllib.parse.quote(ref)
        return url


__all__ = ["GITHUB_PROFILE", "GitHubAPI"]
