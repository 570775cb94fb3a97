# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Bitbucket Cloud provider for remote update resolution.

Endpoints (api.bitbucket.org/2.0):
  GET /repositories/{owner}/{repo}/src/{ref}/{path}   -> raw file text
  GET /repositories/{owner}/{repo}/refs/tags          -> {"values": [{"name": ...}]}
  GET /repositories/{owner}/{repo}/refs/branches      -> {"values": [{"name": ...}]}
  GET /repositories/{owner}/{repo}                    -> meta (updated_on, is_private)

The ref is part of the path, so content reads carry no `ref=` parameter.
"""

from __future__ import annotations

import logging
import urllib.parse
from typing import Any, Dict, List, Optional

from common_remote.payloads import ref_names
from common_remote import RemoteAPI
from common_remote.endpoints import HostProfile
from common_remote.exceptions import ConfigurationError
from common_types import ApiMethod, GitHost

_logger = logging.getLogger(__name__)

BITBUCKET_PROFILE = HostProfile(
    host=GitHost.BITBUCKET,
    web_base="https://bitbucket.org",
    api_base="https://api.bitbucket.org/2.0",
    token_param="access_token",
    ref_param=None,
)

REFS_PER_PAGE = "100"


class BitbucketAPI(RemoteAPI):
    """Remote update info from a Bitbucket Cloud repository."""

    PROFILE = BITBUCKET_PROFILE
    requires_public_token = False
    requires_enterprise_token = True

    def check_credentials(self) -> None:
        if self.descriptor.is_enterprise:
            raise ConfigurationError(
                "bitbucket",
                f"bitbucket: self-hosted Bitbucket Server is not supported ({self.descriptor.full_name})",
            )
        super().check_credentials()

    def _repo_path(self) -> str:
        d = self.descriptor
        return f"/repositories/{d.owner}/{d.repo}"

    def _list_refs(self, method: ApiMethod, kind: str) -> Optional[List[str]]:
        response = self.api(method, f"{self._repo_path()}/refs/{kind}", params={"pagelen": REFS_PER_PAGE})
        if not isinstance(response, dict):
            return None
        return ref_names(response.get("values"))

    def fetch_file(self, path: str, method: ApiMethod) -> Optional[str]:
        ref = urllib.parse.quote(self.descriptor.branch, safe="")
        response = self.api(method, f"{self._repo_path()}/src/{ref}/{urllib.parse.quote(path)}", expect_json=False)
        return response if isinstance(response, str) and response else None

    def fetch_tags(self) -> Optional[List[str]]:
        return self._list_refs(ApiMethod.TAGS, "tags")

    def fetch_branches(self) -> Optional[List[str]]:
        return self._list_refs(ApiMethod.BRANCHES, "branches")

    def fetch_meta(self) -> Optional[Dict[str, Any]]:
        response = self.api(ApiMethod.META, self._repo_path())
        return response if isinstance(response, dict) else None

    def add_meta_repo_object(self) -> None:
        d = self.descriptor
        meta = d.repo_meta or {}
        d.last_updated = meta.get("updated_on") or d.last_updated
        if "is_private" in meta:
            d.private = bool(meta["is_private"])

    def download_url(self, ref: Optional[str]) -> str:
        d = self.descriptor
        return f"{self.web_base()}/{d.owner}/{d.repo}/get/{urllib.parse.quote(ref or d.branch)}.zip"


__all__ = ["BITBUCKET_PROFILE", "BitbucketAPI"]
