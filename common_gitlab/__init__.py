# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""GitLab provider for remote update resolution.

GitLab addresses repository resources by project ID, so most calls first resolve
the project identity from the (cached) project listing:

  GET /api/v4/projects?search=<repo>                       -> project identity, meta
  GET /api/v4/projects/{id}/repository/files/{path}?ref=   -> file content (base64)
  GET /api/v4/projects/{id}/repository/tags                -> tags
  GET /api/v4/projects/{id}/repository/branches            -> branches

Auth: `private_token` query parameter (public token for gitlab.com, enterprise token
for self-hosted instances).
"""

from __future__ import annotations

import logging
import urllib.parse
from typing import Any, Dict, List, Optional

from common import add_query_arg
from common_remote import ProjectIdentity, RemoteAPI
from common_remote.endpoints import HostProfile
from common_remote.payloads import decode_file_payload, ref_names
from common_types import ApiMethod, CacheKey, GitHost

_logger = logging.getLogger(__name__)

GITLAB_PROFILE = HostProfile(
    host=GitHost.GITLAB,
    web_base="https://gitlab.com",
    api_base="https://gitlab.com/api/v4",
    enterprise_api_suffix="/api/v4",
    token_param="private_token",
)

PROJECTS_PER_PAGE = "100"


class GitLabAPI(RemoteAPI):
    """Remote update info from a GitLab (gitlab.com or self-hosted) project."""

    PROFILE = GITLAB_PROFILE
    requires_public_token = True
    requires_enterprise_token = True

    def __init__(self, *args: Any, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self._project_id: Optional[ProjectIdentity] = None

    # -----------------------------------------------------------------------------
    # Project identity
    # -----------------------------------------------------------------------------

    def _match_project(self, projects: Any) -> Optional[Dict[str, Any]]:
        """Linear scan for the project whose path is this repo (exact namespace match preferred)."""
        if not isinstance(projects, list):
            return None
        d = self.descriptor
        by_path = None
        for project in projects:
            if not isinstance(project, dict) or project.get("path") != d.repo:
                continue
            if project.get("path_with_namespace") == d.full_name:
                return project
            if by_path is None:
                by_path = project
        return by_path

    def get_project_identity(self) -> Optional[ProjectIdentity]:
        """Numeric project ID, the URL-encoded "owner/repo" when no listing is available,
        or None when the listing has no matching project."""
        if self._project_id is not None:
            return self._project_id

        d = self.descriptor
        projects = self.cache.get(CacheKey.PROJECTS)
        if not isinstance(projects, list) or not projects:
            response = self.api(
                ApiMethod.PROJECTS,
                "/projects",
                params={"search": d.repo, "per_page": PROJECTS_PER_PAGE},
            )
            if self.validate_response(response, list):
                # GitLab accepts the encoded path wherever a project ID is expected.
                return urllib.parse.quote(d.full_name, safe="")
            projects = response
            self.cache.put(CacheKey.PROJECTS, projects)

        project = self._match_project(projects)
        if project is None:
            _logger.info("%s: no GitLab project with path %r", d.cache_id, d.repo)
            return None

        self.cache.put(CacheKey.META, project)
        self._project_id = project.get("id")
        return self._project_id

    # -----------------------------------------------------------------------------
    # Provider capabilities
    # -----------------------------------------------------------------------------

    def fetch_file(self, path: str, method: ApiMethod) -> Optional[str]:
        project_id = self.get_project_identity()
        if project_id is None:
            return None
        file_path = urllib.parse.quote(path, safe="")
        response = self.api(method, f"/projects/{project_id}/repository/files/{file_path}")
        return decode_file_payload(response)

    def fetch_tags(self) -> Optional[List[str]]:
        project_id = self.get_project_identity()
        if project_id is None:
            return None
        return ref_names(self.api(ApiMethod.TAGS, f"/projects/{project_id}/repository/tags"))

    def fetch_branches(self) -> Optional[List[str]]:
        project_id = self.get_project_identity()
        if project_id is None:
            return None
        return ref_names(self.api(ApiMethod.BRANCHES, f"/projects/{project_id}/repository/branches"))

    def fetch_meta(self) -> Optional[Dict[str, Any]]:
        # No network call: metadata comes out of the cached project listing.
        return self._match_project(self.cache.get(CacheKey.PROJECTS))

    def add_meta_repo_object(self) -> None:
        d = self.descriptor
        meta = d.repo_meta or {}
        d.last_updated = meta.get("last_activity_at") or d.last_updated
        if "public" in meta:
            d.private = not bool(meta["public"])
        elif "visibility" in meta:
            d.private = str(meta["visibility"]) != "public"

    def download_url(self, ref: Optional[str]) -> str:
        d = self.descriptor
        url = "/".join([self.web_base(), d.owner, d.repo, "repository/archive.zip"])
        if ref:
            url = add_query_arg(url, "ref", ref)
        return url


__all__ = ["GITLAB_PROFILE", "GitLabAPI"]
