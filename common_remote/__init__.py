# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Provider-neutral remote update resolution.

Layout (mirrored by every provider package):
- `common_remote/` defines RemoteAPI (shared fetcher flow + download-link policy),
  the transport, the endpoint builder and the per-repo response cache
- `common_remote/api/*_cached.py` holds one cached resource per fetcher
- `common_gitlab/`, `common_github/`, `common_bitbucket/` supply the provider
  capabilities (endpoint shapes, payload normalization, project identity)

Every fetcher returns True/False and mutates the shared RepoDescriptor. Expected
failures (cache miss, empty remote list, stale skip, network error) are never raised.
"""

from __future__ import annotations

import logging
import urllib.parse
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple, Type, Union

from cache.cache_transient import TRANSIENT_CACHE, TransientStore
from common import (
    DEFAULT_TAG_TRACKING_BRANCHES,
    add_query_arg,
    is_newer_version,
    sort_versions,
)
from common_types import ApiMethod, CacheKey, Credentials, RepoDescriptor, RepoType, RollbackRequest

from .api.branches_cached import BranchesCached
from .api.changes_cached import ChangelogCached, ChangesCached
from .api.file_headers_cached import FileHeadersCached
from .api.meta_cached import MetaCached
from .api.readme_cached import README_FILE, ReadmeCached
from .api.tags_cached import TagsCached
from .endpoints import HostProfile, build_endpoint, token_for, web_base_for
from .exceptions import ConfigurationError, RemoteAPIError
from .options import UpdaterOptions
from .readme_parser import StructuredReadme
from .response_cache import ResponseCache
from .stats import REMOTE_API_STATS
from .transport import RemoteHTTPClient

_logger = logging.getLogger(__name__)

ProjectIdentity = Union[int, str]

# Payload keys that, alone next to "message", mark a provider error body.
_ERROR_ONLY_KEYS = frozenset({"message", "documentation_url", "error", "errors", "status"})

# Failures that abort a single fetch (bad base64, unreadable local file, render errors).
_FETCH_ERRORS: Tuple[Type[BaseException], ...] = (ValueError, UnicodeDecodeError, OSError)


class RemoteAPI(ABC):
    """Remote update info for one RepoDescriptor against one provider.

    Subclasses set PROFILE and implement the provider capabilities:
    fetch_file / fetch_tags / fetch_branches / fetch_meta / add_meta_repo_object /
    download_url (and optionally get_project_identity / auth_headers).
    """

    PROFILE: HostProfile
    # Token slots that must be configured before an update check may run.
    requires_public_token: bool = False
    requires_enterprise_token: bool = True

    def __init__(
        self,
        descriptor: RepoDescriptor,
        options: Optional[UpdaterOptions] = None,
        *,
        store: Optional[TransientStore] = None,
        http: Optional[RemoteHTTPClient] = None,
    ):
        self.descriptor = descriptor
        self.options = options or UpdaterOptions()
        self.credentials: Credentials = self.options.credentials_for(self.PROFILE.host)
        self.cache = ResponseCache(
            descriptor.cache_id,
            store if store is not None else TRANSIENT_CACHE,
            ttl_s=self.options.cache_ttl_s,
        )
        self.http = http if http is not None else RemoteHTTPClient()

    # -----------------------------------------------------------------------------
    # Configuration
    # -----------------------------------------------------------------------------

    def check_credentials(self) -> None:
        """Raise ConfigurationError if this descriptor's host lacks a required token."""
        d = self.descriptor
        host = self.PROFILE.host.value
        if d.is_enterprise:
            if self.requires_enterprise_token and not self.credentials.enterprise_token:
                raise ConfigurationError(host, f"{host}: enterprise token is required for {d.full_name}")
        elif self.requires_public_token and not self.credentials.public_token:
            raise ConfigurationError(host, f"{host}: access token is required for {d.full_name}")

    # -----------------------------------------------------------------------------
    # Endpoint + transport
    # -----------------------------------------------------------------------------

    def build_endpoint(self, method: ApiMethod, path: str, *, params: Optional[Dict[str, str]] = None) -> str:
        return build_endpoint(method, path, self.descriptor, self.credentials, self.PROFILE, params=params)

    def auth_headers(self) -> Dict[str, str]:
        """Extra request headers (providers that take the token in a header)."""
        return {}

    def download_headers(self) -> Dict[str, str]:
        """Headers to send when fetching `download_link` ({} when the link carries the token)."""
        return {}

    def api(
        self,
        method: ApiMethod,
        path: str,
        *,
        params: Optional[Dict[str, str]] = None,
        expect_json: bool = True,
    ) -> Optional[Any]:
        """Call the provider; None on any transport/HTTP failure (never retried)."""
        url = self.build_endpoint(method, path, params=params)
        try:
            return self.http.get(url, headers=self.auth_headers(), label=ApiMethod(method).value, expect_json=expect_json)
        except RemoteAPIError as e:
            _logger.warning("%s: %s failed: %s", self.descriptor.cache_id, ApiMethod(method).value, e)
            return None

    # -----------------------------------------------------------------------------
    # Provider capabilities
    # -----------------------------------------------------------------------------

    @abstractmethod
    def fetch_file(self, path: str, method: ApiMethod) -> Optional[str]:
        """Decoded text of `path` at the descriptor's branch, or None."""

    @abstractmethod
    def fetch_tags(self) -> Optional[List[str]]:
        """Tag names, or None/[] when none could be listed."""

    @abstractmethod
    def fetch_branches(self) -> Optional[List[str]]:
        """Branch names, or None/[] when none could be listed."""

    @abstractmethod
    def fetch_meta(self) -> Optional[Dict[str, Any]]:
        """Provider repository metadata blob, or None."""

    @abstractmethod
    def add_meta_repo_object(self) -> None:
        """Map provider fields of descriptor.repo_meta onto the descriptor."""

    @abstractmethod
    def download_url(self, ref: Optional[str]) -> str:
        """Archive URL for `ref` (no token)."""

    def get_project_identity(self) -> Optional[ProjectIdentity]:
        """Provider-internal identifier; path-addressed providers use the encoded "owner/repo"."""
        return urllib.parse.quote(self.descriptor.full_name, safe="")

    # -----------------------------------------------------------------------------
    # Shared helpers
    # -----------------------------------------------------------------------------

    @staticmethod
    def validate_response(response: Any, expected: Union[type, Tuple[type, ...]] = (dict, list)) -> bool:
        """True if `response` is unusable: missing, empty, wrong shape or a provider error payload."""
        if response is None or isinstance(response, bool):
            return True
        if not isinstance(response, expected):
            return True
        if not response:
            return True
        if isinstance(response, dict) and "message" in response and set(response) <= _ERROR_ONLY_KEYS:
            return True
        return False

    def can_update(self) -> bool:
        """An update is pending when the remote version is newer than the installed one."""
        return is_newer_version(self.descriptor.remote_version, self.descriptor.local_version)

    def exit_no_update(self, response: Any, *, branch: bool = False) -> bool:
        """Stale-skip: True when an earlier check this cycle already found no update."""
        if response is not None:
            return False
        if branch and self.options.branch_switch:
            return False
        if not branch and self.options.refresh_cache:
            return False
        return self.descriptor.remote_version is not None and not self.can_update()

    def _local_candidates(self, filename: str) -> List[Any]:
        d = self.descriptor
        return [base / filename for base in (d.local_path, d.local_path_extended) if base is not None]

    def local_file_exists(self, filename: str) -> bool:
        return any(p.is_file() for p in self._local_candidates(filename))

    def get_local_info(self, filename: str) -> Optional[str]:
        """Content of a bundled file (local_path first, then local_path_extended)."""
        for p in self._local_candidates(filename):
            if p.is_file():
                return p.read_text(encoding="utf-8")
        return None

    def set_file_info(self, headers: Dict[str, str]) -> None:
        d = self.descriptor
        d.name = headers.get("name") or d.name
        version = str(headers.get("version") or "").strip().lower()
        d.remote_version = version or None
        d.requires = headers.get("requires") or d.requires
        d.requires_php = headers.get("requires_php") or d.requires_php
        d.tested = headers.get("tested") or d.tested

    def parse_tags(self, tags: List[str]) -> None:
        ordered = sort_versions(tags)
        self.descriptor.tags = ordered
        self.descriptor.newest_tag = ordered[-1] if ordered else None

    def set_readme_info(self, readme: StructuredReadme) -> None:
        d = self.descriptor
        for (name, html) in readme.sections.items():
            if name == "changelog" and d.sections.get("changelog"):
                continue
            d.sections[name] = html
        d.tested = readme.tested or d.tested
        d.requires = readme.requires or d.requires
        d.requires_php = readme.requires_php or d.requires_php
        d.donate_link = readme.donate_link or d.donate_link
        if readme.contributors:
            d.contributors = list(readme.contributors)

    # -----------------------------------------------------------------------------
    # Fetchers
    # -----------------------------------------------------------------------------

    def get_remote_info(self, file: str) -> bool:
        """Read the remote plugin/theme main file and parse its headers."""
        try:
            response = FileHeadersCached(self, file).get()
        except _FETCH_ERRORS as e:
            _logger.warning("%s: cannot read remote %s: %s", self.descriptor.cache_id, file, e)
            return False

        if self.validate_response(response, dict):
            return False

        self.set_file_info(response)
        return True

    def get_remote_tag(self) -> bool:
        """Get remote tags and pick the newest."""
        resource = TagsCached(self)
        response = resource.peek()

        if self.descriptor.type != RepoType.THEME and self.exit_no_update(response):
            _logger.debug("%s: tags skipped, no update pending", self.descriptor.cache_id)
            return False

        if response is None:
            response = resource.load()

        if self.validate_response(response, list):
            return False

        self.parse_tags(response)
        return True

    def get_remote_changes(self, changes: str) -> bool:
        """Read the remote (or bundled) CHANGES file and render it into sections['changelog']."""
        try:
            response = ChangesCached(self, changes).get()
            if self.validate_response(response, dict) or not isinstance(response.get("content"), str):
                return False
            changelog = ChangelogCached(self, response["content"]).get()
        except _FETCH_ERRORS as e:
            _logger.warning("%s: cannot build changelog from %s: %s", self.descriptor.cache_id, changes, e)
            return False

        if not isinstance(changelog, str):
            return False
        self.descriptor.sections["changelog"] = changelog
        return True

    def get_remote_readme(self) -> bool:
        """Read and parse readme.txt (only for repos that bundle one)."""
        if not self.local_file_exists(README_FILE):
            return False

        try:
            response = ReadmeCached(self).get()
        except _FETCH_ERRORS as e:
            _logger.warning("%s: cannot parse %s: %s", self.descriptor.cache_id, README_FILE, e)
            return False

        if self.validate_response(response, dict):
            return False

        self.set_readme_info(StructuredReadme.from_dict(response))
        return True

    def get_repo_meta(self) -> bool:
        """Read the repository metadata and map it onto the descriptor."""
        response = MetaCached(self).get()

        if self.validate_response(response, dict):
            return False

        self.descriptor.repo_meta = response
        self.add_meta_repo_object()
        return True

    def get_remote_branches(self) -> bool:
        """Build {branch: download link} for every remote branch."""
        resource = BranchesCached(self)
        response = resource.peek()

        if self.exit_no_update(response, branch=True):
            _logger.debug("%s: branches skipped, no update pending", self.descriptor.cache_id)
            return False

        if response is None:
            response = resource.load()

        if self.validate_response(response, dict):
            return False

        self.descriptor.branches = {name: self.add_download_token(link) for (name, link) in response.items()}
        return True

    # -----------------------------------------------------------------------------
    # Download link
    # -----------------------------------------------------------------------------

    def resolve_download_ref(
        self,
        rollback: Optional[RollbackRequest] = None,
        branch_switch: Optional[str] = None,
    ) -> Optional[str]:
        """Ref policy; later steps override earlier ones.

        1. explicit rollback for this repo, else the descriptor's branch
        2. default branch + resolved tags -> newest tag
        3. explicit branch switch wins over everything
        """
        d = self.descriptor
        ref: Optional[str] = None

        if rollback is not None and rollback.matches(d.repo):
            ref = rollback.version
        elif d.branch:
            ref = d.branch

        if d.branch in DEFAULT_TAG_TRACKING_BRANCHES and d.tags:
            ref = d.newest_tag or sort_versions(d.tags)[-1]

        if branch_switch:
            ref = branch_switch

        return ref or None

    def construct_download_link(
        self,
        rollback: Optional[RollbackRequest] = None,
        branch_switch: Optional[str] = None,
    ) -> str:
        """Archive URL for the resolved ref, with the token for the selected base."""
        return self.add_download_token(self.download_url(self.resolve_download_ref(rollback, branch_switch)))

    def add_download_token(self, link: str) -> str:
        """Append the current token to a download link (links are cached without it)."""
        if self.PROFILE.token_param:
            token = token_for(self.credentials, enterprise=bool(self.descriptor.enterprise))
            if token:
                link = add_query_arg(link, self.PROFILE.token_param, token)
        return link

    def web_base(self) -> str:
        return web_base_for(self.descriptor, self.PROFILE)


__all__ = [
    "CacheKey",
    "ConfigurationError",
    "ProjectIdentity",
    "REMOTE_API_STATS",
    "RemoteAPI",
    "RemoteAPIError",
    "RemoteHTTPClient",
    "ResponseCache",
    "UpdaterOptions",
]
