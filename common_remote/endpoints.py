# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""HTTP endpoint builder.

Given a logical operation (ApiMethod), a RepoDescriptor and the host's Credentials,
build the fully-qualified request URL:

1. API prefix is the hosted one unless the descriptor names an enterprise base URL.
2. Content reads (file/changes/readme) get `ref=<branch>`.
3. Listing/metadata operations get no ref.
4. The token query parameter carries the enterprise token for enterprise
   descriptors and the public token otherwise, never both.
5. An explicit enterprise API URL that differs from the enterprise web URL
   replaces the prefix entirely.

The builder never fails: a missing token just leaves the parameter out.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional

from common import add_query_arg
from common_types import ApiMethod, Credentials, GitHost, RepoDescriptor


@dataclass(frozen=True)
class HostProfile:
    """Static URL shape of one hosting provider."""

    host: GitHost
    web_base: str
    api_base: str
    enterprise_api_suffix: str = ""
    # Query parameter carrying the token; None means the provider takes it in a header.
    token_param: Optional[str] = None
    # Query parameter carrying the ref; None means the ref is part of the path.
    ref_param: Optional[str] = "ref"


def web_base_for(descriptor: RepoDescriptor, profile: HostProfile) -> str:
    if descriptor.enterprise:
        return descriptor.enterprise.rstrip("/")
    return profile.web_base


def api_base_for(descriptor: RepoDescriptor, profile: HostProfile) -> str:
    enterprise = (descriptor.enterprise or "").rstrip("/")
    enterprise_api = (descriptor.enterprise_api or "").rstrip("/")
    if enterprise_api and enterprise_api != enterprise:
        return enterprise_api
    if enterprise:
        return enterprise + profile.enterprise_api_suffix
    return profile.api_base


def token_for(credentials: Optional[Credentials], *, enterprise: bool) -> Optional[str]:
    """Pick exactly one token slot for the selected base."""
    if credentials is None:
        return None
    token = credentials.enterprise_token if enterprise else credentials.public_token
    return token or None


def build_endpoint(
    method: ApiMethod,
    path: str,
    descriptor: RepoDescriptor,
    credentials: Optional[Credentials],
    profile: HostProfile,
    *,
    params: Optional[Dict[str, str]] = None,
) -> str:
    """Return the authenticated URL for `method` against `path` (e.g. "/projects/42/repository/tags")."""
    method = ApiMethod(method)
    url = api_base_for(descriptor, profile) + (path if path.startswith("/") else f"/{path}")

    for (k, v) in (params or {}).items():
        url = add_query_arg(url, k, v)

    if method.needs_ref and profile.ref_param and descriptor.branch:
        url = add_query_arg(url, profile.ref_param, descriptor.branch)

    if profile.token_param:
        token = token_for(credentials, enterprise=descriptor.is_enterprise)
        if token:
            url = add_query_arg(url, profile.token_param, token)

    return url
