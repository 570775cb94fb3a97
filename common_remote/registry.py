# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Provider lookup: RepoDescriptor.git -> RemoteAPI subclass."""

from __future__ import annotations

from typing import Any, Dict, Optional, Type

from common_bitbucket import BitbucketAPI
from common_github import GitHubAPI
from common_gitlab import GitLabAPI
from common_types import GitHost, RepoDescriptor

from . import RemoteAPI
from .options import UpdaterOptions

PROVIDERS: Dict[GitHost, Type[RemoteAPI]] = {
    GitHost.GITLAB: GitLabAPI,
    GitHost.GITHUB: GitHubAPI,
    GitHost.BITBUCKET: BitbucketAPI,
}


def get_remote_api(descriptor: RepoDescriptor, options: Optional[UpdaterOptions] = None, **kwargs: Any) -> RemoteAPI:
    """Instantiate the provider bound to `descriptor.git` (store/http kwargs pass through)."""
    return PROVIDERS[GitHost(descriptor.git)](descriptor, options, **kwargs)
