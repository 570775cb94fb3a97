#!/usr/bin/env python3
# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""
Common shared enums/types used by both:
- `common_remote/` (provider-neutral fetch + cache layer)
- the provider packages (`common_gitlab/`, `common_github/`, `common_bitbucket/`)

This module MUST NOT import `common.py` or any provider package to avoid cycles.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

# Default ref used when a descriptor does not name a branch.
DEFAULT_BRANCH = "master"


class RepoType(str, Enum):
    """Kind of artifact a tracked repository ships."""

    PLUGIN = "plugin"
    THEME = "theme"


class GitHost(str, Enum):
    """Remote Git hosting provider a descriptor is bound to."""

    GITHUB = "github"
    GITLAB = "gitlab"
    BITBUCKET = "bitbucket"


class CacheKey(str, Enum):
    """Closed set of per-repo response cache slots."""

    FILE = "file"
    TAGS = "tags"
    BRANCHES = "branches"
    CHANGES = "changes"
    CHANGELOG = "changelog"
    README = "readme"
    META = "meta"
    PROJECTS = "projects"


class ApiMethod(str, Enum):
    """Logical remote operation passed to the endpoint builder."""

    PROJECTS = "projects"
    META = "meta"
    TAGS = "tags"
    BRANCHES = "branches"
    FILE = "file"
    CHANGES = "changes"
    README = "readme"

    @property
    def needs_ref(self) -> bool:
        """Content reads are pinned to the descriptor's branch."""
        return self in (ApiMethod.FILE, ApiMethod.CHANGES, ApiMethod.README)


@dataclass(frozen=True)
class Credentials:
    """Per-host auth state. Either slot may be empty."""

    public_token: Optional[str] = None
    enterprise_token: Optional[str] = None


@dataclass(frozen=True)
class RollbackRequest:
    """Caller-supplied request to install an older version of one repo."""

    repo: str
    version: str

    def matches(self, repo: str) -> bool:
        return bool(self.version) and self.repo == repo


@dataclass
class RepoDescriptor:
    """One tracked remote repository and everything resolved about it so far.

    Constructed once per repo; fetchers fill in the remote fields as a cycle
    progresses.
    """

    owner: str
    repo: str
    type: RepoType = RepoType.PLUGIN
    git: GitHost = GitHost.GITLAB
    branch: str = ""
    enterprise: Optional[str] = None
    enterprise_api: Optional[str] = None
    local_path: Optional[Path] = None
    local_path_extended: Optional[Path] = None
    local_version: Optional[str] = None

    # Populated by fetchers.
    name: Optional[str] = None
    remote_version: Optional[str] = None
    requires: Optional[str] = None
    requires_php: Optional[str] = None
    tested: Optional[str] = None
    donate_link: Optional[str] = None
    contributors: List[str] = field(default_factory=list)
    tags: List[str] = field(default_factory=list)
    newest_tag: Optional[str] = None
    branches: Dict[str, str] = field(default_factory=dict)
    repo_meta: Optional[Dict[str, Any]] = None
    last_updated: Optional[str] = None
    private: Optional[bool] = None
    sections: Dict[str, str] = field(default_factory=dict)
    download_link: Optional[str] = None

    def __post_init__(self) -> None:
        self.type = RepoType(self.type)
        self.git = GitHost(self.git)
        if not self.branch:
            self.branch = DEFAULT_BRANCH
        if self.local_path is not None:
            self.local_path = Path(self.local_path)
        if self.local_path_extended is not None:
            self.local_path_extended = Path(self.local_path_extended)

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"

    @property
    def cache_id(self) -> str:
        """Identity used to namespace this repo's cached responses."""
        return f"{self.git.value}:{self.full_name}"

    @property
    def is_enterprise(self) -> bool:
        return bool(self.enterprise or self.enterprise_api)
