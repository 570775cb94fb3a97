# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Credential/options store.

Loaded once per process and read-only during an update cycle.

Token priority (per host, per public/enterprise slot):
  1) explicit override passed to `load_options()`
  2) environment variable (GITLAB_TOKEN, GITLAB_ENTERPRISE_TOKEN, ...)
  3) options YAML file ($REMOTE_UPDATER_OPTIONS or ~/.config/remote-updater/options.yaml)
  4) ~/.config/<host>-token (public slot only)

Options file format:
    gitlab:
      public_token: glpat-...
      enterprise_token: ...
    github:
      public_token: ghp_...
    branch_switch: true
    refresh_cache: false
    cache_ttl_hours: 12
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml

from common import DEFAULT_TRANSIENT_TTL_S, updater_config_dir
from common_types import Credentials, GitHost

_logger = logging.getLogger(__name__)

OPTIONS_FILE_ENV = "REMOTE_UPDATER_OPTIONS"

# host -> (public token env var, enterprise token env var)
TOKEN_ENV_VARS: Dict[GitHost, Tuple[str, str]] = {
    GitHost.GITLAB: ("GITLAB_TOKEN", "GITLAB_ENTERPRISE_TOKEN"),
    GitHost.GITHUB: ("GITHUB_TOKEN", "GITHUB_ENTERPRISE_TOKEN"),
    GitHost.BITBUCKET: ("BITBUCKET_TOKEN", "BITBUCKET_ENTERPRISE_TOKEN"),
}


@dataclass(frozen=True)
class UpdaterOptions:
    credentials: Dict[GitHost, Credentials] = field(default_factory=dict)
    # Always list branches, even when no update is pending.
    branch_switch: bool = False
    # Disable the stale-skip shortcut for tags.
    refresh_cache: bool = False
    cache_ttl_hours: int = DEFAULT_TRANSIENT_TTL_S // 3600

    def credentials_for(self, host: GitHost) -> Credentials:
        return self.credentials.get(GitHost(host)) or Credentials()

    @property
    def cache_ttl_s(self) -> int:
        return int(self.cache_ttl_hours) * 3600


def options_file_path() -> Path:
    override = os.environ.get(OPTIONS_FILE_ENV)
    if override:
        return Path(override).expanduser()
    return updater_config_dir() / "options.yaml"


def get_token_from_file(host: GitHost) -> Optional[str]:
    """Get a host token from `~/.config/<host>-token` (best-effort)."""
    try:
        token_file = Path.home() / ".config" / f"{GitHost(host).value}-token"
        if token_file.exists():
            return token_file.read_text().strip() or None
    except OSError:
        pass
    return None


def _read_options_file(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        _logger.warning("Ignoring unreadable options file %s: %s", path, e)
        return {}
    if not isinstance(data, dict):
        _logger.warning("Ignoring options file %s: expected a mapping", path)
        return {}
    return data


def _str_or_none(v: Any) -> Optional[str]:
    s = str(v).strip() if v is not None else ""
    return s or None


def load_options(
    path: Optional[Path] = None,
    *,
    overrides: Optional[Dict[GitHost, Credentials]] = None,
    branch_switch: Optional[bool] = None,
    refresh_cache: Optional[bool] = None,
) -> UpdaterOptions:
    """Build the process-wide options snapshot."""
    data = _read_options_file(Path(path) if path is not None else options_file_path())
    overrides = overrides or {}

    creds: Dict[GitHost, Credentials] = {}
    for host in GitHost:
        public_env, enterprise_env = TOKEN_ENV_VARS[host]
        section = data.get(host.value)
        section = section if isinstance(section, dict) else {}
        override = overrides.get(host) or Credentials()

        public = (
            override.public_token
            or _str_or_none(os.environ.get(public_env))
            or _str_or_none(section.get("public_token"))
            or get_token_from_file(host)
        )
        enterprise = (
            override.enterprise_token
            or _str_or_none(os.environ.get(enterprise_env))
            or _str_or_none(section.get("enterprise_token"))
        )
        creds[host] = Credentials(public_token=public, enterprise_token=enterprise)

    try:
        ttl_hours = int(data.get("cache_ttl_hours", DEFAULT_TRANSIENT_TTL_S // 3600))
    except (TypeError, ValueError):
        ttl_hours = DEFAULT_TRANSIENT_TTL_S // 3600

    return UpdaterOptions(
        credentials=creds,
        branch_switch=bool(data.get("branch_switch", False)) if branch_switch is None else bool(branch_switch),
        refresh_cache=bool(data.get("refresh_cache", False)) if refresh_cache is None else bool(refresh_cache),
        cache_ttl_hours=max(0, ttl_hours),
    )
