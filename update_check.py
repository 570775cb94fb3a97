#!/usr/bin/env python3
# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""
Check a list of tracked repositories for available updates.

Each repo runs one update cycle against its host (GitLab, GitHub or Bitbucket):
remote file headers -> tags -> changelog -> readme -> meta -> branches -> download link.
Responses are cached on disk (default TTL 12h) so repeated runs are cheap.

Repos file (YAML, list of mappings):
    - owner: acme
      repo: widget
      git: gitlab
      type: plugin
      branch: master
      file: widget.php
      local_path: ~/wp/plugins/widget
      local_version: 1.1

Usage:
    update_check.py repos.yaml
    update_check.py repos.yaml --format json --workers 4
    update_check.py repos.yaml --rollback widget=1.0 --stats -v
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from concurrent.futures import ThreadPoolExecutor
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

import yaml

from cache.cache_transient import TRANSIENT_CACHE, TransientStore
from common import remove_query_arg, setup_logging
from common_remote.exceptions import ConfigurationError
from common_remote.notices import NOTICES, NoticeBoard
from common_remote.options import UpdaterOptions, load_options
from common_remote.registry import get_remote_api
from common_remote.stats import REMOTE_API_STATS
from common_remote.transport import RemoteHTTPClient
from common_types import RepoDescriptor, RepoType, RollbackRequest

_logger = logging.getLogger(__name__)

CHANGES_FILE = "CHANGES.md"
THEME_MAIN_FILE = "style.css"

# Exit codes
EXIT_OK = 0
EXIT_CONFIG_ERROR = 2

# Token-carrying query parameters stripped from printed links.
_TOKEN_PARAMS = ("private_token", "access_token")

_DESCRIPTOR_KEYS = (
    "owner",
    "repo",
    "type",
    "git",
    "branch",
    "enterprise",
    "enterprise_api",
    "local_path",
    "local_path_extended",
    "local_version",
)


@dataclass
class UpdateResult:
    """Outcome of one update cycle for one repo."""

    repo: str
    name: Optional[str] = None
    local_version: Optional[str] = None
    remote_version: Optional[str] = None
    newest_tag: Optional[str] = None
    update_available: bool = False
    download_link: Optional[str] = None
    fetched: Dict[str, bool] = field(default_factory=dict)
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def default_main_file(descriptor: RepoDescriptor) -> str:
    if descriptor.type == RepoType.THEME:
        return THEME_MAIN_FILE
    return f"{descriptor.repo}.php"


def _expand_path(v: Any) -> Optional[Path]:
    s = str(v).strip() if v is not None else ""
    return Path(s).expanduser() if s else None


def load_repos(path: Path) -> List[Tuple[RepoDescriptor, str]]:
    """Parse the repos YAML into (descriptor, main file) pairs."""
    with open(path, "r") as f:
        data = yaml.safe_load(f) or []
    if isinstance(data, dict):
        data = data.get("repos") or []
    if not isinstance(data, list):
        raise ValueError(f"{path}: expected a list of repos")

    out: List[Tuple[RepoDescriptor, str]] = []
    for (i, item) in enumerate(data):
        if not isinstance(item, dict) or not item.get("owner") or not item.get("repo"):
            raise ValueError(f"{path}: entry #{i} needs 'owner' and 'repo'")
        kwargs = {k: item[k] for k in _DESCRIPTOR_KEYS if item.get(k) is not None}
        for k in ("owner", "repo", "branch", "local_version"):
            if k in kwargs:
                kwargs[k] = str(kwargs[k])
        for k in ("local_path", "local_path_extended"):
            if k in kwargs:
                kwargs[k] = _expand_path(kwargs[k])
        descriptor = RepoDescriptor(**kwargs)
        out.append((descriptor, str(item.get("file") or default_main_file(descriptor))))
    return out


def parse_rollback(value: Optional[str]) -> Optional[RollbackRequest]:
    """`REPO=VERSION` -> RollbackRequest."""
    if not value:
        return None
    (repo, sep, version) = str(value).partition("=")
    if not sep or not repo.strip() or not version.strip():
        raise argparse.ArgumentTypeError(f"--rollback expects REPO=VERSION, got {value!r}")
    return RollbackRequest(repo=repo.strip(), version=version.strip())


def run_update_cycle(
    descriptor: RepoDescriptor,
    options: UpdaterOptions,
    *,
    file: Optional[str] = None,
    rollback: Optional[RollbackRequest] = None,
    store: Optional[TransientStore] = None,
    http: Optional[RemoteHTTPClient] = None,
    notices: Optional[NoticeBoard] = None,
) -> UpdateResult:
    """Run every fetcher for one repo, then build its download link."""
    notices = notices if notices is not None else NOTICES
    result = UpdateResult(repo=descriptor.cache_id, local_version=descriptor.local_version)
    api = get_remote_api(descriptor, options, store=store, http=http)

    try:
        api.check_credentials()
    except ConfigurationError as e:
        _logger.error("%s", e)
        notices.create_error_message(e.host, str(e))
        result.error = str(e)
        return result

    fetched = result.fetched
    fetched["info"] = api.get_remote_info(file or default_main_file(descriptor))
    fetched["tags"] = api.get_remote_tag()
    fetched["changes"] = api.get_remote_changes(CHANGES_FILE)
    fetched["readme"] = api.get_remote_readme()
    fetched["meta"] = api.get_repo_meta()
    fetched["branches"] = api.get_remote_branches()

    descriptor.download_link = api.construct_download_link(rollback=rollback)

    result.name = descriptor.name
    result.remote_version = descriptor.remote_version
    result.newest_tag = descriptor.newest_tag
    result.update_available = api.can_update()
    result.download_link = descriptor.download_link
    _logger.debug("%s: %s", descriptor.cache_id, fetched)
    return result


def run_all(
    repos: Sequence[Tuple[RepoDescriptor, str]],
    options: UpdaterOptions,
    *,
    rollback: Optional[RollbackRequest] = None,
    workers: int = 1,
    store: Optional[TransientStore] = None,
    http: Optional[RemoteHTTPClient] = None,
    notices: Optional[NoticeBoard] = None,
) -> List[UpdateResult]:
    """Run update cycles (optionally in parallel); results keep input order."""

    def _one(item: Tuple[RepoDescriptor, str]) -> UpdateResult:
        (descriptor, file) = item
        return run_update_cycle(
            descriptor, options, file=file, rollback=rollback, store=store, http=http, notices=notices
        )

    if workers <= 1 or len(repos) <= 1:
        return [_one(item) for item in repos]
    with ThreadPoolExecutor(max_workers=int(workers)) as executor:
        return list(executor.map(_one, repos))


def display_link(link: Optional[str]) -> str:
    if not link:
        return "-"
    for param in _TOKEN_PARAMS:
        link = remove_query_arg(link, param)
    return link


def format_table(results: Sequence[UpdateResult]) -> str:
    headers = ("REPO", "LOCAL", "REMOTE", "UPDATE", "DOWNLOAD")
    rows = []
    for r in results:
        if r.error:
            rows.append((r.repo, r.local_version or "-", "-", "error", r.error))
            continue
        rows.append(
            (
                r.repo,
                r.local_version or "-",
                r.remote_version or r.newest_tag or "-",
                "yes" if r.update_available else "no",
                display_link(r.download_link),
            )
        )
    widths = [max(len(str(row[i])) for row in [headers] + rows) for i in range(len(headers) - 1)]
    lines = []
    for row in [headers] + rows:
        cells = [str(c).ljust(w) for (c, w) in zip(row, widths)]
        lines.append("  ".join(cells + [str(row[-1])]))
    return "\n".join(lines)


def stats_report(store: TransientStore, *, purged: int = 0) -> Dict[str, Any]:
    """REST/cache counters plus the on-disk store's size and lookup stats."""
    report = REMOTE_API_STATS.to_dict()
    (entries, entries_at_load) = store.get_cache_sizes()
    report["store"] = dict(
        asdict(store.stats),
        file=str(store.cache_file),
        entries=entries,
        entries_at_load=entries_at_load,
        purged=int(purged),
    )
    return report


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Check tracked GitLab/GitHub/Bitbucket repos for updates")
    parser.add_argument("repos", type=Path, help="YAML file listing the repos to check")
    parser.add_argument("--format", choices=("table", "json"), default="table", help="Output format (default: table)")
    parser.add_argument("--workers", type=int, default=1, help="Repos to check in parallel (default: 1)")
    parser.add_argument("--rollback", type=parse_rollback, default=None, help="Install an older version: REPO=VERSION")
    parser.add_argument("--branch-switch", action="store_true", help="Always list remote branches")
    parser.add_argument("--refresh", action="store_true", help="Always re-check tags, even with no update pending")
    parser.add_argument("--stats", action="store_true", help="Print REST/cache statistics to stderr")
    parser.add_argument("--clear-notices", action="store_true", help="Drop configuration notices left by earlier runs")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args(argv)

    setup_logging(args.verbose)

    try:
        repos = load_repos(args.repos)
    except (OSError, ValueError, yaml.YAMLError) as e:
        _logger.error("Cannot load repos file %s: %s", args.repos, e)
        return 1

    options = load_options(
        branch_switch=True if args.branch_switch else None,
        refresh_cache=True if args.refresh else None,
    )

    if args.clear_notices:
        for host in NOTICES.messages():
            NOTICES.clear(host)

    results = run_all(repos, options, rollback=args.rollback, workers=args.workers)
    purged = TRANSIENT_CACHE.purge_expired()
    if purged:
        _logger.debug("Purged %d expired cache entries from %s", purged, TRANSIENT_CACHE.cache_file)
    TRANSIENT_CACHE.flush()

    if args.format == "json":
        rows = [r.to_dict() for r in results]
        for row in rows:
            if row["download_link"]:
                row["download_link"] = display_link(row["download_link"])
        print(json.dumps(rows, indent=2))
    else:
        print(format_table(results))

    for (host, message) in sorted(NOTICES.messages().items()):
        print(f"notice [{host}]: {message}", file=sys.stderr)

    if args.stats:
        print(json.dumps(stats_report(TRANSIENT_CACHE, purged=purged), indent=2), file=sys.stderr)

    return EXIT_CONFIG_ERROR if any(r.error for r in results) else EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
