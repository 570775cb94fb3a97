"""Parse the metadata header block of a plugin main file or theme style.css.

Header lines look like `Version: 1.2.3`, optionally behind comment markers
(` * Version: 1.2.3`). Only the first 8 KiB of the file is scanned.
"""

from __future__ import annotations

import re
from typing import Dict

from common_types import RepoType

HEADER_SCAN_BYTES = 8 * 1024

# canonical key -> header label
_COMMON_HEADERS: Dict[str, str] = {
    "version": "Version",
    "description": "Description",
    "author": "Author",
    "author_uri": "Author URI",
    "license": "License",
    "text_domain": "Text Domain",
    "requires": "Requires at least",
    "requires_php": "Requires PHP",
    "tested": "Tested up to",
    "github_branch": "GitHub Branch",
    "gitlab_branch": "GitLab Branch",
    "bitbucket_branch": "Bitbucket Branch",
    "github_enterprise": "GitHub Enterprise",
    "gitlab_enterprise": "GitLab Enterprise",
    "gitlab_ce": "GitLab CE",
}

PLUGIN_HEADERS: Dict[str, str] = {
    "name": "Plugin Name",
    "uri": "Plugin URI",
    "github_uri": "GitHub Plugin URI",
    "gitlab_uri": "GitLab Plugin URI",
    "bitbucket_uri": "Bitbucket Plugin URI",
    **_COMMON_HEADERS,
}

THEME_HEADERS: Dict[str, str] = {
    "name": "Theme Name",
    "uri": "Theme URI",
    "template": "Template",
    "github_uri": "GitHub Theme URI",
    "gitlab_uri": "GitLab Theme URI",
    "bitbucket_uri": "Bitbucket Theme URI",
    **_COMMON_HEADERS,
}

_TRAILING_COMMENT_RE = re.compile(r"\s*(?:\*/|\?>).*")


def _cleanup_header_value(value: str) -> str:
    return _TRAILING_COMMENT_RE.sub("", value).strip()


def get_file_headers(contents: str, repo_type: RepoType) -> Dict[str, str]:
    """Return {canonical_key: value} for every header present in `contents`."""
    text = str(contents or "")[:HEADER_SCAN_BYTES].replace("\r", "\n")
    labels = THEME_HEADERS if RepoType(repo_type) == RepoType.THEME else PLUGIN_HEADERS

    headers: Dict[str, str] = {}
    for (key, label) in labels.items():
        m = re.search(r"^[ \t/*#@]*" + re.escape(label) + r":(.*)$", text, re.MULTILINE | re.IGNORECASE)
        if not m:
            continue
        value = _cleanup_header_value(m.group(1))
        if value:
            headers[key] = value
    return headers
