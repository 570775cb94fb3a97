"""
Pytest tests for common.py helpers (version ordering, query strings, cache paths).

Run from the repo root:
    pytest test_common.py -v
"""

import sys
from pathlib import Path

# Set up path for imports
parent_dir = Path(__file__).parent
if str(parent_dir) not in sys.path:
    sys.path.insert(0, str(parent_dir))

from common import (
    add_query_arg,
    is_newer_version,
    remove_query_arg,
    resolve_cache_path,
    sort_versions,
    updater_cache_dir,
    version_key,
)


# ============================================================================
# Version ordering
# ============================================================================

def test_sort_versions_is_numeric_not_lexical():
    assert sort_versions(["1.10", "1.2", "1.9.1", "1.0"]) == ["1.0", "1.2", "1.9.1", "1.10"]


def test_sort_versions_ignores_leading_v():
    assert sort_versions(["v2.0", "1.5", "v1.10"]) == ["1.5", "v1.10", "v2.0"]


def test_non_numeric_parts_sort_first():
    assert version_key("1.0-beta") < version_key("1.0.0")
    assert sort_versions(["release", "0.1"]) == ["release", "0.1"]


def test_prerelease_sorts_before_its_release():
    assert version_key("1.0-rc1") < version_key("1.0")
    assert version_key("1.0") < version_key("1.0.1")
    assert version_key("1.0-beta") < version_key("1.0-beta.2") < version_key("1.0")
    assert sort_versions(["1.0", "1.0-beta", "0.9"]) == ["0.9", "1.0-beta", "1.0"]
    assert version_key("v1.0") == version_key("1.0")


def test_sort_versions_drops_blank_names():
    assert sort_versions(["", "  ", "1.0"]) == ["1.0"]


def test_is_newer_version():
    assert is_newer_version("1.2", "1.1") is True
    assert is_newer_version("1.1", "1.1") is False
    assert is_newer_version("1.0", "1.1") is False
    assert is_newer_version(None, "1.1") is False
    assert is_newer_version("1.2", None) is False
    assert is_newer_version("1.0-beta", "1.0") is False
    assert is_newer_version("1.0", "1.0-rc1") is True


# ============================================================================
# Query-string helpers
# ============================================================================

def test_add_query_arg_appends_and_replaces():
    url = add_query_arg("https://gitlab.com/acme/widget/repository/archive.zip", "ref", "1.0")
    assert url == "https://gitlab.com/acme/widget/repository/archive.zip?ref=1.0"
    url = add_query_arg(url, "ref", "1.2")
    assert url == "https://gitlab.com/acme/widget/repository/archive.zip?ref=1.2"


def test_remove_query_arg():
    url = "https://gitlab.com/api/v4/projects?search=widget&private_token=abc"
    assert remove_query_arg(url, "private_token") == "https://gitlab.com/api/v4/projects?search=widget"


# ============================================================================
# Cache location
# ============================================================================

def test_cache_dir_override(monkeypatch, tmp_path):
    monkeypatch.setenv("REMOTE_UPDATER_CACHE_DIR", str(tmp_path))
    assert updater_cache_dir() == tmp_path
    assert resolve_cache_path("transients.json") == tmp_path / "transients.json"
    assert resolve_cache_path(".cache/notices.json") == tmp_path / "notices.json"


def test_absolute_cache_path_is_kept(tmp_path):
    p = tmp_path / "x.json"
    assert resolve_cache_path(str(p)) == p
