"""
Pytest tests for common_bitbucket (Bitbucket Cloud 2.0 shapes).

Run from the repo root:
    pytest common_bitbucket/test_bitbucket_api.py -v
"""

import sys
import urllib.parse
from pathlib import Path

import pytest

# Set up path for imports
parent_dir = Path(__file__).parent.parent
if str(parent_dir) not in sys.path:
    sys.path.insert(0, str(parent_dir))

from common_bitbucket import BitbucketAPI
from common_remote.exceptions import ConfigurationError
from common_remote.options import UpdaterOptions
from common_remote.testing import FakeTransport, make_store
from common_types import Credentials, GitHost, RepoDescriptor

PLUGIN_MAIN = "<?php\n/*\n * Plugin Name: Widget\n * Version: 0.4\n */\n"


def _api(tmp_path, routes, descriptor=None, token=None):
    descriptor = descriptor or RepoDescriptor(owner="acme", repo="widget", git="bitbucket", branch="develop")
    options = UpdaterOptions(credentials={GitHost.BITBUCKET: Credentials(public_token=token)})
    http = FakeTransport(routes)
    return BitbucketAPI(descriptor, options, store=make_store(tmp_path), http=http), http


# ============================================================================
# Fetchers
# ============================================================================

def test_file_read_puts_ref_in_path(tmp_path):
    api, http = _api(tmp_path, {"/repositories/acme/widget/src/develop/widget.php": PLUGIN_MAIN}, token="bb")
    assert api.get_remote_info("widget.php") is True
    assert api.descriptor.remote_version == "0.4"

    parts = urllib.parse.urlsplit(http.calls[0])
    assert parts.netloc == "api.bitbucket.org"
    assert dict(urllib.parse.parse_qsl(parts.query)) == {"access_token": "bb"}


def test_tags_from_paginated_values(tmp_path):
    api, http = _api(
        tmp_path,
        {"/repositories/acme/widget/refs/tags": {"values": [{"name": "0.3"}, {"name": "0.4"}], "pagelen": 100}},
    )
    assert api.get_remote_tag() is True
    assert api.descriptor.newest_tag == "0.4"
    assert "pagelen=100" in http.calls[0]


def test_tags_without_values_fail(tmp_path):
    api, _ = _api(tmp_path, {"/repositories/acme/widget/refs/tags": {"type": "error"}})
    assert api.get_remote_tag() is False


def test_meta_mapping(tmp_path):
    api, _ = _api(
        tmp_path,
        {"/repositories/acme/widget": {"updated_on": "2024-03-03T00:00:00+00:00", "is_private": True}},
    )
    assert api.get_repo_meta() is True
    assert api.descriptor.last_updated == "2024-03-03T00:00:00+00:00"
    assert api.descriptor.private is True


def test_branches_link_to_get_archives(tmp_path):
    api, _ = _api(tmp_path, {"/repositories/acme/widget/refs/branches": {"values": [{"name": "develop"}]}}, token="bb")
    assert api.get_remote_branches() is True
    assert api.descriptor.branches == {"develop": "https://bitbucket.org/acme/widget/get/develop.zip?access_token=bb"}


# ============================================================================
# Download link + configuration
# ============================================================================

def test_download_link_non_default_branch_ignores_tags(tmp_path):
    api, _ = _api(tmp_path, {})
    api.descriptor.tags = ["0.3", "0.4"]
    api.descriptor.newest_tag = "0.4"
    assert api.construct_download_link() == "https://bitbucket.org/acme/widget/get/develop.zip"


def test_self_hosted_bitbucket_is_rejected(tmp_path):
    d = RepoDescriptor(owner="acme", repo="widget", git="bitbucket", enterprise="https://bb.example.com")
    api, _ = _api(tmp_path, {}, descriptor=d, token="bb")
    with pytest.raises(ConfigurationError) as e:
        api.check_credentials()
    assert e.value.host == "bitbucket"


def test_cloud_needs_no_token(tmp_path):
    api, _ = _api(tmp_path, {})
    api.check_credentials()
