"""
Pytest tests for common_remote/endpoints.py (URL shape, ref and token placement).

Run from the repo root:
    pytest common_remote/test_endpoints.py -v
"""

import sys
import urllib.parse
from pathlib import Path

# Set up path for imports
parent_dir = Path(__file__).parent.parent
if str(parent_dir) not in sys.path:
    sys.path.insert(0, str(parent_dir))

from common_bitbucket import BITBUCKET_PROFILE
from common_github import GITHUB_PROFILE
from common_gitlab import GITLAB_PROFILE
from common_remote.endpoints import api_base_for, build_endpoint, token_for, web_base_for
from common_types import ApiMethod, Credentials, RepoDescriptor

CREDS = Credentials(public_token="pub-token", enterprise_token="ent-token")


def _query(url):
    return dict(urllib.parse.parse_qsl(urllib.parse.urlsplit(url).query))


# ============================================================================
# Base URL selection
# ============================================================================

def test_hosted_base_when_no_enterprise():
    d = RepoDescriptor(owner="acme", repo="widget")
    assert api_base_for(d, GITLAB_PROFILE) == "https://gitlab.com/api/v4"
    assert web_base_for(d, GITLAB_PROFILE) == "https://gitlab.com"


def test_enterprise_base_gets_api_suffix():
    d = RepoDescriptor(owner="acme", repo="widget", enterprise="https://git.example.com/")
    assert api_base_for(d, GITLAB_PROFILE) == "https://git.example.com/api/v4"
    assert api_base_for(d, GITHUB_PROFILE) == "https://git.example.com/api/v3"
    assert web_base_for(d, GITLAB_PROFILE) == "https://git.example.com"


def test_distinct_enterprise_api_replaces_prefix():
    d = RepoDescriptor(
        owner="acme",
        repo="widget",
        enterprise="https://git.example.com",
        enterprise_api="https://api.git.example.com/v4",
    )
    url = build_endpoint(ApiMethod.TAGS, "/projects/42/repository/tags", d, CREDS, GITLAB_PROFILE)
    assert url.startswith("https://api.git.example.com/v4/projects/42/repository/tags?")
    assert _query(url) == {"private_token": "ent-token"}


def test_same_enterprise_api_behaves_like_enterprise():
    d = RepoDescriptor(
        owner="acme",
        repo="widget",
        enterprise="https://git.example.com",
        enterprise_api="https://git.example.com",
    )
    assert api_base_for(d, GITLAB_PROFILE) == "https://git.example.com/api/v4"


# ============================================================================
# Ref parameter
# ============================================================================

def test_content_reads_get_ref():
    d = RepoDescriptor(owner="acme", repo="widget", branch="develop")
    for method in (ApiMethod.FILE, ApiMethod.CHANGES, ApiMethod.README):
        url = build_endpoint(method, "/projects/42/repository/files/widget.php", d, CREDS, GITLAB_PROFILE)
        assert _query(url)["ref"] == "develop"


def test_listing_and_meta_get_no_ref():
    d = RepoDescriptor(owner="acme", repo="widget", branch="develop")
    for method in (ApiMethod.PROJECTS, ApiMethod.META, ApiMethod.TAGS, ApiMethod.BRANCHES):
        url = build_endpoint(method, "/projects", d, CREDS, GITLAB_PROFILE)
        assert "ref" not in _query(url)


def test_path_ref_provider_never_adds_ref_param():
    d = RepoDescriptor(owner="acme", repo="widget", git="bitbucket")
    url = build_endpoint(ApiMethod.FILE, "/repositories/acme/widget/src/master/widget.php", d, CREDS, BITBUCKET_PROFILE)
    assert "ref" not in _query(url)


def test_extra_params_precede_ref_and_token():
    d = RepoDescriptor(owner="acme", repo="widget")
    url = build_endpoint(ApiMethod.PROJECTS, "/projects", d, CREDS, GITLAB_PROFILE, params={"search": "widget"})
    assert url == "https://gitlab.com/api/v4/projects?search=widget&private_token=pub-token"


# ============================================================================
# Token placement
# ============================================================================

def test_public_descriptor_never_carries_enterprise_token():
    d = RepoDescriptor(owner="acme", repo="widget")
    for method in ApiMethod:
        url = build_endpoint(method, "/projects/42", d, CREDS, GITLAB_PROFILE)
        assert _query(url)["private_token"] == "pub-token"
        assert "ent-token" not in url


def test_enterprise_descriptor_never_carries_public_token():
    d = RepoDescriptor(owner="acme", repo="widget", enterprise="https://git.example.com")
    for method in ApiMethod:
        url = build_endpoint(method, "/projects/42", d, CREDS, GITLAB_PROFILE)
        assert _query(url)["private_token"] == "ent-token"
        assert "pub-token" not in url


def test_missing_token_is_omitted():
    d = RepoDescriptor(owner="acme", repo="widget")
    url = build_endpoint(ApiMethod.TAGS, "/projects/42/repository/tags", d, Credentials(), GITLAB_PROFILE)
    assert url == "https://gitlab.com/api/v4/projects/42/repository/tags"
    assert build_endpoint(ApiMethod.TAGS, "projects/42", d, None, GITLAB_PROFILE) == "https://gitlab.com/api/v4/projects/42"


def test_header_token_provider_keeps_token_out_of_url():
    d = RepoDescriptor(owner="acme", repo="widget", git="github")
    url = build_endpoint(ApiMethod.META, "/repos/acme/widget", d, CREDS, GITHUB_PROFILE)
    assert url == "https://api.github.com/repos/acme/widget"


def test_token_for_picks_one_slot():
    assert token_for(CREDS, enterprise=False) == "pub-token"
    assert token_for(CREDS, enterprise=True) == "ent-token"
    assert token_for(Credentials(public_token="pub-token"), enterprise=True) is None
    assert token_for(None, enterprise=False) is None
