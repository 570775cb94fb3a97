"""
Pytest tests for common_remote/options.py (token priority, options file parsing).

Run from the repo root:
    pytest common_remote/test_options.py -v
"""

import sys
from dataclasses import FrozenInstanceError
from pathlib import Path

import pytest

# Set up path for imports
parent_dir = Path(__file__).parent.parent
if str(parent_dir) not in sys.path:
    sys.path.insert(0, str(parent_dir))

from common_remote.options import TOKEN_ENV_VARS, UpdaterOptions, load_options, options_file_path
from common_types import Credentials, GitHost


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Isolated HOME with no token env vars set."""
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.delenv("REMOTE_UPDATER_OPTIONS", raising=False)
    for (public_env, enterprise_env) in TOKEN_ENV_VARS.values():
        monkeypatch.delenv(public_env, raising=False)
        monkeypatch.delenv(enterprise_env, raising=False)
    return tmp_path


def _write(path, text):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)
    return path


# ============================================================================
# Defaults + file
# ============================================================================

def test_defaults_without_any_source(clean_env):
    opts = load_options(clean_env / "missing.yaml")
    assert opts.branch_switch is False
    assert opts.refresh_cache is False
    assert opts.cache_ttl_s == 12 * 3600
    assert opts.credentials_for(GitHost.GITLAB) == Credentials()


def test_options_file_values(clean_env):
    path = _write(
        clean_env / "options.yaml",
        "gitlab:\n"
        "  public_token: glpat-file\n"
        "  enterprise_token: ent-file\n"
        "branch_switch: true\n"
        "cache_ttl_hours: 2\n",
    )
    opts = load_options(path)
    assert opts.credentials_for("gitlab") == Credentials(public_token="glpat-file", enterprise_token="ent-file")
    assert opts.credentials_for(GitHost.GITHUB) == Credentials()
    assert opts.branch_switch is True
    assert opts.cache_ttl_s == 2 * 3600


def test_options_file_from_env_var(clean_env, monkeypatch):
    path = _write(clean_env / "custom" / "opts.yaml", "refresh_cache: true\n")
    monkeypatch.setenv("REMOTE_UPDATER_OPTIONS", str(path))
    assert options_file_path() == path
    assert load_options().refresh_cache is True


def test_unreadable_options_file_is_ignored(clean_env):
    path = _write(clean_env / "options.yaml", "- just\n- a list\n")
    assert load_options(path).credentials_for(GitHost.GITLAB) == Credentials()
    path = _write(clean_env / "broken.yaml", "gitlab: [unclosed\n")
    assert load_options(path).cache_ttl_hours == 12


def test_bad_ttl_falls_back_to_default(clean_env):
    path = _write(clean_env / "options.yaml", "cache_ttl_hours: soon\n")
    assert load_options(path).cache_ttl_hours == 12


# ============================================================================
# Token priority
# ============================================================================

def test_env_beats_file(clean_env, monkeypatch):
    path = _write(clean_env / "options.yaml", "gitlab:\n  public_token: from-file\n")
    monkeypatch.setenv("GITLAB_TOKEN", "from-env")
    assert load_options(path).credentials_for(GitHost.GITLAB).public_token == "from-env"


def test_override_beats_env(clean_env, monkeypatch):
    monkeypatch.setenv("GITHUB_ENTERPRISE_TOKEN", "from-env")
    opts = load_options(
        clean_env / "missing.yaml",
        overrides={GitHost.GITHUB: Credentials(enterprise_token="from-arg")},
    )
    assert opts.credentials_for(GitHost.GITHUB).enterprise_token == "from-arg"


def test_token_file_is_last_resort_for_public_slot(clean_env):
    _write(clean_env / ".config" / "gitlab-token", "from-token-file\n")
    creds = load_options(clean_env / "missing.yaml").credentials_for(GitHost.GITLAB)
    assert creds.public_token == "from-token-file"
    assert creds.enterprise_token is None


def test_cli_flags_override_file(clean_env):
    path = _write(clean_env / "options.yaml", "branch_switch: true\nrefresh_cache: true\n")
    opts = load_options(path, branch_switch=False, refresh_cache=False)
    assert opts.branch_switch is False
    assert opts.refresh_cache is False


def test_options_are_immutable():
    opts = UpdaterOptions()
    with pytest.raises(FrozenInstanceError):
        opts.branch_switch = True  # type: ignore[misc]
