"""
Pytest tests for common_remote/file_headers.py.

Run from the repo root:
    pytest common_remote/test_file_headers.py -v
"""

import sys
from pathlib import Path

# Set up path for imports
parent_dir = Path(__file__).parent.parent
if str(parent_dir) not in sys.path:
    sys.path.insert(0, str(parent_dir))

from common_remote.file_headers import HEADER_SCAN_BYTES, get_file_headers
from common_types import RepoType

PLUGIN_MAIN = """<?php
/**
 * Plugin Name:       Widget
 * Plugin URI:        https://example.com/widget
 * GitLab Plugin URI: https://gitlab.com/acme/widget
 * GitLab Branch:     develop
 * Version:           1.2.0
 * Requires at least: 5.2
 * Requires PHP:      7.4
 * Author:            Acme */
"""

THEME_STYLE = """/*
Theme Name: Acme Theme
Theme URI: https://example.com/theme
GitHub Theme URI: acme/acme-theme
Version: 3.1
Template: parent-theme
*/
"""


# ============================================================================
# Plugin headers
# ============================================================================

def test_plugin_headers():
    headers = get_file_headers(PLUGIN_MAIN, RepoType.PLUGIN)
    assert headers["name"] == "Widget"
    assert headers["uri"] == "https://example.com/widget"
    assert headers["gitlab_uri"] == "https://gitlab.com/acme/widget"
    assert headers["gitlab_branch"] == "develop"
    assert headers["version"] == "1.2.0"
    assert headers["requires"] == "5.2"
    assert headers["requires_php"] == "7.4"
    # Trailing comment terminator is stripped.
    assert headers["author"] == "Acme"


def test_plugin_headers_ignore_theme_labels():
    headers = get_file_headers(THEME_STYLE, RepoType.PLUGIN)
    assert "name" not in headers
    assert headers["version"] == "3.1"


# ============================================================================
# Theme headers
# ============================================================================

def test_theme_headers():
    headers = get_file_headers(THEME_STYLE, "theme")
    assert headers["name"] == "Acme Theme"
    assert headers["github_uri"] == "acme/acme-theme"
    assert headers["template"] == "parent-theme"
    assert headers["version"] == "3.1"


# ============================================================================
# Limits
# ============================================================================

def test_headers_past_scan_window_are_ignored():
    contents = "<?php\n" + ("//" + "x" * 78 + "\n") * (HEADER_SCAN_BYTES // 80 + 1) + " * Version: 9.9\n"
    assert "version" not in get_file_headers(contents, RepoType.PLUGIN)


def test_empty_header_values_are_dropped():
    assert get_file_headers(" * Version:   \n", RepoType.PLUGIN) == {}
