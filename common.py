"""
Remote updater utilities package.

Shared constants and helpers for the remote update-resolution scripts.
"""

import logging
import os
import re
import urllib.parse
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

# Global logger for the module
_logger = logging.getLogger(__name__)

#
# Cache + transport policy constants
#
DEFAULT_TRANSIENT_TTL_S: int = 12 * 3600
# ^ TTL (seconds) for per-repo response fragments (tags, branches, file headers, readme, ...).
#   Example: tags fetched at 09:00 are served from cache until 21:00, then refetched.
DEFAULT_HTTP_TIMEOUT_S: int = 10
# ^ Per-request timeout handed to `requests`; there is no retry on top of it.
DEFAULT_TAG_TRACKING_BRANCHES: Tuple[str, ...] = ("master", "main")
# ^ Branch names treated as "default branch" by the download-link tie-break:
#   a descriptor on one of these with resolved tags downloads its newest tag instead.


# ======================================================================================
# IMPORTANT: Cache location policy (remote-updater)
#
# All *persistent* caches MUST live under:
#   - $REMOTE_UPDATER_CACHE_DIR     (explicit override), else
#   - ~/.cache/remote-updater       (default)
#
# Do NOT write caches next to a plugin/theme checkout: the local bundled files are
# read as a fallback source and must stay untouched.
# ======================================================================================

def updater_cache_dir() -> Path:
    """Return the cache directory for remote-updater.

    Resolution order:
    - REMOTE_UPDATER_CACHE_DIR (explicit override)
    - ~/.cache/remote-updater
    """
    override = os.environ.get("REMOTE_UPDATER_CACHE_DIR")
    if override:
        return Path(override).expanduser()

    return Path.home() / ".cache" / "remote-updater"


def updater_config_dir() -> Path:
    """Return the config directory (options file, per-host token files live next to it)."""
    return Path.home() / ".config" / "remote-updater"


def resolve_cache_path(cache_file: str) -> Path:
    """Resolve a cache file path into the global remote-updater cache directory.

    - Absolute paths are used as-is.
    - Relative paths are rooted under `updater_cache_dir()`.
    - If the relative path starts with ".cache/", that prefix is stripped so
      ".cache/foo.json" still lands in ~/.cache/remote-updater/foo.json.
    """
    p = Path(cache_file).expanduser()
    if p.is_absolute():
        return p

    # Normalize any leading "./"
    rel = Path(*p.parts[1:]) if p.parts[:1] == (".",) else p

    # Strip leading ".cache/" if present
    if rel.parts[:1] == (".cache",):
        rel = Path(*rel.parts[1:])

    return updater_cache_dir() / rel


# ======================================================================================
# Query-string helpers
# ======================================================================================

def add_query_arg(url: str, key: str, value: str) -> str:
    """Return `url` with `key=value` set in its query string (replacing any previous value)."""
    parts = urllib.parse.urlsplit(url)
    query = [(k, v) for (k, v) in urllib.parse.parse_qsl(parts.query, keep_blank_values=True) if k != key]
    query.append((key, str(value)))
    return urllib.parse.urlunsplit(parts._replace(query=urllib.parse.urlencode(query)))


def remove_query_arg(url: str, key: str) -> str:
    """Return `url` without `key` in its query string."""
    parts = urllib.parse.urlsplit(url)
    query = [(k, v) for (k, v) in urllib.parse.parse_qsl(parts.query, keep_blank_values=True) if k != key]
    return urllib.parse.urlunsplit(parts._replace(query=urllib.parse.urlencode(query)))


# ======================================================================================
# Version ordering
# ======================================================================================

_VERSION_SPLIT_RE = re.compile(r"[.\-+_]")
# Ranks: non-numeric part < end of version < numeric part.
_VERSION_END = (1, 0, "")


def version_key(version: str) -> Tuple[Tuple[int, int, str], ...]:
    """Sort key for version-ish tag names.

    Numeric components compare numerically, other components compare as strings and
    sort below any number ("1.0-beta" < "1.0.0"). Every key ends with a terminator
    ranked between the two, so a pre-release sorts before its release
    ("1.0-rc1" < "1.0") and an extra number sorts after it ("1.0" < "1.0.1").
    A leading "v" is ignored.
    """
    s = str(version or "").strip()
    if s[:1] in ("v", "V") and s[1:2].isdigit():
        s = s[1:]
    key = []
    for part in _VERSION_SPLIT_RE.split(s):
        if part.isdigit():
            key.append((2, int(part), ""))
        elif part:
            key.append((0, 0, part))
    key.append(_VERSION_END)
    return tuple(key)


def sort_versions(versions: Iterable[str]) -> List[str]:
    """Return versions oldest -> newest."""
    return sorted((str(v) for v in versions if str(v or "").strip()), key=version_key)


def is_newer_version(candidate: Optional[str], current: Optional[str]) -> bool:
    """True if `candidate` orders strictly after `current` (both must be set)."""
    if not candidate or not current:
        return False
    return version_key(candidate) > version_key(current)


def setup_logging(verbose: bool = False) -> None:
    """Configure logging"""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="[%(asctime)s] %(levelname)s: %(message)s",
        datefmt="%H:%M:%S",
    )
