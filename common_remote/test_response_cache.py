"""
Pytest tests for the per-repo response cache and its backing TransientStore.

Run from the repo root:
    pytest common_remote/test_response_cache.py -v
"""

import json
import sys
import tempfile
from pathlib import Path

# Set up path for imports
parent_dir = Path(__file__).parent.parent
if str(parent_dir) not in sys.path:
    sys.path.insert(0, str(parent_dir))

from cache.cache_transient import TransientStore, cache_entry_expires_at, make_cache_entry
from common_remote.response_cache import ResponseCache
from common_types import CacheKey


# ============================================================================
# TransientStore
# ============================================================================

def test_transient_roundtrip_and_expiry():
    with tempfile.TemporaryDirectory() as tmp:
        store = TransientStore(cache_file=Path(tmp) / "t.json")
        store.set_transient("gitlab:acme/widget:tags", ["1.0", "1.2"], ttl_s=60, now=1000)

        assert store.get_transient("gitlab:acme/widget:tags", now=1059) == ["1.0", "1.2"]
        assert store.get_transient("gitlab:acme/widget:tags", now=1060) is None
        assert store.get_transient("gitlab:acme/widget:missing", now=1000) is None


def test_expired_entries_are_not_reaped_on_read():
    with tempfile.TemporaryDirectory() as tmp:
        store = TransientStore(cache_file=Path(tmp) / "t.json")
        store.set_transient("a", {"x": 1}, ttl_s=10, now=0)
        store.set_transient("b", {"y": 2}, ttl_s=1000, now=0)

        assert store.get_transient("a", now=500) is None
        assert store.get_cache_sizes()[0] == 2

        assert store.purge_expired(now=500) == 1
        assert store.get_cache_sizes()[0] == 1
        assert store.get_transient("b", now=500) == {"y": 2}


def test_flush_persists_entries_for_a_new_process():
    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / "t.json"
        store = TransientStore(cache_file=path)
        store.set_transient("gitlab:acme/widget:meta", {"id": 42}, ttl_s=3600)
        store.flush()

        on_disk = json.loads(path.read_text())
        assert "gitlab:acme/widget:meta" in on_disk["items"]

        reloaded = TransientStore(cache_file=path)
        assert reloaded.get_transient("gitlab:acme/widget:meta") == {"id": 42}


def test_deletions_survive_merge_on_flush():
    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / "t.json"
        first = TransientStore(cache_file=path)
        first.set_transient("keep", 1, ttl_s=3600)
        first.set_transient("drop", 2, ttl_s=3600)
        first.flush()

        second = TransientStore(cache_file=path)
        assert second.delete_transient("drop") is True
        second.flush()

        assert TransientStore(cache_file=path).get_transient("drop") is None
        assert TransientStore(cache_file=path).get_transient("keep") == 1


def test_cache_entry_schema():
    entry = make_cache_entry(value=[1], fetched_at=100, ttl_s=50)
    assert entry == {"v": [1], "meta": {"fetched_at": 100, "ttl_s": 50}}
    assert cache_entry_expires_at(entry) == 150
    assert cache_entry_expires_at(make_cache_entry(value=[1], fetched_at=100)) is None


# ============================================================================
# ResponseCache
# ============================================================================

def test_response_cache_namespaces_by_repo_and_key():
    with tempfile.TemporaryDirectory() as tmp:
        store = TransientStore(cache_file=Path(tmp) / "t.json")
        widget = ResponseCache("gitlab:acme/widget", store, ttl_s=3600)
        gadget = ResponseCache("gitlab:acme/gadget", store, ttl_s=3600)

        widget.put(CacheKey.TAGS, ["1.0"])
        assert widget.transient_id(CacheKey.TAGS) == "gitlab:acme/widget:tags"
        assert widget.get(CacheKey.TAGS) == ["1.0"]
        assert widget.get(CacheKey.BRANCHES) is None
        assert gadget.get(CacheKey.TAGS) is None


def test_response_cache_per_entry_ttl():
    with tempfile.TemporaryDirectory() as tmp:
        store = TransientStore(cache_file=Path(tmp) / "t.json")
        cache = ResponseCache("gitlab:acme/widget", store, ttl_s=3600)
        cache.put(CacheKey.META, {"id": 42}, ttl_s=0)
        cache.put(CacheKey.TAGS, ["1.0"])

        assert cache.get(CacheKey.META) is None
        assert cache.get(CacheKey.TAGS) == ["1.0"]


def test_response_cache_clear_only_touches_one_repo():
    with tempfile.TemporaryDirectory() as tmp:
        store = TransientStore(cache_file=Path(tmp) / "t.json")
        widget = ResponseCache("gitlab:acme/widget", store)
        other = ResponseCache("gitlab:acme/widget-pro", store)
        widget.put(CacheKey.TAGS, ["1.0"])
        widget.put(CacheKey.META, {"id": 1})
        other.put(CacheKey.TAGS, ["2.0"])

        assert widget.clear() == 2
        assert widget.get(CacheKey.TAGS) is None
        assert other.get(CacheKey.TAGS) == ["2.0"]
