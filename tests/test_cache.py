"""Tests for the on-disk payload cache: TTL, corruption handling, atomic writes."""

import json
import os
from datetime import timedelta
from unittest.mock import patch

import pytest

from pondus.collect.cache import CacheEntry, CacheStore, CacheWriteError, default_cache_dir


class TestCacheRoundTrip:
    """get() after set() returns the payload while fresh."""

    @pytest.mark.parametrize("payload", [
        {"data": [{"name": "GPT-5", "score": 71.2}]},
        "- model: gpt-5\n  pass_rate_1: 40.1\n",
        [1, 2.5, "three", None, {"nested": [True]}],
    ])
    def test_payload_returned_unchanged(self, cache, payload):
        cache.set("arena", payload)

        entry = cache.get("arena")

        assert entry is not None
        assert entry.data == payload

    def test_fetched_at_is_clock_time(self, cache, clock):
        written = cache.set("aider", "x")
        assert written.fetched_at == clock.now
        assert cache.get("aider").fetched_at == clock.now

    def test_missing_key_is_miss(self, cache):
        assert cache.get("never-written") is None

    def test_file_layout(self, cache):
        cache.set("swebench", {"a": 1})
        with open(cache.path_for("swebench"), encoding="utf-8") as f:
            raw = json.load(f)
        assert set(raw) == {"fetched_at", "ttl_hours", "data"}
        assert raw["data"] == {"a": 1}


class TestCacheExpiry:
    """Entries expire once now - fetched_at reaches the TTL."""

    def test_fresh_just_before_ttl(self, cache, clock):
        cache.set("arena", {"x": 1})
        clock.now = clock.now + timedelta(hours=23, minutes=59)
        assert cache.get("arena") is not None

    def test_expired_after_25_hours(self, cache, clock):
        cache.set("arena", {"x": 1})
        clock.now = clock.now + timedelta(hours=25)
        assert cache.get("arena") is None

    def test_expired_exactly_at_ttl(self, cache, clock):
        cache.set("arena", {"x": 1})
        clock.now = clock.now + timedelta(hours=24)
        assert cache.get("arena") is None

    def test_zero_ttl_never_fresh(self, tmp_path, clock):
        store = CacheStore(tmp_path, ttl_hours=0, clock=clock)
        store.set("arena", {"x": 1})
        assert store.get("arena") is None

    def test_entry_ttl_comes_from_file(self, tmp_path, clock):
        CacheStore(tmp_path, ttl_hours=1, clock=clock).set("arena", {"x": 1})
        clock.now = clock.now + timedelta(hours=2)
        # A store with a longer TTL still honours the TTL recorded on the entry
        assert CacheStore(tmp_path, ttl_hours=48, clock=clock).get("arena") is None


class TestCorruptEntries:
    """Unreadable entries are misses, never errors."""

    @pytest.mark.parametrize("content", [
        "{not json",
        "[]",
        '{"fetched_at": "2026-03-01T12:00:00+00:00", "data": 1}',
        '{"fetched_at": "yesterday", "ttl_hours": 24, "data": 1}',
        '{"fetched_at": "2026-03-01T12:00:00+00:00", "ttl_hours": "24", "data": 1}',
        '{"fetched_at": "2026-03-01T12:00:00+00:00", "ttl_hours": -1, "data": 1}',
    ])
    def test_corrupt_entry_is_miss(self, cache, content):
        cache.cache_dir.mkdir(parents=True, exist_ok=True)
        cache.path_for("arena").write_text(content, encoding="utf-8")
        assert cache.get("arena") is None

    def test_binary_garbage_is_miss(self, cache):
        cache.cache_dir.mkdir(parents=True, exist_ok=True)
        cache.path_for("arena").write_bytes(b"\xff\xfe\x00garbage")
        assert cache.get("arena") is None

    def test_naive_timestamp_treated_as_utc(self):
        entry = CacheEntry.from_dict("k", {"fetched_at": "2026-03-01T12:00:00", "ttl_hours": 24, "data": None})
        assert entry.fetched_at.utcoffset() == timedelta(0)


class TestAtomicWrite:
    """An interrupted write leaves the previous entry readable."""

    def test_interrupted_publish_keeps_prior_entry(self, cache):
        cache.set("arena", {"version": 1})

        with patch("pondus.collect.cache.os.replace", side_effect=OSError("disk full")):
            with pytest.raises(CacheWriteError):
                cache.set("arena", {"version": 2})

        entry = cache.get("arena")
        assert entry is not None
        assert entry.data == {"version": 1}

    def test_interrupted_first_write_leaves_nothing(self, cache):
        with patch("pondus.collect.cache.os.replace", side_effect=OSError("disk full")):
            with pytest.raises(CacheWriteError):
                cache.set("arena", {"version": 1})

        assert cache.get("arena") is None

    def test_temp_file_removed_on_failure(self, cache):
        with patch("pondus.collect.cache.os.fsync", side_effect=OSError("io error")):
            with pytest.raises(CacheWriteError):
                cache.set("arena", {"version": 1})

        assert list(cache.cache_dir.iterdir()) == []

    def test_unserializable_payload_rejected_before_write(self, cache):
        with pytest.raises(CacheWriteError):
            cache.set("arena", {"bad": object()})
        assert not cache.path_for("arena").exists()


class TestInvalidateAll:
    """invalidate_all() makes every previously cached key a miss."""

    def test_all_keys_miss_after_invalidate(self, cache):
        for key in ("arena", "aider", "swebench"):
            cache.set(key, {"k": key})

        removed = cache.invalidate_all()

        assert removed == 3
        for key in ("arena", "aider", "swebench"):
            assert cache.get(key) is None

    def test_stray_temp_files_removed(self, cache):
        cache.set("arena", {})
        (cache.cache_dir / ".arena.abc123.partial").write_text("half", encoding="utf-8")

        assert cache.invalidate_all() == 1
        assert list(cache.cache_dir.iterdir()) == []

    def test_missing_dir_is_noop(self, tmp_path):
        assert CacheStore(tmp_path / "absent").invalidate_all() == 0


class TestDefaultCacheDir:

    def test_xdg_cache_home(self, tmp_path):
        with patch.dict(os.environ, {"XDG_CACHE_HOME": str(tmp_path)}):
            assert default_cache_dir() == tmp_path / "pondus"

    def test_home_fallback(self):
        with patch.dict(os.environ, {"XDG_CACHE_HOME": ""}):
            assert default_cache_dir().parts[-2:] == (".cache", "pondus")
