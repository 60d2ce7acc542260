"""Shared fixtures: fake transport, fake browser, small alias table, temp cache."""

from datetime import datetime, timezone

import pytest

from pondus.collect.aliases import AliasRecord, AliasTable
from pondus.collect.base_source import BaseSource, rank_by
from pondus.collect.browser import SnapshotResult
from pondus.collect.cache import CacheStore
from pondus.collect.transport import TransportError
from pondus.config.settings import Settings


class FakeTransport:
    """
    Canned HTTP responses keyed by URL.

    A route value may be a string (returned every time), an exception
    (raised every time) or a list consumed one item per call.
    """

    def __init__(self, routes=None):
        self.routes = dict(routes or {})
        self.calls = []

    def get_text(self, url, params=None, headers=None):
        self.calls.append((url, params, headers))
        if url not in self.routes:
            raise TransportError(f"HTTP 404 Not Found ({url})")
        value = self.routes[url]
        if isinstance(value, list):
            if not value:
                raise TransportError(f"no more responses for {url}")
            value = value.pop(0)
        if isinstance(value, Exception):
            raise value
        return value


class FakeBrowser:
    """Browser capability returning a fixed snapshot."""

    name = "fake-browser"

    def __init__(self, text=None, error=None, available=True, tool_missing=False):
        self.text = text
        self.error = error
        self.available = available
        self.tool_missing = tool_missing
        self.urls = []

    def is_available(self):
        return self.available

    def snapshot(self, url):
        self.urls.append(url)
        return SnapshotResult(text=self.text, error=self.error, tool_missing=self.tool_missing)


class FixedClock:
    """Settable clock for cache TTL tests."""

    def __init__(self, now=None):
        self.now = now or datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self):
        return self.now


@pytest.fixture
def aliases():
    return AliasTable([
        AliasRecord("claude-opus-4.6", ["Claude Opus 4.6", "claude-opus-4-6"]),
        AliasRecord("gpt-5", ["GPT-5", "openai/gpt-5"]),
        AliasRecord("gpt-5-mini", ["GPT-5 mini"]),
        AliasRecord("gemini-2.5-pro", ["Gemini 2.5 Pro", "google/gemini-2.5-pro"]),
    ])


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def cache(tmp_path, clock):
    return CacheStore(tmp_path / "cache", ttl_hours=24, clock=clock)


@pytest.fixture
def settings():
    return Settings(env_aa_api_key="test-key")


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def browser():
    return FakeBrowser()


class StubSource(BaseSource):
    """Adapter serving a fixed [(name, score), ...] list."""

    def __init__(self, source_id, aliases, rows=None, error=None, missing=None):
        super().__init__(aliases, transport=FakeTransport(), browser=FakeBrowser())
        self.source_id = source_id
        self.rows = rows if rows is not None else [("Claude Opus 4.6", 70.0), ("GPT-5", 68.0), ("o3", 60.0)]
        self.error = error
        self.missing = missing
        self.live_fetches = 0

    def check_prerequisites(self, settings):
        return self.missing

    def fetch_raw(self, settings):
        self.live_fetches += 1
        if self.error:
            raise TransportError(self.error)
        return [list(row) for row in self.rows]

    def parse(self, payload):
        scores = [self.make_score(name, {"score": value}) for name, value in payload]
        return rank_by(scores, "score")
