"""Abstract base class for all provider adapters."""

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from .aliases import AliasTable
from .browser import AgentBrowser
from .cache import CacheStore, CacheWriteError
from .models import MetricValue, ModelScore, ProviderResult, SourceStatus
from .transport import HttpTransport, ParseError, TransportError
from ..config.settings import Settings

logger = logging.getLogger(__name__)


class ToolMissing(Exception):
    """Raised when an external tool turns out to be absent at run time."""
    pass


def as_float(value: Any) -> Optional[float]:
    """Numeric value as float; None for missing, bool, or non-numeric values."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip().rstrip("%").replace(",", ""))
        except ValueError:
            return None
    return None


def as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


def rank_by(scores: List[ModelScore], metric: str) -> List[ModelScore]:
    """
    Sort scores by ``metric`` descending and assign 1-based ranks.

    Scores without a numeric value for ``metric`` sort last. The sort is
    stable, so ties keep provider order.
    """
    def key(score: ModelScore):
        value = score.metrics.get(metric)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return (1, 0.0)
        return (0, -float(value))

    ranked = sorted(scores, key=key)
    for i, score in enumerate(ranked, 1):
        score.rank = i
    return ranked


class BaseSource(ABC):
    """
    Shared fetch template for provider adapters.

    Subclasses set ``source_id`` and implement ``fetch_raw`` and ``parse``;
    sources with prerequisites override ``check_prerequisites``.
    """

    source_id: str = ""
    display_name: str = ""

    def __init__(
        self,
        aliases: AliasTable,
        transport: Optional[HttpTransport] = None,
        browser: Optional[Any] = None,
    ):
        self.aliases = aliases
        self.transport = transport or HttpTransport()
        self.browser = browser or AgentBrowser()

    def id(self) -> str:
        return self.source_id

    def check_prerequisites(self, settings: Settings) -> Optional[str]:
        """Return a reason string when a prerequisite is missing, else None."""
        return None

    @abstractmethod
    def fetch_raw(self, settings: Settings) -> Any:
        """
        Perform one live fetch and return the raw payload.

        The payload must be JSON-compatible; it is cached verbatim and fed to
        ``parse`` on both live and cached paths.

        Raises:
            TransportError: On request/process failure
            ParseError: If the response is not usable at all
            ToolMissing: If an external tool is absent
        """
        pass

    @abstractmethod
    def parse(self, payload: Any) -> List[ModelScore]:
        """
        Parse a raw payload into ranked scores.

        Malformed records are skipped; only a payload with the wrong top-level
        shape raises ParseError.
        """
        pass

    def make_score(
        self,
        source_model_name: str,
        metrics: Dict[str, MetricValue],
        rank: Optional[int] = None,
    ) -> ModelScore:
        """Build a ModelScore, resolving the provider-side name."""
        canonical, resolved = self.aliases.resolve(source_model_name)
        return ModelScore(
            model=canonical,
            source_model_name=source_model_name,
            metrics=metrics,
            rank=rank,
            resolved=resolved,
        )

    def _parse_or_error(self, payload: Any) -> List[ModelScore]:
        scores = self.parse(payload)
        if not scores:
            raise ParseError(f"{self.source_id} returned no parseable scores")
        return scores

    def fetch(self, settings: Settings, cache: CacheStore) -> ProviderResult:
        """
        Fetch scores via cache or one live request.

        Never raises: failures come back as UNAVAILABLE or ERROR results.
        """
        missing = self.check_prerequisites(settings)
        if missing:
            logger.info(f"{self.source_id} unavailable: {missing}")
            return ProviderResult.unavailable(self.source_id)

        entry = cache.get(self.source_id)
        if entry is not None:
            try:
                scores = self._parse_or_error(entry.data)
                logger.info(f"{self.source_id}: {len(scores)} scores from cache")
                return ProviderResult(
                    source=self.source_id,
                    status=SourceStatus.CACHED,
                    fetched_at=entry.fetched_at,
                    scores=scores,
                )
            except Exception as e:
                logger.warning(f"{self.source_id}: cached payload unusable ({e}), fetching live")

        logger.info(f"Fetching from {self.display_name or self.source_id}...")
        try:
            payload = self.fetch_raw(settings)
            scores = self._parse_or_error(payload)
        except ToolMissing as e:
            logger.info(f"{self.source_id} unavailable: {e}")
            return ProviderResult.unavailable(self.source_id)
        except (TransportError, ParseError) as e:
            logger.warning(f"{self.source_id} failed: {e}")
            return ProviderResult.failed(self.source_id, str(e))
        except Exception as e:
            logger.exception(f"{self.source_id}: unexpected error")
            return ProviderResult.failed(self.source_id, f"{type(e).__name__}: {e}")

        fetched_at = datetime.now(timezone.utc)
        try:
            fetched_at = cache.set(self.source_id, payload).fetched_at
        except CacheWriteError as e:
            logger.warning(f"{self.source_id}: {e}")

        logger.info(f"{self.source_id}: fetched {len(scores)} scores")
        return ProviderResult(
            source=self.source_id,
            status=SourceStatus.OK,
            fetched_at=fetched_at,
            scores=scores,
        )

    def status(self, settings: Settings, cache: CacheStore) -> ProviderResult:
        """Status-only path: a cache hit answers without a live fetch."""
        return self.fetch(settings, cache)


class BrowserSource(BaseSource):
    """Base for leaderboards scraped through a browser snapshot."""

    page_url: str = ""

    def check_prerequisites(self, settings: Settings) -> Optional[str]:
        if not self.browser.is_available():
            return f"browser tool '{getattr(self.browser, 'name', 'browser')}' not available"
        return None

    def fetch_raw(self, settings: Settings) -> str:
        result = self.browser.snapshot(self.page_url)
        if result.tool_missing:
            raise ToolMissing(result.error or "browser tool not found")
        if result.error is not None or result.text is None:
            raise TransportError(f"{self.source_id} scrape failed: {result.error}")
        return result.text
