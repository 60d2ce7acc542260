"""
Query orchestration across all provider adapters.

Runs every adapter (optionally on a bounded thread pool), isolates per-provider
failures, and assembles one envelope per query:

- rank: every provider's own ranking, verbatim (optionally top N each)
- check: one model's score per provider
- compare: two models' scores per provider, side by side
- sources: per-provider status without score lists
- refresh: invalidate the cache, then rank

No cross-provider score is computed.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Sequence

from .aliases import AliasTable
from .base_source import BaseSource
from .cache import CacheStore
from .models import Envelope, ModelScore, ProviderResult, QueryInfo
from ..config.settings import Settings

logger = logging.getLogger(__name__)


class Collector:
    """Coordinates provider adapters for one process invocation."""

    def __init__(
        self,
        sources: Sequence[BaseSource],
        cache: CacheStore,
        aliases: AliasTable,
        settings: Settings,
        max_workers: Optional[int] = None,
    ):
        self.adapters = list(sources)
        self.cache = cache
        self.aliases = aliases
        self.settings = settings
        self.max_workers = max_workers or settings.max_workers

    def _run_one(self, source: BaseSource, status_only: bool = False) -> ProviderResult:
        try:
            if status_only:
                return source.status(self.settings, self.cache)
            return source.fetch(self.settings, self.cache)
        except Exception as e:
            # Adapters are not supposed to raise; one that does must not sink the rest
            logger.exception(f"Unhandled error in source {source.id()}")
            return ProviderResult.failed(source.id(), f"{type(e).__name__}: {e}")

    def run_sources(self, status_only: bool = False) -> List[ProviderResult]:
        """
        Run every adapter and return results ordered by provider id.

        Args:
            status_only: Use each adapter's status path instead of a full fetch

        Returns:
            One ProviderResult per adapter
        """
        if self.max_workers <= 1 or len(self.adapters) <= 1:
            results = [self._run_one(s, status_only) for s in self.adapters]
        else:
            workers = min(self.max_workers, len(self.adapters))
            with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="pondus-source") as pool:
                futures = [pool.submit(self._run_one, s, status_only) for s in self.adapters]
                results = [f.result() for f in futures]

        results.sort(key=lambda r: r.source)

        ok = sum(1 for r in results if r.succeeded)
        logger.info(f"Collected {ok}/{len(results)} sources")
        return results

    def _matching_scores(self, scores: List[ModelScore], canonical: str) -> List[ModelScore]:
        return [
            s for s in scores
            if s.model == canonical or self.aliases.matches(s.source_model_name, canonical)
        ]

    def rank(self, top: Optional[int] = None, kind: str = "rank") -> Envelope:
        """Every provider's ranking; with ``top``, each list is cut to N entries."""
        results = self.run_sources()
        if top is not None:
            for result in results:
                result.scores = result.scores[:top]
        return Envelope(query=QueryInfo(kind=kind, top=top), sources=results)

    def check(self, model: str) -> Envelope:
        """One model across all providers; unmatched providers keep an empty list."""
        canonical, resolved = self.aliases.resolve(model)
        if not resolved:
            logger.info(f"Model {model!r} is not in the alias table, matching as {canonical!r}")

        results = self.run_sources()
        for result in results:
            result.scores = self._matching_scores(result.scores, canonical)

        return Envelope(query=QueryInfo(kind="check", model=canonical), sources=results)

    def compare(self, model_a: str, model_b: str) -> Envelope:
        """Two models side by side per provider; A's score first."""
        canonical_a = self.aliases.canonical_for(model_a)
        canonical_b = self.aliases.canonical_for(model_b)

        results = self.run_sources()
        for result in results:
            matched_a = self._matching_scores(result.scores, canonical_a)
            matched_b = [s for s in self._matching_scores(result.scores, canonical_b) if s not in matched_a]
            result.scores = matched_a + matched_b

        return Envelope(
            query=QueryInfo(kind="compare", models=[canonical_a, canonical_b]),
            sources=results,
        )

    def sources(self) -> Envelope:
        """Per-provider status; score lists are omitted, counts are kept."""
        results = self.run_sources(status_only=True)
        return Envelope(query=QueryInfo(kind="sources"), sources=results, include_scores=False)

    def refresh(self, top: Optional[int] = None) -> Envelope:
        """Invalidate every cache entry, then rank from live fetches."""
        removed = self.cache.invalidate_all()
        logger.info(f"Cache cleared ({removed} entries). Re-fetching all sources...")
        return self.rank(top=top, kind="refresh")
