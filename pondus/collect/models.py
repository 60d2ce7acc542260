"""
Data models for normalized benchmark results.

Scores, per-provider results and the envelope handed to the output layer.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Union

MetricValue = Union[float, int, str]


class SourceStatus(Enum):
    """Outcome of running one adapter."""
    OK = "ok"                    # live fetch succeeded
    CACHED = "cached"            # served from cache
    UNAVAILABLE = "unavailable"  # prerequisite missing, no attempt made
    ERROR = "error"              # attempt made and failed; reason on the result


@dataclass
class ModelScore:
    """One provider's measurement for one model."""
    model: str
    source_model_name: str
    metrics: Dict[str, MetricValue] = field(default_factory=dict)
    rank: Optional[int] = None
    resolved: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "model": self.model,
            "source_model_name": self.source_model_name,
            "metrics": dict(self.metrics),
            "rank": self.rank,
            "resolved": self.resolved,
        }


@dataclass
class ProviderResult:
    """Outcome of running one adapter for one query."""
    source: str
    status: SourceStatus
    fetched_at: Optional[datetime] = None
    scores: List[ModelScore] = field(default_factory=list)
    error: Optional[str] = None

    @classmethod
    def unavailable(cls, source: str) -> "ProviderResult":
        return cls(source=source, status=SourceStatus.UNAVAILABLE)

    @classmethod
    def failed(cls, source: str, reason: str) -> "ProviderResult":
        return cls(source=source, status=SourceStatus.ERROR, error=reason)

    @property
    def succeeded(self) -> bool:
        return self.status in (SourceStatus.OK, SourceStatus.CACHED)

    def to_dict(self, include_scores: bool = True) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "provider": self.source,
            "status": self.status.value,
            "fetched_at": self.fetched_at.isoformat() if self.fetched_at else None,
            "scores": [s.to_dict() for s in self.scores] if include_scores else [],
        }
        if self.error is not None:
            d["error"] = self.error
        if not include_scores:
            d["model_count"] = len(self.scores)
        return d


@dataclass
class QueryInfo:
    """What was asked: query kind plus its parameters."""
    kind: str
    model: Optional[str] = None
    models: Optional[List[str]] = None
    top: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        params = {"model": self.model, "models": self.models, "top": self.top}
        return {
            "kind": self.kind,
            "parameters": {k: v for k, v in params.items() if v is not None},
        }


@dataclass
class Envelope:
    """Aggregated response for one query, consumed by the output layer."""
    query: QueryInfo
    sources: List[ProviderResult] = field(default_factory=list)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    include_scores: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "query": self.query.to_dict(),
            "sources": [r.to_dict(include_scores=self.include_scores) for r in self.sources],
        }
