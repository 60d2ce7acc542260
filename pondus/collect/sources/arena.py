"""LMArena (Chatbot Arena) fetcher.

Reads the community-maintained Elo history:

    {"20250115": {"text": {"overall": {"gpt-5": 1450.2, ...}, ...}}, ...}

The latest date key wins; within it the "overall" category, then "full_old",
then whatever category comes first.
"""

import json
from typing import Any, List

from ..base_source import BaseSource, as_float, rank_by
from ..models import ModelScore
from ..transport import ParseError
from ...config.settings import Settings

ARENA_SCORES_URL = "https://raw.githubusercontent.com/nakasyou/lmarena-history/main/output/scores.json"

PREFERRED_CATEGORIES = ("overall", "full_old")


class ArenaSource(BaseSource):
    """Fetch Elo ratings from the LMArena history dump."""

    source_id = "arena"
    display_name = "LMArena"

    def fetch_raw(self, settings: Settings) -> Any:
        text = self.transport.get_text(ARENA_SCORES_URL)
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise ParseError(f"Arena returned invalid JSON: {e}") from e

    def parse(self, payload: Any) -> List[ModelScore]:
        if not isinstance(payload, dict) or not payload:
            raise ParseError("Arena payload is not a date-keyed object")

        latest = payload.get(max(payload))
        text_data = latest.get("text") if isinstance(latest, dict) else None
        if not isinstance(text_data, dict) or not text_data:
            raise ParseError("Arena payload has no text leaderboard for the latest date")

        category = next((c for c in PREFERRED_CATEGORIES if c in text_data), next(iter(text_data)))
        models = text_data.get(category)
        if not isinstance(models, dict):
            raise ParseError(f"Arena category {category!r} is not a model mapping")

        scores = []
        for name, elo in models.items():
            elo_score = as_float(elo)
            if elo_score is None:
                continue
            scores.append(self.make_score(name, {"elo_score": elo_score}))

        return rank_by(scores, "elo_score")
