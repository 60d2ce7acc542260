"""SWE-bench leaderboard fetcher.

Static JSON published with the SWE-bench site. Two shapes are accepted:

    {"leaderboards": [{"name": "Verified", "results": [{"name": ..., "resolved": 65.4}, ...]}]}
    [{"name": ..., "resolved": 65.4, "date": "2025-06-01"}, ...]
"""

import json
from typing import Any, Dict, List, Optional

from ..base_source import BaseSource, as_float, as_int, rank_by
from ..models import ModelScore
from ..transport import ParseError
from ...config.settings import Settings

SWEBENCH_URL = "https://raw.githubusercontent.com/SWE-bench/swe-bench.github.io/master/data/leaderboards.json"


class SweBenchSource(BaseSource):
    """Fetch resolved rates from the SWE-bench leaderboards."""

    source_id = "swebench"
    display_name = "SWE-bench"

    def fetch_raw(self, settings: Settings) -> Any:
        text = self.transport.get_text(SWEBENCH_URL)
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise ParseError(f"SWE-bench returned invalid JSON: {e}") from e

    def _score_from_result(self, result: Any) -> Optional[ModelScore]:
        if not isinstance(result, dict):
            return None
        name = result.get("name")
        if not isinstance(name, str) or not name.strip():
            return None

        metrics: Dict[str, Any] = {}
        rate = as_float(result.get("resolved"))
        if rate is not None:
            metrics["resolved_rate"] = rate
        count = as_int(result.get("resolved_count"))
        if count is not None:
            metrics["resolved_count"] = count
        date = result.get("date")
        if isinstance(date, str) and date:
            metrics["date"] = date

        return self.make_score(name, metrics)

    def parse(self, payload: Any) -> List[ModelScore]:
        entries = None
        if isinstance(payload, dict):
            entries = payload.get("leaderboards")
            if entries is None:
                entries = payload.get("results")
        elif isinstance(payload, list):
            entries = payload
        if not isinstance(entries, list):
            raise ParseError("SWE-bench payload has no leaderboard list")

        scores = []
        for entry in entries:
            # Nested leaderboard -> its results; otherwise the entry is a result
            results = entry.get("results") if isinstance(entry, dict) else None
            for result in results if isinstance(results, list) else [entry]:
                score = self._score_from_result(result)
                if score is not None:
                    scores.append(score)

        return rank_by(scores, "resolved_rate")
