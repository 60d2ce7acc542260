"""Scale SEAL leaderboard scraper.

The leaderboard page shows one card per benchmark; in the accessibility
snapshot each card is a link whose text is flattened:

    link "MCP Atlas Evaluating ... 1 claude-opus-4-5 62.30±1.76 2 gpt-5.2 NEW 60.57±1.62 View Full Ranking"

Scores use ``SCORE±ERROR``. A model's overall score is its mean across cards.
The snapshot text is cached as received.
"""

from typing import Any, Dict, List, Tuple

from ..base_source import BrowserSource, rank_by
from ..models import ModelScore
from ..transport import ParseError

SEAL_URL = "https://scale.com/leaderboard"

CARD_MARKER = "View Full Ranking"

# Integers up to this value preceding a name are treated as ranks
MAX_RANK = 500


def _is_rank(token: str) -> bool:
    return token.isdigit() and int(token) <= MAX_RANK


def extract_model_scores(card_text: str) -> List[Tuple[str, float]]:
    """
    Extract (model_name, score) pairs from one card's flattened text.

    Tokens between a rank and the following ``SCORE±ERROR`` token form the
    model name ("NEW" badges dropped, footnote asterisks stripped).
    """
    tokens = card_text.split()
    score_positions = [i for i, t in enumerate(tokens) if "±" in t]

    results = []
    for n, pos in enumerate(score_positions):
        try:
            score = float(tokens[pos].split("±")[0])
        except ValueError:
            continue

        start = 0 if n == 0 else score_positions[n - 1] + 1
        rank_pos = next((j for j in range(start, pos) if _is_rank(tokens[j])), None)
        name_start = rank_pos + 1 if rank_pos is not None else start

        name = " ".join(t for t in tokens[name_start:pos] if t != "NEW")
        name = name.rstrip("*").strip()
        if len(name) >= 2 and any(c.isalpha() for c in name):
            results.append((name, score))

    return results


def parse_snapshot(text: str) -> List[Tuple[str, float]]:
    """Average each model's scores across all benchmark cards."""
    per_model: Dict[str, List[float]] = {}

    for line in text.splitlines():
        line = line.strip()
        if CARD_MARKER not in line or '"' not in line:
            continue
        link_text = line[line.index('"') + 1:]
        end = link_text.rfind(CARD_MARKER)
        if end < 0:
            continue
        for name, score in extract_model_scores(link_text[:end]):
            per_model.setdefault(name, []).append(score)

    return [(name, sum(v) / len(v)) for name, v in per_model.items()]


class SealSource(BrowserSource):
    """Scrape averaged benchmark scores from the SEAL leaderboard."""

    source_id = "seal"
    display_name = "Scale SEAL"
    page_url = SEAL_URL

    def parse(self, payload: Any) -> List[ModelScore]:
        if not isinstance(payload, str):
            raise ParseError("SEAL payload is not snapshot text")
        scores = [self.make_score(name, {"overall_score": score}) for name, score in parse_snapshot(payload)]
        return rank_by(scores, "overall_score")
