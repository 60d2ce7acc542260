"""SWE-rebench leaderboard scraper.

Table rows in the accessibility snapshot look like:

    - row "1 Claude Code 52.9% 1.06% 70.8% $3.50 2,088,226 92.1%":
      - cell "1" [ref=e12]
      - cell "Claude Code" [ref=e13]
      - cell "52.9%" [ref=e14]

Columns: rank, model, resolved rate, SEM, pass@5, cost, tokens, cached %.
The snapshot text is cached as received.
"""

from typing import Any, Dict, List, Optional

from ..base_source import BrowserSource, as_float, rank_by
from ..models import ModelScore
from ..transport import ParseError

SWE_REBENCH_URL = "https://swe-rebench.com/"

ROW_PREFIX = '- row "'
CELL_PREFIX = '- cell "'


def extract_cell_value(line: str) -> Optional[str]:
    """Quoted value from a line like ``- cell "some value" [ref=...]``."""
    start = line.find('"')
    if start < 0:
        return None
    end = line.find('"', start + 1)
    if end < 0:
        return None
    return line[start + 1:end]


def parse_snapshot(text: str) -> Dict[str, float]:
    """Map model name -> resolved rate; the first row for a model wins."""
    results: Dict[str, float] = {}
    lines = [line.strip() for line in text.splitlines()]

    i = 0
    while i < len(lines):
        if not (lines[i].startswith(ROW_PREFIX) and "%" in lines[i]):
            i += 1
            continue

        cells = []
        j = i + 1
        while j < len(lines) and not lines[j].startswith("- row "):
            if lines[j].startswith(CELL_PREFIX):
                value = extract_cell_value(lines[j])
                if value is not None:
                    cells.append(value)
            j += 1

        if len(cells) >= 3:
            name = cells[1].strip()
            rate = as_float(cells[2])
            if rate is not None and name and name != "Model" and any(c.isalpha() for c in name):
                results.setdefault(name, rate)

        i = j

    return results


class SweRebenchSource(BrowserSource):
    """Scrape resolved rates from the SWE-rebench leaderboard."""

    source_id = "swe-rebench"
    display_name = "SWE-rebench"
    page_url = SWE_REBENCH_URL

    def parse(self, payload: Any) -> List[ModelScore]:
        if not isinstance(payload, str):
            raise ParseError("SWE-rebench payload is not snapshot text")
        scores = [self.make_score(name, {"resolve_rate": rate}) for name, rate in parse_snapshot(payload).items()]
        return rank_by(scores, "resolve_rate")
