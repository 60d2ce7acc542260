"""LiveBench fetcher (Hugging Face datasets-server).

Rows of the ``livebench/model_judgment`` leaderboard split are fetched in
pages of BATCH_SIZE. Each row is one judgment ({"model": ..., "score": 0-1,
"category": ...}); a model's global average is the mean over its rows,
scaled to 0-100.

Cached payload: {"rows": [<row as received>, ...]}
"""

import json
import logging
from collections import OrderedDict
from typing import Any, Dict, List

from ..base_source import BaseSource, as_float, rank_by
from ..models import ModelScore
from ..transport import ParseError, TransportError
from ...config.settings import Settings

logger = logging.getLogger(__name__)

HF_ROWS_URL = "https://datasets-server.huggingface.co/rows"
DATASET = "livebench/model_judgment"
BATCH_SIZE = 100

# Hard stop for paging in case num_rows_total is wrong
MAX_PAGES = 2000


class LiveBenchSource(BaseSource):
    """Fetch and average LiveBench judgments per model."""

    source_id = "livebench"
    display_name = "LiveBench"

    def _fetch_page(self, offset: int) -> Dict[str, Any]:
        params = {
            "dataset": DATASET,
            "config": "default",
            "split": "leaderboard",
            "offset": offset,
            "length": BATCH_SIZE,
        }
        text = self.transport.get_text(HF_ROWS_URL, params=params)
        try:
            page = json.loads(text)
        except json.JSONDecodeError as e:
            raise ParseError(f"LiveBench page at offset {offset} is not JSON: {e}") from e
        if not isinstance(page, dict) or not isinstance(page.get("rows"), list):
            raise ParseError(f"LiveBench page at offset {offset} has no rows")
        return page

    def fetch_raw(self, settings: Settings) -> Any:
        rows: List[Any] = []
        offset = 0

        for _ in range(MAX_PAGES):
            try:
                page = self._fetch_page(offset)
            except (TransportError, ParseError) as e:
                # First page failing fails the fetch; later pages end paging
                if not rows:
                    raise
                logger.warning(f"LiveBench paging stopped at offset {offset}: {e}")
                break

            page_rows = [r.get("row") for r in page["rows"] if isinstance(r, dict)]
            if not page_rows:
                break
            rows.extend(page_rows)

            total = page.get("num_rows_total")
            offset += BATCH_SIZE
            if not isinstance(total, int) or offset >= total:
                break

        return {"rows": rows}

    def parse(self, payload: Any) -> List[ModelScore]:
        rows = payload.get("rows") if isinstance(payload, dict) else None
        if not isinstance(rows, list):
            raise ParseError("LiveBench payload has no rows")

        judgments: Dict[str, List[float]] = OrderedDict()
        for row in rows:
            if not isinstance(row, dict):
                continue
            name = row.get("model")
            score = as_float(row.get("score"))
            if not isinstance(name, str) or not name.strip() or score is None:
                continue
            judgments.setdefault(name, []).append(score)

        scores = []
        for name, values in judgments.items():
            scores.append(self.make_score(name, {
                "global_average": sum(values) / len(values) * 100.0,
                "judgments": len(values),
            }))

        return rank_by(scores, "global_average")
