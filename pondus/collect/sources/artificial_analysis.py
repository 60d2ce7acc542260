"""Artificial Analysis fetcher (authenticated REST API).

API returns either a bare list of model records or {"data": [...]}. Metric
fields appear flat on older responses and nested on newer ones:

    {"name": "GPT-5", "evaluations": {"artificial_analysis_intelligence_index": 68.5},
     "pricing": {"price_1m_input_tokens": 1.25, "price_1m_output_tokens": 10.0},
     "median_output_tokens_per_second": 180.2}
"""

import json
from typing import Any, Dict, List, Optional

from ..base_source import BaseSource, as_float, rank_by
from ..models import ModelScore
from ..transport import ParseError
from ...config.settings import Settings

AA_MODELS_URL = "https://artificialanalysis.ai/api/v2/data/llms/models"

# metric name -> candidate paths in a model record, first hit wins
METRIC_PATHS = {
    "intelligence_index": [
        ("intelligence_index",),
        ("evaluations", "artificial_analysis_intelligence_index"),
    ],
    "input_cost_per_1m_tokens": [
        ("input_cost_per_1m_tokens",),
        ("pricing", "price_1m_input_tokens"),
    ],
    "output_cost_per_1m_tokens": [
        ("output_cost_per_1m_tokens",),
        ("pricing", "price_1m_output_tokens"),
    ],
    "tokens_per_second": [
        ("tokens_per_second",),
        ("median_output_tokens_per_second",),
    ],
}


def _lookup(record: Dict[str, Any], path) -> Any:
    value: Any = record
    for part in path:
        if not isinstance(value, dict):
            return None
        value = value.get(part)
    return value


def extract_metric(record: Dict[str, Any], metric: str) -> Optional[float]:
    for path in METRIC_PATHS[metric]:
        value = as_float(_lookup(record, path))
        if value is not None:
            return value
    return None


class ArtificialAnalysisSource(BaseSource):
    """Fetch model intelligence, price and speed from Artificial Analysis."""

    source_id = "artificial-analysis"
    display_name = "Artificial Analysis"

    def check_prerequisites(self, settings: Settings) -> Optional[str]:
        if not settings.aa_api_key():
            return "no API key (set AA_API_KEY or sources.artificial-analysis.api_key)"
        return None

    def fetch_raw(self, settings: Settings) -> Any:
        text = self.transport.get_text(AA_MODELS_URL, headers={"x-api-key": settings.aa_api_key()})
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise ParseError(f"Artificial Analysis returned invalid JSON: {e}") from e

    def parse(self, payload: Any) -> List[ModelScore]:
        records = payload.get("data") if isinstance(payload, dict) else payload
        if not isinstance(records, list):
            raise ParseError("Artificial Analysis payload is not a list of models")

        scores = []
        for record in records:
            if not isinstance(record, dict):
                continue
            name = record.get("name")
            if not isinstance(name, str) or not name.strip():
                continue

            metrics = {}
            for metric in METRIC_PATHS:
                value = extract_metric(record, metric)
                if value is not None:
                    metrics[metric] = value

            scores.append(self.make_score(name, metrics))

        return rank_by(scores, "intelligence_index")
