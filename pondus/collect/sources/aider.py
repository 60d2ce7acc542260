"""Aider polyglot leaderboard fetcher.

The leaderboard is a YAML list maintained in the Aider repository:

    - model: claude-opus-4-5-20251101
      pass_rate_1: 42.7
      pass_rate_2: 89.4
      total_cost: 29.08
      percent_cases_well_formed: 100.0

The YAML text is cached as received.
"""

from typing import Any, List

import yaml

from ..base_source import BaseSource, as_float, rank_by
from ..models import ModelScore
from ..transport import ParseError
from ...config.settings import Settings

AIDER_URL = "https://raw.githubusercontent.com/Aider-AI/aider/main/aider/website/_data/polyglot_leaderboard.yml"

# YAML field -> metric name
METRIC_FIELDS = {
    "pass_rate_1": "pass_rate_1",
    "pass_rate_2": "pass_rate_2",
    "total_cost": "cost",
    "percent_cases_well_formed": "percent_cases_well_formed",
}


class AiderSource(BaseSource):
    """Fetch pass rates from the Aider polyglot benchmark."""

    source_id = "aider"
    display_name = "Aider polyglot"

    def fetch_raw(self, settings: Settings) -> Any:
        return self.transport.get_text(AIDER_URL)

    def parse(self, payload: Any) -> List[ModelScore]:
        if not isinstance(payload, str):
            raise ParseError("Aider payload is not YAML text")
        try:
            entries = yaml.safe_load(payload)
        except yaml.YAMLError as e:
            raise ParseError(f"Failed to parse Aider YAML: {e}") from e
        if not isinstance(entries, list):
            raise ParseError("Aider YAML is not a list of entries")

        scores = []
        for entry in entries:
            if not isinstance(entry, dict):
                continue
            name = entry.get("model")
            if not isinstance(name, str) or not name.strip():
                continue

            metrics = {}
            for field_name, metric in METRIC_FIELDS.items():
                value = as_float(entry.get(field_name))
                if value is not None:
                    metrics[metric] = value

            scores.append(self.make_score(name, metrics))

        return rank_by(scores, "pass_rate_1")
