"""
Rendering of query envelopes.

Formats:
- json: the envelope as indented JSON (the machine-readable contract)
- table: fixed-width text, one block per provider
- markdown: one markdown table per provider (alias: md)

Provider blocks are emitted in envelope order; scores are never merged
across providers.
"""

import json
from typing import Callable, Dict, List

from .collect.models import Envelope, MetricValue, ModelScore, ProviderResult, SourceStatus

FORMATS = ("json", "table", "markdown")
FORMAT_ALIASES = {"md": "markdown"}


def format_metric(value: MetricValue) -> str:
    if isinstance(value, float):
        return f"{value:.2f}"
    return str(value)


def metric_columns(scores: List[ModelScore]) -> List[str]:
    """Metric names in first-seen order across a provider's scores."""
    columns: List[str] = []
    for score in scores:
        for name in score.metrics:
            if name not in columns:
                columns.append(name)
    return columns


def _score_rows(scores: List[ModelScore], columns: List[str]) -> List[List[str]]:
    rows = []
    for s in scores:
        row = [
            str(s.rank) if s.rank is not None else "-",
            s.model,
            s.source_model_name,
        ]
        row.extend(format_metric(s.metrics[c]) if c in s.metrics else "-" for c in columns)
        rows.append(row)
    return rows


def _status_line(result: ProviderResult) -> str:
    line = result.status.value
    if result.fetched_at is not None:
        line += f", fetched {result.fetched_at.isoformat()}"
    if result.status == SourceStatus.ERROR and result.error:
        line += f": {result.error}"
    return line


def _query_line(envelope: Envelope) -> str:
    params = envelope.query.to_dict()["parameters"]
    if not params:
        return envelope.query.kind
    rendered = ", ".join(f"{k}={v}" for k, v in params.items())
    return f"{envelope.query.kind} ({rendered})"


def render_json(envelope: Envelope) -> str:
    return json.dumps(envelope.to_dict(), indent=2, ensure_ascii=False)


def render_table(envelope: Envelope) -> str:
    """Fixed-width text, padded per column."""
    blocks = [f"Query: {_query_line(envelope)}  [{envelope.timestamp.isoformat()}]"]

    for result in envelope.sources:
        header = f"== {result.source} ({_status_line(result)})"
        if not envelope.include_scores:
            blocks.append(f"{header}  models: {len(result.scores)}")
            continue
        if not result.scores:
            blocks.append(f"{header}\n   (no scores)")
            continue

        columns = metric_columns(result.scores)
        table = [["#", "model", "source name"] + columns] + _score_rows(result.scores, columns)
        widths = [max(len(row[i]) for row in table) for i in range(len(table[0]))]
        lines = [header]
        for row in table:
            lines.append("   " + "  ".join(cell.ljust(widths[i]) for i, cell in enumerate(row)).rstrip())
        blocks.append("\n".join(lines))

    return "\n\n".join(blocks)


def render_markdown(envelope: Envelope) -> str:
    lines = [
        f"# pondus: {_query_line(envelope)}",
        "",
        f"*Generated: {envelope.timestamp.isoformat()}*",
    ]

    if not envelope.include_scores:
        lines.extend([
            "",
            "| Provider | Status | Fetched | Models |",
            "|----------|--------|---------|--------|",
        ])
        for r in envelope.sources:
            fetched = r.fetched_at.isoformat() if r.fetched_at else "-"
            status = r.status.value + (f" ({r.error})" if r.error else "")
            lines.append(f"| {r.source} | {status} | {fetched} | {len(r.scores)} |")
        return "\n".join(lines)

    for r in envelope.sources:
        lines.extend(["", f"## {r.source}", "", f"Status: {_status_line(r)}", ""])
        if not r.scores:
            lines.append("*No scores*")
            continue

        columns = metric_columns(r.scores)
        header = ["Rank", "Model", "Source Name"] + columns
        lines.append("| " + " | ".join(header) + " |")
        lines.append("|" + "|".join("-" * (len(h) + 2) for h in header) + "|")
        for row in _score_rows(r.scores, columns):
            cells = [cell.replace("|", "\\|") for cell in row]
            lines.append("| " + " | ".join(cells) + " |")

    return "\n".join(lines)


RENDERERS: Dict[str, Callable[[Envelope], str]] = {
    "json": render_json,
    "table": render_table,
    "markdown": render_markdown,
}


def render(envelope: Envelope, fmt: str = "json") -> str:
    """
    Render an envelope in the requested format.

    Raises:
        ValueError: If the format is unknown
    """
    name = FORMAT_ALIASES.get(fmt, fmt)
    if name not in RENDERERS:
        raise ValueError(f"Unknown output format: {fmt}. Expected one of: {', '.join(FORMATS)}")
    return RENDERERS[name](envelope)
