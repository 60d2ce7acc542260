"""
Canonical model name resolution.

Providers spell the same model differently ("Claude Opus 4.6",
"claude-opus-4-6-20260101", ...). The alias table maps every known spelling to
one canonical id. Table form (YAML):

    claude-opus-4-6:
      canonical: claude-opus-4.6
      aliases: ["Claude Opus 4.6", "claude-opus-4-6"]

Resolution order: exact match (canonical ids, then aliases), then the
hyphen-boundary prefix rule, then the lowercased input unresolved.
"""

import logging
import os
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

import jsonschema
import yaml

logger = logging.getLogger(__name__)

BUNDLED_ALIAS_PATH = Path(__file__).with_name("models.yaml")

ALIAS_TABLE_SCHEMA = {
    "type": "object",
    "additionalProperties": {
        "type": "object",
        "required": ["canonical"],
        "properties": {
            "canonical": {"type": "string", "minLength": 1},
            "aliases": {"type": "array", "items": {"type": "string"}},
        },
    },
}


class AliasTableError(Exception):
    """Raised when an alias table cannot be parsed or fails validation."""
    pass


class AliasRecord:
    """One canonical model and its known surface forms."""

    __slots__ = ("canonical", "aliases")

    def __init__(self, canonical: str, aliases: Iterable[str] = ()):
        self.canonical = canonical.strip().lower()
        self.aliases = tuple(a for a in aliases)

    def __repr__(self) -> str:
        return f"AliasRecord({self.canonical!r}, aliases={list(self.aliases)!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AliasRecord):
            return NotImplemented
        return self.canonical == other.canonical and self.aliases == other.aliases


class AliasTable:
    """Immutable alias table; build once, share read-only."""

    def __init__(self, records: Iterable[AliasRecord] = ()):
        self._records: Tuple[AliasRecord, ...] = tuple(records)

        exact: Dict[str, str] = {}
        # Canonical ids take precedence over alias strings
        for record in self._records:
            exact.setdefault(record.canonical, record.canonical)
        for record in self._records:
            for alias in record.aliases:
                exact.setdefault(alias.strip().lower(), record.canonical)

        self._exact: Mapping[str, str] = MappingProxyType(exact)
        self._canonicals: Tuple[str, ...] = tuple(dict.fromkeys(r.canonical for r in self._records))

    @property
    def records(self) -> Tuple[AliasRecord, ...]:
        return self._records

    @property
    def canonical_ids(self) -> Tuple[str, ...]:
        return self._canonicals

    def __len__(self) -> int:
        return len(self._records)

    def resolve(self, raw_name: str) -> Tuple[str, bool]:
        """
        Map a provider's model name to its canonical id.

        Args:
            raw_name: Model name as spelled by the provider or the user

        Returns:
            Tuple of (canonical_id, resolved). Unresolved names come back
            lowercased with resolved=False.
        """
        lower = raw_name.lower()

        canonical = self._exact.get(lower)
        if canonical is not None:
            return canonical, True

        # Two canonical ids that both prefix the same name with equal length are
        # the same string, so the longest prefix is always unique
        best: Optional[str] = None
        for candidate in self._canonicals:
            if lower != candidate and not lower.startswith(candidate + "-"):
                continue
            if best is None or len(candidate) > len(best):
                best = candidate

        if best is not None:
            return best, True

        return lower, False

    def canonical_for(self, raw_name: str) -> str:
        return self.resolve(raw_name)[0]

    def matches(self, raw_name: str, canonical: str) -> bool:
        """Check whether a provider-side name resolves to ``canonical``."""
        return self.canonical_for(raw_name) == canonical.strip().lower()


def parse_alias_table(data: Any) -> List[AliasRecord]:
    """
    Validate a decoded alias table and return its records in table order.

    Raises:
        AliasTableError: If the table does not match the expected structure
    """
    if data is None:
        return []
    try:
        jsonschema.validate(instance=data, schema=ALIAS_TABLE_SCHEMA)
    except jsonschema.ValidationError as e:
        raise AliasTableError(f"Invalid alias table: {e.message}") from e

    return [
        AliasRecord(entry["canonical"], entry.get("aliases", []))
        for entry in data.values()
    ]


def read_alias_file(path: Path) -> List[AliasRecord]:
    """
    Read and validate one alias table file.

    Raises:
        AliasTableError: If the file is unreadable, not YAML, or invalid
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise AliasTableError(f"Failed to read alias table {path}: {e}") from e
    return parse_alias_table(data)


def merge_alias_records(base: Iterable[AliasRecord], override: Iterable[AliasRecord]) -> List[AliasRecord]:
    """
    Merge two record lists keyed by canonical id.

    A record in ``override`` with the same canonical id replaces the one in
    ``base`` in place; other records are appended.
    """
    merged: Dict[str, AliasRecord] = {}
    for record in base:
        merged[record.canonical] = record
    for record in override:
        merged[record.canonical] = record
    return list(merged.values())


def default_override_path() -> Path:
    """$XDG_CONFIG_HOME/pondus/models.yaml, falling back to ~/.config."""
    base = os.environ.get("XDG_CONFIG_HOME", "").strip()
    root = Path(base) if base else Path.home() / ".config"
    return root / "pondus" / "models.yaml"


def load_alias_table(
    bundled_path: Optional[Path] = None,
    override_path: Optional[Path] = None,
) -> AliasTable:
    """
    Load the bundled alias table merged with an optional user override.

    A missing override file is not an error. If either table cannot be parsed
    the error is logged and an empty table is returned, so every name
    resolves to itself.

    Args:
        bundled_path: Bundled table (default: pondus/collect/models.yaml)
        override_path: User table (default: $XDG_CONFIG_HOME/pondus/models.yaml)

    Returns:
        AliasTable
    """
    bundled_path = Path(bundled_path) if bundled_path else BUNDLED_ALIAS_PATH
    override_path = Path(override_path) if override_path else default_override_path()

    try:
        records = read_alias_file(bundled_path)
        if override_path.exists():
            records = merge_alias_records(records, read_alias_file(override_path))
    except AliasTableError as e:
        logger.error(f"{e}; falling back to identity name mapping")
        return AliasTable()

    table = AliasTable(records)
    logger.debug(f"Loaded {len(table)} alias records")
    return table
