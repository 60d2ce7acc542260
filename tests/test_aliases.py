"""Tests for canonical model name resolution and alias table loading."""

import pytest

from pondus.collect.aliases import (
    BUNDLED_ALIAS_PATH,
    AliasRecord,
    AliasTable,
    AliasTableError,
    load_alias_table,
    merge_alias_records,
    parse_alias_table,
    read_alias_file,
)


class TestExactMatch:
    """Exact, case-insensitive lookup against canonical ids and aliases."""

    def test_alias_exact_match(self, aliases):
        assert aliases.resolve("Claude Opus 4.6") == ("claude-opus-4.6", True)

    def test_case_insensitive(self, aliases):
        assert aliases.resolve("CLAUDE OPUS 4.6") == ("claude-opus-4.6", True)
        assert aliases.resolve("gpt-5") == ("gpt-5", True)
        assert aliases.resolve("GPT-5") == ("gpt-5", True)

    def test_unresolved_name_keeps_whitespace(self, aliases):
        assert aliases.resolve("  Gemini 2.5 Pro ") == ("  gemini 2.5 pro ", False)

    def test_canonical_id_beats_alias(self):
        # "gpt-5" is registered as an alias of another model but is also a canonical id
        table = AliasTable([
            AliasRecord("gpt-5-chat", ["gpt-5"]),
            AliasRecord("gpt-5", []),
        ])
        assert table.resolve("gpt-5") == ("gpt-5", True)

    def test_first_alias_registration_wins(self):
        table = AliasTable([
            AliasRecord("model-a", ["shared"]),
            AliasRecord("model-b", ["shared"]),
        ])
        assert table.resolve("shared") == ("model-a", True)


class TestPrefixMatch:
    """Hyphen-boundary prefix fallback."""

    def test_dated_variant_resolves(self, aliases):
        assert aliases.resolve("gemini-2.5-pro-preview-06-05") == ("gemini-2.5-pro", True)

    def test_hyphen_boundary_required(self, aliases):
        assert aliases.resolve("gpt-50") == ("gpt-50", False)
        assert aliases.resolve("gpt-5o") == ("gpt-5o", False)

    def test_longest_canonical_wins(self, aliases):
        assert aliases.resolve("gpt-5-mini-2025-08-07") == ("gpt-5-mini", True)
        assert aliases.resolve("gpt-5-2025-08-07") == ("gpt-5", True)

    def test_nested_canonicals_pick_longest(self):
        table = AliasTable([
            AliasRecord("claude", []),
            AliasRecord("claude-opus", []),
            AliasRecord("claude-opus-4", []),
        ])
        assert table.resolve("claude-opus-4-20250514") == ("claude-opus-4", True)
        assert table.resolve("claude-opus-preview") == ("claude-opus", True)
        assert table.resolve("claude") == ("claude", True)

    def test_prefix_is_case_insensitive(self, aliases):
        assert aliases.resolve("Gemini-2.5-Pro-Exp") == ("gemini-2.5-pro", True)


class TestNonMatch:

    def test_unknown_name_returned_lowercased(self, aliases):
        assert aliases.resolve("totally-unknown-model") == ("totally-unknown-model", False)
        assert aliases.resolve("Some New Model") == ("some new model", False)

    def test_empty_table_is_identity(self):
        table = AliasTable()
        assert table.resolve("Claude Opus 4.6") == ("claude opus 4.6", False)
        assert len(table) == 0

    def test_matches_helper(self, aliases):
        assert aliases.matches("Claude Opus 4.6", "claude-opus-4.6")
        assert aliases.matches("claude-opus-4.6-thinking", "CLAUDE-OPUS-4.6")
        assert not aliases.matches("gpt-5", "gpt-5-mini")


class TestAliasTableParsing:

    def test_parse_valid_table(self):
        records = parse_alias_table({
            "opus": {"canonical": "Claude-Opus-4.6", "aliases": ["Claude Opus 4.6"]},
            "o3": {"canonical": "o3"},
        })
        assert records == [
            AliasRecord("claude-opus-4.6", ["Claude Opus 4.6"]),
            AliasRecord("o3", []),
        ]

    @pytest.mark.parametrize("data", [
        ["not", "a", "mapping"],
        {"opus": "claude-opus-4.6"},
        {"opus": {"aliases": ["x"]}},
        {"opus": {"canonical": ""}},
        {"opus": {"canonical": "x", "aliases": "not-a-list"}},
    ])
    def test_invalid_structure_rejected(self, data):
        with pytest.raises(AliasTableError):
            parse_alias_table(data)

    def test_empty_document_is_empty_table(self):
        assert parse_alias_table(None) == []

    def test_bundled_table_is_valid(self):
        table = AliasTable(read_alias_file(BUNDLED_ALIAS_PATH))
        assert len(table) > 0
        assert table.resolve("Claude Opus 4.6") == ("claude-opus-4.6", True)
        assert table.resolve("gemini-2.5-pro-preview-06-05") == ("gemini-2.5-pro", True)


class TestMergeAndLoad:

    def test_override_replaces_same_canonical(self):
        base = [AliasRecord("gpt-5", ["GPT-5"]), AliasRecord("o3", [])]
        override = [AliasRecord("gpt-5", ["gpt-5-chat-latest"]), AliasRecord("new-model", ["New"])]

        merged = merge_alias_records(base, override)

        assert [r.canonical for r in merged] == ["gpt-5", "o3", "new-model"]
        assert merged[0].aliases == ("gpt-5-chat-latest",)

    def test_load_with_override_file(self, tmp_path):
        override = tmp_path / "models.yaml"
        override.write_text(
            "mine:\n  canonical: my-local-model\n  aliases: [\"My Local Model\"]\n",
            encoding="utf-8",
        )

        table = load_alias_table(override_path=override)

        assert table.resolve("My Local Model") == ("my-local-model", True)
        assert table.resolve("Claude Opus 4.6") == ("claude-opus-4.6", True)

    def test_missing_override_is_not_error(self, tmp_path):
        table = load_alias_table(override_path=tmp_path / "absent.yaml")
        assert table.resolve("Claude Opus 4.6") == ("claude-opus-4.6", True)

    def test_invalid_override_falls_back_to_identity(self, tmp_path, caplog):
        override = tmp_path / "models.yaml"
        override.write_text("broken: [unclosed\n", encoding="utf-8")

        table = load_alias_table(override_path=override)

        assert len(table) == 0
        assert table.resolve("Claude Opus 4.6") == ("claude opus 4.6", False)
        assert "identity" in caplog.text

    def test_invalid_bundled_table_falls_back_to_identity(self, tmp_path):
        bundled = tmp_path / "bundled.yaml"
        bundled.write_text("opus:\n  aliases: [x]\n", encoding="utf-8")

        table = load_alias_table(bundled_path=bundled, override_path=tmp_path / "absent.yaml")

        assert len(table) == 0
