"""Tests for madde.classifier: keyword-count fallback classifier."""
from __future__ import annotations

from pathlib import Path

import pytest

from madde.classifier import (
    DEFAULT_KEYWORD_TABLE,
    ClassificationScore,
    classify_documents,
    load_keyword_table,
    score_documents,
)
from madde.io_utils import save_json

# ── score_documents ──────────────────────────────────────────────────


class TestScoreDocuments:
    def test_sums_keyword_counts(self) -> None:
        table = {"family": ("nikah", "boşanma"), "labour": ("işçi",)}
        scores = score_documents("Nikah və boşanma. Nikah pozulur.", table)
        assert [(s.document_id, s.score) for s in scores] == [("family", 3)]

    def test_overlapping_occurrences(self) -> None:
        scores = score_documents("aaa", {"doc": ("aa",)})
        assert scores[0].score == 2

    def test_hits_recorded(self) -> None:
        scores = score_documents("aliment aliment", {"doc": ("aliment", "nikah")})
        hits = scores[0].hits
        assert len(hits) == 1
        assert hits[0].phrase == "aliment"
        assert hits[0].count == 2

    def test_zero_scores_dropped(self) -> None:
        assert score_documents("heç nə", {"doc": ("zzz",)}) == []

    def test_frozen(self) -> None:
        score = ClassificationScore("doc", 1)
        with pytest.raises(AttributeError):
            score.score = 2  # type: ignore[misc]


# ── classify_documents ───────────────────────────────────────────────


class TestClassifyDocuments:
    def test_descending_score(self) -> None:
        table = {"a": ("x",), "b": ("y",)}
        assert classify_documents("y y x", table) == ["b", "a"]

    def test_ties_keep_table_order(self) -> None:
        assert classify_documents("x y", {"b": ("x",), "a": ("y",)}) == ["b", "a"]
        assert classify_documents("x y", {"a": ("y",), "b": ("x",)}) == ["a", "b"]

    def test_case_insensitive(self) -> None:
        assert classify_documents("NIKAH", {"doc": ("nikah",)}) == ["doc"]

    def test_empty_table(self) -> None:
        assert classify_documents("nikah", {}) == []

    def test_default_table_family_text(self) -> None:
        text = "Nikah pozulduqda aliment ödənilir."
        assert classify_documents(text)[0] == "cleaned_document-ailə.md"

    def test_default_table_labour_text(self) -> None:
        text = "İşəgötürən işçi ilə əmək müqaviləsi bağlayır, məzuniyyət verir."
        assert classify_documents(text)[0] == "cleaned_document-əmək.md"

    def test_sentence_initial_dotted_capital(self) -> None:
        text = "İşəgötürən məhkəməyə müraciət etdi. İşçi cəza almadı."
        scores = score_documents(text)
        assert scores[0].document_id == "cleaned_document-əmək.md"
        assert scores[0].score == 2

    def test_default_table_is_read_only(self) -> None:
        with pytest.raises(TypeError):
            DEFAULT_KEYWORD_TABLE["x"] = ("y",)  # type: ignore[index]


# ── load_keyword_table ───────────────────────────────────────────────


class TestLoadKeywordTable:
    def test_loads_in_key_order(self, tmp_path: Path) -> None:
        path = tmp_path / "keywords.json"
        path.write_text('{"b": ["Nikah"], "a": ["cinayət", " "]}', encoding="utf-8")
        table = load_keyword_table(path)
        assert list(table) == ["b", "a"]
        assert table["b"] == ("nikah",)
        assert table["a"] == ("cinayət",)

    def test_dotted_capital_keywords_match(self, tmp_path: Path) -> None:
        path = tmp_path / "keywords.json"
        save_json({"labour": ["İşçi"]}, path)
        table = load_keyword_table(path)
        assert table["labour"] == ("işçi",)
        assert classify_documents("İşçi və işçi", table) == ["labour"]

    def test_rejects_non_object(self, tmp_path: Path) -> None:
        path = tmp_path / "keywords.json"
        save_json(["nikah"], path)
        with pytest.raises(ValueError, match="JSON object"):
            load_keyword_table(path)

    def test_rejects_bad_keywords(self, tmp_path: Path) -> None:
        path = tmp_path / "keywords.json"
        save_json({"doc": "nikah"}, path)
        with pytest.raises(ValueError, match="'doc'"):
            load_keyword_table(path)
