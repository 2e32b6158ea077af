"""Tests for madde.textmatch module."""
from madde.textmatch import PhraseHit, count_occurrences, keyword_hits


class TestCountOccurrences:
    def test_simple(self) -> None:
        assert count_occurrences("nikah və nikah", "nikah") == 2

    def test_overlapping(self) -> None:
        assert count_occurrences("aaa", "aa") == 2

    def test_absent(self) -> None:
        assert count_occurrences("ailə", "cinayət") == 0

    def test_empty_phrase(self) -> None:
        assert count_occurrences("abc", "") == 0


class TestKeywordHits:
    def test_total_and_hits(self) -> None:
        total, hits = keyword_hits("nikah, boşanma, nikah", ["nikah", "boşanma", "aliment"])
        assert total == 3
        assert hits == [PhraseHit("nikah", 0, 2), PhraseHit("boşanma", 7, 1)]

    def test_keywords_lowercased(self) -> None:
        total, hits = keyword_hits("işçi və işəgötürən", ["IŞÇI"])
        assert total == 1
        assert hits[0].count == 1

    def test_no_keywords(self) -> None:
        assert keyword_hits("anything", []) == (0, [])
