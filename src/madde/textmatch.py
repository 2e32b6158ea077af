"""Reusable text-matching primitives for keyword scoring.

Pure text operations with zero domain dependencies.
"""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class PhraseHit:
    """A keyword counted in a text. Domain-neutral primitive."""

    phrase: str
    char_offset: int  # first occurrence
    count: int


def count_occurrences(text_lower: str, phrase_lower: str) -> int:
    """Count substring occurrences, overlapping ones included.

    ``"aaa"`` contains ``"aa"`` twice. An empty phrase counts as zero.
    """
    if not phrase_lower:
        return 0
    count = 0
    pos = text_lower.find(phrase_lower)
    while pos >= 0:
        count += 1
        pos = text_lower.find(phrase_lower, pos + 1)
    return count


def keyword_hits(
    text_lower: str,
    keywords: list[str] | tuple[str, ...],
) -> tuple[int, list[PhraseHit]]:
    """Sum the occurrence counts of every keyword in text.

    Args:
        text_lower: Pre-lowercased text to search.
        keywords: Keywords to look for (lower-cased here).

    Returns:
        (total, hits) where total is the summed count over all keywords
        and hits has one PhraseHit per keyword found at least once.
    """
    total = 0
    hits: list[PhraseHit] = []
    for kw in keywords:
        kw_lower = kw.lower()
        n = count_occurrences(text_lower, kw_lower)
        if n:
            total += n
            hits.append(PhraseHit(kw, text_lower.find(kw_lower), n))
    return total, hits
