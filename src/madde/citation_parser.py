"""Citation parser for Azerbaijani legal-article references in generated text.

Finds ``Maddə`` citations in the forms the assistant is prompted to emit:

    Maddə 57
    Maddə 57, bənd 1
    Maddə 9, bənd "ə"
    Maddə 12, bənd 1, "a", "b"
    Maddə 162-1.1, Qeyd 2
    Maddə 7-1

A span runs from the marker word through the last well-formed qualifier.
Only the first numeric group (the article number) is used for resolution;
the qualifiers stay part of the span text so the whole citation becomes the
link label.

Occurrences inside an existing markdown link are skipped by default, which
makes re-linking already linked text a no-op.
"""
from __future__ import annotations

import re
from bisect import bisect_right
from collections.abc import Iterator
from dataclasses import dataclass


# ---------------------------------------------------------------------------
# Data types
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class CitationSpan:
    """One citation occurrence in a text."""

    start: int              # char offset of the marker word
    end: int                # exclusive
    raw_text: str           # 'Maddə 12, bənd 1, "a", "b"'
    article_number: str     # "12"
    clauses: tuple[str, ...] = ()   # bənd values, quotes stripped
    notes: tuple[str, ...] = ()     # Qeyd numbers
    letters: tuple[str, ...] = ()   # trailing quoted letters, quotes stripped


# ---------------------------------------------------------------------------
# Grammar
# ---------------------------------------------------------------------------

MARKER = "Maddə"

# 57, 7-1, 162-1.1, 15.2.3
_ARTICLE_NUM = r"\d+(?:-\d+)?(?:\.\d+)*"

# A single short token between matching quotes: "a", “b”, 'c', «ç»
_QUOTED = (
    r'(?:"[^"\s,]{1,10}"'
    r"|“[^”\s,]{1,10}”"
    r"|'[^'\s,]{1,10}'"
    r"|«[^»\s,]{1,10}»)"
)

# Qualifier separators stay on one line.
_SEP = r",[^\S\n]*"

_QUALIFIER = rf"(?:bənd[^\S\n]+(?:{_ARTICLE_NUM}|{_QUOTED})|Qeyd[^\S\n]+\d+)"

# Qualifier groups are optional and repeat only over complete items, so a
# malformed tail falls back to the longest well-formed prefix (at minimum the
# marker plus article number) instead of failing the match.
CITATION_RE: re.Pattern[str] = re.compile(
    rf"(?<!\w){MARKER}[^\S\n]+(?P<article>{_ARTICLE_NUM})"
    rf"(?P<qualifiers>(?:{_SEP}{_QUALIFIER})*)"
    rf"(?P<letters>(?:{_SEP}{_QUOTED})*)"
)

_ANCHOR_RE: re.Pattern[str] = re.compile(
    rf"(?<!\w){MARKER}[^\S\n]+({_ARTICLE_NUM})"
)

_QUALIFIER_PART_RE: re.Pattern[str] = re.compile(
    rf"bənd[^\S\n]+(?P<clause>{_ARTICLE_NUM}|{_QUOTED})|Qeyd[^\S\n]+(?P<note>\d+)"
)

_QUOTED_RE: re.Pattern[str] = re.compile(_QUOTED)

# [label](url) -- labels may span lines; urls contain no whitespace.
_MARKDOWN_LINK_RE: re.Pattern[str] = re.compile(r"\[[^\]]*\]\([^)\s]*\)")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _unquote(token: str) -> str:
    if token and token[0] in "\"'“«":
        return token[1:-1]
    return token


def _build_span(m: re.Match[str]) -> CitationSpan:
    clauses: list[str] = []
    notes: list[str] = []
    for part in _QUALIFIER_PART_RE.finditer(m.group("qualifiers")):
        if part.group("clause") is not None:
            clauses.append(_unquote(part.group("clause")))
        else:
            notes.append(part.group("note"))
    letters = tuple(_unquote(q.group(0)) for q in _QUOTED_RE.finditer(m.group("letters")))
    return CitationSpan(
        start=m.start(),
        end=m.end(),
        raw_text=m.group(0),
        article_number=m.group("article"),
        clauses=tuple(clauses),
        notes=tuple(notes),
        letters=letters,
    )


def markdown_link_ranges(text: str) -> list[tuple[int, int]]:
    """Return (start, end) offsets of every markdown link in text."""
    return [(m.start(), m.end()) for m in _MARKDOWN_LINK_RE.finditer(text)]


def _inside_ranges(
    start: int, end: int, starts: list[int], ranges: list[tuple[int, int]],
) -> bool:
    """True if [start, end) overlaps any of the sorted, disjoint ranges."""
    idx = bisect_right(starts, start) - 1
    if idx >= 0 and ranges[idx][1] > start:
        return True
    nxt = idx + 1
    return nxt < len(ranges) and ranges[nxt][0] < end


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def iter_citations(text: str, *, skip_links: bool = True) -> Iterator[CitationSpan]:
    """Yield citation spans left to right, never overlapping.

    Args:
        text: Text to scan.
        skip_links: Skip occurrences that overlap an existing markdown link.

    Yields:
        CitationSpan for each citation, ordered by start offset.
    """
    ranges = markdown_link_ranges(text) if skip_links else []
    starts = [r[0] for r in ranges]
    for m in CITATION_RE.finditer(text):
        if ranges and _inside_ranges(m.start(), m.end(), starts, ranges):
            continue
        yield _build_span(m)


def parse_citations(text: str, *, skip_links: bool = True) -> list[CitationSpan]:
    """Eager form of :func:`iter_citations`."""
    return list(iter_citations(text, skip_links=skip_links))


def parse_article_number(text: str | None) -> str | None:
    """Return the article number of the first citation anchor in text.

    Used on retrieval headers such as ``"Maddə 57. Nikahın bağlanması"``.
    """
    if not text:
        return None
    m = _ANCHOR_RE.search(text)
    return m.group(1) if m else None


def iter_article_numbers(text: str) -> Iterator[str]:
    """Yield the article number of every citation anchor in text."""
    for m in _ANCHOR_RE.finditer(text):
        yield m.group(1)
