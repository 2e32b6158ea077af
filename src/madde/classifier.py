"""Keyword-count document classifier: the resolution path of last resort.

When the retrieval context names no document at all, the linker still needs
a guess at which code the answer is citing. This module scores the answer
text against per-document keyword lists:

    score(doc) = sum over keywords of occurrence_count(keyword, text.lower())

Occurrences are substring counts, overlapping ones included. Documents are
ranked by score descending with ties kept in table order; zero scores are
dropped.

This is a best-effort heuristic, not a correctness mechanism. It only feeds
the same "candidate document ids" seam the retrieval-derived list uses, so it
can be replaced without touching the parser or link generator.

No file I/O in the scoring path; ``load_keyword_table`` is the only loader.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType

from madde.io_utils import load_json
from madde.textmatch import PhraseHit, keyword_hits


@dataclass(frozen=True, slots=True)
class ClassificationScore:
    """Keyword score of one document for one text."""

    document_id: str
    score: int
    hits: tuple[PhraseHit, ...] = ()


KeywordTable = Mapping[str, tuple[str, ...]]

# ── Default keyword table ─────────────────────────────────────────────
# Declaration order is the tie-break order. Keywords are lower case and
# undotted: the text's combining dot above (from İ.lower()) is stripped.

DEFAULT_KEYWORD_TABLE: KeywordTable = MappingProxyType({
    # Ailə Məcəlləsi (Family Code)
    "cleaned_document-ailə.md": (
        "nikah", "ər-arvad", "ailə", "boşanma", "aliment", "övlad",
        "valideyn", "uşaq", "qəyyum", "himayə", "atalığın",
    ),
    # Əmək Məcəlləsi (Labour Code)
    "cleaned_document-əmək.md": (
        "əmək müqaviləsi", "işçi", "işəgötürən", "əmək haqqı",
        "məzuniyyət", "iş vaxtı", "işdən azad", "əmək funksiyası",
    ),
    # Mülki Məcəllə (Civil Code)
    "cleaned_document-mülki.md": (
        "mülkiyyət", "öhdəlik", "borclu", "kreditor", "vərəsəlik",
        "əqd", "icarə", "alğı-satqı", "girov",
    ),
    # Cinayət Məcəlləsi (Criminal Code)
    "cleaned_document-cinayət.md": (
        "cinayət", "cəza", "azadlıqdan məhrum", "təqsirləndirilən",
        "məhkum", "cinayət məsuliyyəti",
    ),
})


def score_documents(
    text: str,
    keyword_table: KeywordTable = DEFAULT_KEYWORD_TABLE,
) -> list[ClassificationScore]:
    """Score text against every document, best first, zero scores dropped."""
    # "İ".lower() is "i" + U+0307; drop the mark so "İşçi" matches "işçi".
    text_lower = text.lower().replace("\u0307", "")
    scores: list[ClassificationScore] = []
    for document_id, keywords in keyword_table.items():
        total, hits = keyword_hits(text_lower, keywords)
        if total > 0:
            scores.append(ClassificationScore(document_id, total, tuple(hits)))
    # sorted() is stable, so equal scores keep table order.
    return sorted(scores, key=lambda s: -s.score)


def classify_documents(
    text: str,
    keyword_table: KeywordTable = DEFAULT_KEYWORD_TABLE,
) -> list[str]:
    """Return document ids ordered by keyword relevance to text."""
    return [s.document_id for s in score_documents(text, keyword_table)]


def load_keyword_table(path: Path) -> KeywordTable:
    """Load ``{document_id: [keyword, ...]}`` from JSON, keeping key order."""
    payload = load_json(path)
    if not isinstance(payload, dict):
        raise ValueError(f"Keyword table must be a JSON object: {path}")
    table: dict[str, tuple[str, ...]] = {}
    for document_id, keywords in payload.items():
        if not isinstance(keywords, list) or not all(isinstance(k, str) for k in keywords):
            raise ValueError(
                f"Keywords for {document_id!r} must be a list of strings in {path}"
            )
        table[document_id] = tuple(
            k.lower().replace("\u0307", "") for k in keywords if k.strip()
        )
    return MappingProxyType(table)
