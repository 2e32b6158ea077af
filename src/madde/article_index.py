"""Article -> document index built from the retrieval context.

Structured chunks contribute through their ``article_header``
(``"Maddə 57. Nikahın bağlanması"`` -> ``"57"``). Serialized contexts
contribute every citation that follows a section's document marker.

Later entries overwrite earlier ones; callers pass chunks in retrieval-rank
order so the result is deterministic.
"""
from __future__ import annotations

from madde.citation_parser import iter_article_numbers, parse_article_number
from madde.retrieval import (
    RetrievalChunk,
    RetrievalContext,
    iter_context_sections,
    unwrap_context,
)

ArticleDocumentIndex = dict[str, str]


def index_from_chunks(chunks: list[RetrievalChunk]) -> ArticleDocumentIndex:
    """Map article numbers from chunk headers to their document ids."""
    index: ArticleDocumentIndex = {}
    for chunk in chunks:
        if not chunk.document_id:
            continue
        article = parse_article_number(chunk.article_header)
        if article is not None:
            index[article] = chunk.document_id
    return index


def index_from_serialized(serialized: str) -> ArticleDocumentIndex:
    """Map every citation in a serialized context to its section's document."""
    index: ArticleDocumentIndex = {}
    for section in iter_context_sections(serialized):
        if section.document_id is None:
            continue
        for article in iter_article_numbers(section.body):
            index[article] = section.document_id
    return index


def build_article_index(context: RetrievalContext) -> ArticleDocumentIndex:
    """Build the article index from any accepted retrieval context shape.

    Returns an empty index for an absent or unsupported context.
    """
    unwrapped = unwrap_context(context)
    if isinstance(unwrapped, str):
        return index_from_serialized(unwrapped)
    if unwrapped:
        return index_from_chunks(unwrapped)
    return {}
