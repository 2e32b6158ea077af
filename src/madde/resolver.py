"""Resolve ``Maddə`` citations in generated text into e-qanun.az links.

For each citation span, in order:
    1. article index (article number -> document from retrieval metadata)
    2. fallback documents: every document id the retrieval context names,
       or, when it names none, the keyword classifier's ranking of the
       input text
    3. otherwise the span is left as written

The first document with a registered URL wins. Spans are resolved
independently and rewritten in a single left-to-right pass; all other text is
copied verbatim. Text already inside a markdown link is never re-linked, so
running the linker on its own output changes nothing.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Literal

from madde.article_index import ArticleDocumentIndex, build_article_index
from madde.citation_parser import CitationSpan, iter_citations
from madde.classifier import DEFAULT_KEYWORD_TABLE, KeywordTable, classify_documents
from madde.link_generator import generate_link
from madde.registry import DEFAULT_REGISTRY, DocumentRegistry
from madde.retrieval import RetrievalContext, context_document_ids, unwrap_context

log = logging.getLogger(__name__)

ResolutionPath = Literal["index", "fallback", "classifier", "unresolved"]


@dataclass(frozen=True, slots=True)
class ResolvedCitation:
    """How one citation span was resolved."""

    span: CitationSpan
    path: ResolutionPath
    document_id: str | None = None
    url: str | None = None

    @property
    def linked(self) -> bool:
        return self.url is not None

    def to_dict(self) -> dict[str, Any]:
        return {
            "text": self.span.raw_text,
            "start": self.span.start,
            "end": self.span.end,
            "article_number": self.span.article_number,
            "path": self.path,
            "document_id": self.document_id,
            "url": self.url,
        }


@dataclass(frozen=True, slots=True)
class CitationResolution:
    """Rewritten text plus per-span diagnostics."""

    text: str
    citations: tuple[ResolvedCitation, ...]

    @property
    def linked_count(self) -> int:
        return sum(1 for c in self.citations if c.linked)


def markdown_link(label: str, url: str) -> str:
    return f"[{label}]({url})"


def _first_link(
    article_number: str,
    documents: list[str],
    registry: DocumentRegistry,
) -> tuple[str, str] | None:
    for document_id in documents:
        url = generate_link(article_number, document_id, registry)
        if url is not None:
            return document_id, url
    return None


def resolve_span(
    span: CitationSpan,
    index: ArticleDocumentIndex,
    fallback_documents: list[str],
    *,
    fallback_path: ResolutionPath = "fallback",
    registry: DocumentRegistry = DEFAULT_REGISTRY,
) -> ResolvedCitation:
    """Resolve one span against the index, then the fallback documents."""
    indexed = index.get(span.article_number)
    if indexed is not None:
        url = generate_link(span.article_number, indexed, registry)
        if url is not None:
            return ResolvedCitation(span, "index", indexed, url)
    found = _first_link(span.article_number, fallback_documents, registry)
    if found is not None:
        return ResolvedCitation(span, fallback_path, found[0], found[1])
    return ResolvedCitation(span, "unresolved")


def resolve_citations(
    text: str,
    context: RetrievalContext = None,
    *,
    registry: DocumentRegistry = DEFAULT_REGISTRY,
    keyword_table: KeywordTable = DEFAULT_KEYWORD_TABLE,
) -> CitationResolution:
    """Rewrite every resolvable citation in text as a markdown link.

    Args:
        text: Generated answer text.
        context: Retrieval context: chunk list, retrieval response mapping,
            serialized context string, or None. Other shapes count as None.
        registry: Document id -> base URL table.
        keyword_table: Classifier keywords, consulted only when the context
            names no document.

    Returns:
        CitationResolution with the rewritten text and one entry per span.
    """
    unwrapped = unwrap_context(context)
    index = build_article_index(unwrapped)
    fallback_documents = context_document_ids(unwrapped)
    fallback_path: ResolutionPath = "fallback"

    parts: list[str] = []
    citations: list[ResolvedCitation] = []
    cursor = 0
    for span in iter_citations(text):
        if not citations and not fallback_documents:
            # Classify lazily: texts without citations never pay for it.
            fallback_documents = classify_documents(text, keyword_table)
            fallback_path = "classifier"
        resolved = resolve_span(
            span, index, fallback_documents,
            fallback_path=fallback_path, registry=registry,
        )
        log.debug(
            "%r -> %s (%s)", span.raw_text, resolved.document_id, resolved.path,
        )
        citations.append(resolved)
        parts.append(text[cursor:span.start])
        if resolved.url is not None:
            parts.append(markdown_link(span.raw_text, resolved.url))
        else:
            parts.append(span.raw_text)
        cursor = span.end

    if not citations:
        return CitationResolution(text, ())
    parts.append(text[cursor:])
    return CitationResolution("".join(parts), tuple(citations))


def link_citations(
    text: str,
    context: RetrievalContext = None,
    *,
    registry: DocumentRegistry = DEFAULT_REGISTRY,
    keyword_table: KeywordTable = DEFAULT_KEYWORD_TABLE,
) -> str:
    """Return text with resolvable citations rewritten as markdown links."""
    return resolve_citations(
        text, context, registry=registry, keyword_table=keyword_table,
    ).text
