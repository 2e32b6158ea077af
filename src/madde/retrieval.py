"""Retrieval context shapes consumed by the citation linker.

The retrieval backend hands back ranked chunks; the chat layer passes them on
either as structured records or as the serialized markdown block that was
injected into the model prompt. This module normalizes both:

- structured: ``RetrievalChunk`` or ``{"content": ..., "metadata": {...}}``
  (metadata key variants ``document_filename``/``display_source_name`` used
  by the backend are honoured)
- serialized: ``## Mənbə <n> (<name>)`` sections, each carrying a
  ``<!-- document_filename: <id> -->`` marker

No I/O; every function is pure.
"""
from __future__ import annotations

import logging
import re
from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Union

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RetrievalChunk:
    """One ranked chunk returned by the retrieval service."""

    content: str
    document_id: str | None = None
    article_header: str | None = None
    display_name: str | None = None


@dataclass(frozen=True, slots=True)
class ContextSection:
    """One ``## Mənbə`` section of a serialized retrieval context."""

    index: int                  # the <n> of the heading
    display_name: str
    document_id: str | None     # from the marker comment, if present
    body: str                   # section text after the heading line


# chunk list, retrieval response, serialized text, or nothing
RetrievalContext = Union[Sequence[Any], Mapping[str, Any], str, None]

_DOCUMENT_ID_KEYS = ("document_id", "document_filename")
_HEADER_KEYS = ("article_header",)
_DISPLAY_KEYS = ("display_name", "display_source_name", "document_title")

CONTEXT_TITLE = "# Əlaqəli Sənədlər"
CONTEXT_FOOTER = "Yuxarıdakı sənədlərə əsaslanaraq sualı cavablandırın:"

_SECTION_HEADING_RE: re.Pattern[str] = re.compile(
    r"^## Mənbə (\d+) \((.+)\)[^\S\n]*$",
    re.MULTILINE,
)

_DOCUMENT_MARKER_RE: re.Pattern[str] = re.compile(
    r"<!--\s*(?:document_filename|document_id)\s*:\s*(.*?)\s*-->"
)


# ---------------------------------------------------------------------------
# Structured chunks
# ---------------------------------------------------------------------------


def _first_text(metadata: Mapping[str, Any], keys: tuple[str, ...]) -> str | None:
    for key in keys:
        value = metadata.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def coerce_chunk(record: Any) -> RetrievalChunk | None:
    """Normalize one chunk record, or return None if it is not a chunk."""
    if isinstance(record, RetrievalChunk):
        return record
    if not isinstance(record, Mapping):
        return None
    metadata = record.get("metadata")
    if not isinstance(metadata, Mapping):
        metadata = {}
    content = record.get("content")
    return RetrievalChunk(
        content=content if isinstance(content, str) else "",
        document_id=_first_text(metadata, _DOCUMENT_ID_KEYS),
        article_header=_first_text(metadata, _HEADER_KEYS),
        display_name=_first_text(metadata, _DISPLAY_KEYS),
    )


def coerce_chunks(records: Sequence[Any]) -> list[RetrievalChunk]:
    """Normalize a chunk list, dropping entries that are not chunks."""
    chunks: list[RetrievalChunk] = []
    for record in records:
        chunk = coerce_chunk(record)
        if chunk is None:
            log.debug("Skipping non-chunk retrieval record of type %s", type(record).__name__)
            continue
        chunks.append(chunk)
    return chunks


def unwrap_context(context: Any) -> list[RetrievalChunk] | str | None:
    """Reduce any accepted context shape to a chunk list, a string or None.

    A retrieval response mapping (``{"query": ..., "chunks": [...]}``) is
    unwrapped to its chunks. Any other shape is treated as no context.
    """
    if context is None:
        return None
    if isinstance(context, str):
        return context
    if isinstance(context, Mapping):
        chunks = context.get("chunks")
        if isinstance(chunks, (list, tuple)):
            return coerce_chunks(chunks)
    elif isinstance(context, (list, tuple)):
        return coerce_chunks(context)
    log.warning(
        "Ignoring retrieval context of unsupported type %s", type(context).__name__,
    )
    return None


def source_display_names(chunks: Sequence[Any], limit: int = 3) -> list[str]:
    """Unique source names in first-seen order, capped at ``limit``."""
    names: list[str] = []
    for chunk in coerce_chunks(chunks):
        name = chunk.display_name or chunk.document_id
        if name and name not in names:
            names.append(name)
            if len(names) >= limit:
                break
    return names


# ---------------------------------------------------------------------------
# Serialized form
# ---------------------------------------------------------------------------


def format_retrieved_context(chunks: Sequence[Any]) -> str:
    """Serialize chunks into the prompt-context block.

    Returns an empty string when there are no chunks.
    """
    normalized = coerce_chunks(chunks)
    if not normalized:
        return ""
    sections = [
        f"## Mənbə {i} ({chunk.display_name or chunk.document_id or ''})\n"
        f"<!-- document_filename: {chunk.document_id or ''} -->\n"
        f"{chunk.content}\n"
        "---"
        for i, chunk in enumerate(normalized, start=1)
    ]
    return f"{CONTEXT_TITLE}\n\n" + "\n\n".join(sections) + f"\n\n{CONTEXT_FOOTER}"


def iter_context_sections(serialized: str) -> Iterator[ContextSection]:
    """Yield each ``## Mənbə`` section of a serialized context in order."""
    headings = list(_SECTION_HEADING_RE.finditer(serialized))
    for pos, heading in enumerate(headings):
        body_end = headings[pos + 1].start() if pos + 1 < len(headings) else len(serialized)
        body = serialized[heading.end():body_end]
        marker = _DOCUMENT_MARKER_RE.search(body)
        document_id = marker.group(1) if marker and marker.group(1) else None
        if marker is not None:
            # Only text after the marker belongs to the document.
            body = body[marker.end():]
        yield ContextSection(
            index=int(heading.group(1)),
            display_name=heading.group(2).strip(),
            document_id=document_id,
            body=body,
        )


def extract_source_documents(serialized: str) -> list[str]:
    """Display names of every section heading, in order."""
    return [section.display_name for section in iter_context_sections(serialized)]


# ---------------------------------------------------------------------------
# Fallback document list
# ---------------------------------------------------------------------------


def context_document_ids(context: Any) -> list[str]:
    """Document ids named anywhere in the context, de-duplicated in order.

    Serialized sections without a marker contribute their heading name.
    """
    unwrapped = unwrap_context(context)
    ids: list[str] = []
    if isinstance(unwrapped, str):
        for section in iter_context_sections(unwrapped):
            doc = section.document_id or section.display_name
            if doc and doc not in ids:
                ids.append(doc)
    elif unwrapped:
        for chunk in unwrapped:
            if chunk.document_id and chunk.document_id not in ids:
                ids.append(chunk.document_id)
    return ids
