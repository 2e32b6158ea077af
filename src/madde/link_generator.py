"""Deep links into e-qanun.az with a text-fragment anchor.

``generate_link("7-1", doc)`` produces
``<base>#:~:text=Madd%C9%99%207%2D1``: the search string is encoded the way
browsers' ``encodeURIComponent`` does it, and hyphens are escaped on top of
that because e-qanun.az's fragment search does not match a bare ``-``.
"""
from __future__ import annotations

import logging
from urllib.parse import quote

from madde.citation_parser import MARKER
from madde.registry import DEFAULT_REGISTRY, DocumentRegistry

log = logging.getLogger(__name__)

# encodeURIComponent leaves these unescaped in addition to [A-Za-z0-9_.-~].
_COMPONENT_SAFE = "!*'()"


def encode_fragment_text(search_text: str) -> str:
    """Percent-encode a text-fragment search value, hyphens included."""
    return quote(search_text, safe=_COMPONENT_SAFE).replace("-", "%2D")


def generate_link(
    article_number: str | int,
    document_id: str,
    registry: DocumentRegistry = DEFAULT_REGISTRY,
) -> str | None:
    """Return the deep link for an article of a document, or None.

    None means the document has no registered base URL.
    """
    base_url = registry.base_url(document_id)
    if base_url is None:
        log.debug("No URL mapping for document %r", document_id)
        return None
    encoded = encode_fragment_text(f"{MARKER} {article_number}")
    return f"{base_url}#:~:text={encoded}"
