"""Document registry: document identifier -> e-qanun.az base URL.

The registry is the only place that knows which legal codes can be linked.
Documents missing from it never produce links; that is the common case for
sources outside the published corpus, not an error.
"""
from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType

from madde.io_utils import load_json


# Keys are the ``document_filename`` values the retrieval backend attaches
# to each chunk.
_DEFAULT_URLS: dict[str, str] = {
    # Ailə Məcəlləsi (Family Code)
    "cleaned_document-ailə.md": "https://e-qanun.az/framework/46946",
}


@dataclass(frozen=True, slots=True)
class DocumentRegistry:
    """Read-only mapping from document id to base URL."""

    urls: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # Copy so later changes to the caller's dict cannot leak in.
        object.__setattr__(self, "urls", MappingProxyType(dict(self.urls)))

    def base_url(self, document_id: str) -> str | None:
        """Return the base URL for a document, or None if unregistered."""
        return self.urls.get(document_id)

    def merged(self, other: DocumentRegistry | Mapping[str, str]) -> DocumentRegistry:
        """Return a new registry with ``other``'s entries layered on top."""
        extra = other.urls if isinstance(other, DocumentRegistry) else other
        return DocumentRegistry({**self.urls, **extra})

    def __contains__(self, document_id: object) -> bool:
        return document_id in self.urls

    def __iter__(self) -> Iterator[str]:
        return iter(self.urls)

    def __len__(self) -> int:
        return len(self.urls)


DEFAULT_REGISTRY = DocumentRegistry(_DEFAULT_URLS)


def load_registry(path: Path) -> DocumentRegistry:
    """Load a registry from a JSON object ``{document_id: base_url}``."""
    payload = load_json(path)
    if not isinstance(payload, dict):
        raise ValueError(f"Registry payload must be a JSON object: {path}")
    for document_id, url in payload.items():
        if not isinstance(url, str) or not url.startswith(("http://", "https://")):
            raise ValueError(
                f"Registry entry {document_id!r} must be an http(s) URL in {path}"
            )
    return DocumentRegistry(payload)
