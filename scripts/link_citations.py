#!/usr/bin/env python3
"""Rewrite Maddə citations in an assistant answer as e-qanun.az links.

Reads the answer text (file or stdin) and, optionally, the retrieval context
the answer was generated from, then prints the linked markdown.

Context files:
    *.json   list of chunks, or a retrieval response {"query", "chunks"}
    *.jsonl  one chunk per line
    other    serialized prompt context (## Mənbə sections)

Usage:
    python3 scripts/link_citations.py --text answer.md --context chunks.json
    python3 scripts/link_citations.py --text answer.md --context context.md --report
    cat answer.md | python3 scripts/link_citations.py --registry registry.json

Linked text (or, with --report, a JSON report) goes to stdout; log messages
go to stderr.
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any

from madde.classifier import DEFAULT_KEYWORD_TABLE, load_keyword_table
from madde.io_utils import dump_json_stdout, load_json, load_jsonl
from madde.registry import DEFAULT_REGISTRY, load_registry
from madde.resolver import CitationResolution, resolve_citations
from madde.retrieval import source_display_names, unwrap_context

log = logging.getLogger("link_citations")


def load_context(path: Path) -> Any:
    """Load a retrieval context file according to its extension."""
    suffix = path.suffix.lower()
    if suffix == ".json":
        return load_json(path)
    if suffix == ".jsonl":
        return load_jsonl(path)
    return path.read_text(encoding="utf-8")


def build_report(resolution: CitationResolution, context: Any) -> dict[str, Any]:
    unwrapped = unwrap_context(context)
    sources = source_display_names(unwrapped) if isinstance(unwrapped, list) else []
    return {
        "citation_count": len(resolution.citations),
        "linked_count": resolution.linked_count,
        "sources": sources,
        "citations": [c.to_dict() for c in resolution.citations],
        "text": resolution.text,
    }


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Rewrite Maddə citations as e-qanun.az deep links."
    )
    parser.add_argument(
        "--text", type=Path, default=None,
        help="Answer text file (default: read stdin)",
    )
    parser.add_argument(
        "--context", type=Path, default=None,
        help="Retrieval context (.json, .jsonl, or serialized text)",
    )
    parser.add_argument(
        "--registry", type=Path, default=None,
        help="JSON {document_id: base_url} merged over the built-in registry",
    )
    parser.add_argument(
        "--keywords", type=Path, default=None,
        help="JSON {document_id: [keyword, ...]} replacing the built-in table",
    )
    parser.add_argument(
        "--output", type=Path, default=None,
        help="Write linked text here instead of stdout",
    )
    parser.add_argument(
        "--report", action="store_true",
        help="Print a JSON resolution report instead of the text",
    )
    parser.add_argument("--verbose", action="store_true", help="Debug logging")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )

    try:
        text = (
            args.text.read_text(encoding="utf-8")
            if args.text is not None
            else sys.stdin.read()
        )
        context = load_context(args.context) if args.context is not None else None
        registry = DEFAULT_REGISTRY
        if args.registry is not None:
            registry = registry.merged(load_registry(args.registry))
        keyword_table = (
            load_keyword_table(args.keywords)
            if args.keywords is not None
            else DEFAULT_KEYWORD_TABLE
        )
    except (OSError, ValueError) as exc:
        log.error("%s", exc)
        return 1

    resolution = resolve_citations(
        text, context, registry=registry, keyword_table=keyword_table,
    )
    log.info(
        "Linked %d of %d citations",
        resolution.linked_count, len(resolution.citations),
    )

    if args.report:
        dump_json_stdout(build_report(resolution, context))
    elif args.output is not None:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_text(resolution.text, encoding="utf-8")
        log.info("Wrote %s", args.output)
    else:
        sys.stdout.write(resolution.text)
        sys.stdout.flush()
    return 0


if __name__ == "__main__":
    sys.exit(main())
