"""Tests for scripts/link_citations.py."""
from __future__ import annotations

from pathlib import Path

import orjson
import pytest

from madde.io_utils import save_json
from scripts.link_citations import load_context, main

FAMILY = "cleaned_document-ailə.md"
FAMILY_LINK = "[Maddə 56](https://e-qanun.az/framework/46946#:~:text=Madd%C9%99%2056)"

CHUNKS = [
    {
        "content": "Nikah yaşı on səkkiz yaşdır.",
        "metadata": {
            "document_filename": FAMILY,
            "article_header": "Maddə 56. Nikah yaşı",
            "display_source_name": "Ailə Məcəlləsi",
        },
    },
]


@pytest.fixture()
def answer(tmp_path: Path) -> Path:
    path = tmp_path / "answer.md"
    path.write_text("Nikah yaşı 18-dir. Maddə 56", encoding="utf-8")
    return path


class TestLoadContext:
    def test_json(self, tmp_path: Path) -> None:
        path = tmp_path / "ctx.json"
        save_json({"query": "q", "chunks": CHUNKS}, path)
        assert load_context(path) == {"query": "q", "chunks": CHUNKS}

    def test_jsonl(self, tmp_path: Path) -> None:
        path = tmp_path / "ctx.jsonl"
        path.write_bytes(b"\n".join(orjson.dumps(c) for c in CHUNKS) + b"\n\n")
        assert load_context(path) == CHUNKS

    def test_serialized_text(self, tmp_path: Path) -> None:
        path = tmp_path / "ctx.md"
        path.write_text("## Mənbə 1 (Ailə)\n", encoding="utf-8")
        assert load_context(path) == "## Mənbə 1 (Ailə)\n"


class TestMain:
    def test_writes_output(self, tmp_path: Path, answer: Path) -> None:
        ctx = tmp_path / "ctx.json"
        save_json(CHUNKS, ctx)
        out = tmp_path / "out" / "linked.md"
        rc = main(["--text", str(answer), "--context", str(ctx), "--output", str(out)])
        assert rc == 0
        assert out.read_text(encoding="utf-8") == f"Nikah yaşı 18-dir. {FAMILY_LINK}"

    def test_report(
        self, tmp_path: Path, answer: Path, capsys: pytest.CaptureFixture[str],
    ) -> None:
        ctx = tmp_path / "ctx.json"
        save_json({"query": "q", "chunks": CHUNKS}, ctx)
        rc = main(["--text", str(answer), "--context", str(ctx), "--report"])
        assert rc == 0
        report = orjson.loads(capsys.readouterr().out)
        assert report["citation_count"] == 1
        assert report["linked_count"] == 1
        assert report["sources"] == ["Ailə Məcəlləsi"]
        assert report["citations"][0]["path"] == "index"
        assert report["text"].endswith(FAMILY_LINK)

    def test_registry_override(self, tmp_path: Path, answer: Path) -> None:
        registry = tmp_path / "registry.json"
        save_json({FAMILY: "https://mirror.example/ailə"}, registry)
        ctx = tmp_path / "ctx.json"
        save_json(CHUNKS, ctx)
        out = tmp_path / "linked.md"
        rc = main([
            "--text", str(answer), "--context", str(ctx),
            "--registry", str(registry), "--output", str(out),
        ])
        assert rc == 0
        assert "https://mirror.example/ailə#:~:text=" in out.read_text(encoding="utf-8")

    def test_keyword_override_without_context(self, tmp_path: Path) -> None:
        text = tmp_path / "answer.md"
        text.write_text("Boşanma qaydası. Maddə 5", encoding="utf-8")
        keywords = tmp_path / "keywords.json"
        save_json({FAMILY: ["qayda"]}, keywords)
        out = tmp_path / "linked.md"
        rc = main(["--text", str(text), "--keywords", str(keywords), "--output", str(out)])
        assert rc == 0
        assert out.read_text(encoding="utf-8").startswith("Boşanma qaydası. [Maddə 5](")

    def test_missing_text_file(self, tmp_path: Path) -> None:
        assert main(["--text", str(tmp_path / "absent.md")]) == 1

    def test_bad_registry(self, tmp_path: Path, answer: Path) -> None:
        registry = tmp_path / "registry.json"
        registry.write_text("[1, 2]", encoding="utf-8")
        assert main(["--text", str(answer), "--registry", str(registry)]) == 1

    def test_invalid_json_context(self, tmp_path: Path, answer: Path) -> None:
        ctx = tmp_path / "ctx.json"
        ctx.write_text("{not json", encoding="utf-8")
        assert main(["--text", str(answer), "--context", str(ctx)]) == 1
