"""Tests for markdown documentation rendering."""

from __future__ import annotations

from pathlib import Path

import pytest

from devassist import run_analysis
from devassist.render import DOCUMENTS, DocumentationRenderer, write_docs


@pytest.fixture
def cyclic_result(repo_builder):
    repo_builder.write(
        {
            "README.md": "# Demo\n",
            "src/a.js": "import b from './b'\nexport default b\n",
            "src/b.js": "import a from './a'\nexport default a\n",
        }
    )
    return run_analysis(repo_builder.path())


def test_renders_every_builtin_document(cyclic_result) -> None:
    documents = DocumentationRenderer().render_all(cyclic_result)

    assert tuple(documents) == DOCUMENTS
    assert documents["analysis-report.md"].startswith("# Project Analysis Report: repo\n")
    assert "**Score**: " in documents["analysis-report.md"]
    assert documents["focus.md"].startswith("# Development Focus: repo\n")
    assert all(text.endswith("\n") and not text.endswith("\n\n") for text in documents.values())


def test_architecture_lists_cycles_and_hubs(cyclic_result) -> None:
    text = DocumentationRenderer().render("architecture.md", cyclic_result)

    assert "**Circular references**:" in text
    assert "- src/a.js -> src/b.js" in text
    assert "- `src/a.js` (1 dependents)" in text
    assert "- Internal references: 2" in text


def test_custom_template_directory_takes_precedence(cyclic_result, tmp_path: Path) -> None:
    templates = tmp_path / "templates"
    templates.mkdir()
    (templates / "focus.md").write_text("Custom focus for {{ meta.name }}\n", encoding="utf-8")

    renderer = DocumentationRenderer(templates_dir=templates)

    assert renderer.render("focus.md", cyclic_result) == "Custom focus for repo\n"
    assert renderer.render("architecture.md", cyclic_result).startswith("# Architecture: repo")


def test_write_docs_creates_output_directory(cyclic_result, tmp_path: Path) -> None:
    output = tmp_path / "out" / "docs"

    written = write_docs(cyclic_result, output)

    assert sorted(path.name for path in written) == sorted(DOCUMENTS)
    assert (output / "architecture.md").read_text(encoding="utf-8").startswith("# Architecture: repo")
