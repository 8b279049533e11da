"""Tests for reference extraction and dependency graph resolution."""

from __future__ import annotations

import json

from devassist.analyzers import (
    DependencyGraphBuilder,
    extract_exports,
    extract_references,
    read_manifests,
)
from devassist.content import ContentReader
from devassist.models import FileEvidence


def _build_graph(repo_builder):
    scan = repo_builder.scan()
    reader = ContentReader(scan.root)
    evidence = {}
    for record in scan.files:
        text = reader.read(record.path)
        if text is None:
            continue
        evidence[record.path] = FileEvidence(
            path=record.path,
            lines=len(text.splitlines()),
            references=extract_references(record.language, text),
            exports=extract_exports(record.language, text),
        )
    manifests = read_manifests(scan.root, scan.root_files())
    return DependencyGraphBuilder().build(scan.files, evidence, manifests)


def test_js_reference_extraction_covers_import_forms() -> None:
    text = """
    import React from 'react'
    import { a, b } from "./util"
    import './styles.css'
    export * from './types'
    const fs = require('fs')
    const lazy = import('./lazy')
    """

    refs = extract_references("javascript", text)

    assert refs == ("react", "./util", "./styles.css", "./types", "fs", "./lazy")


def test_python_reference_extraction() -> None:
    text = "import os, json as j\nfrom . import helpers\nfrom ..core.models import (\n    User,\n)\nfrom pkg.sub import thing\n"

    refs = extract_references("python", text)

    assert refs == ("os", "json", "./helpers", "../core/models", "pkg.sub")


def test_exports_are_collected() -> None:
    js = "export default function App() {}\nexport const value = 1\nexport { helper as util }\nexports.legacy = 1\n"
    py = "__all__ = ['public']\ndef public(): ...\ndef _private(): ...\n"

    assert extract_exports("javascript", js) == ("App", "value", "util", "legacy")
    assert extract_exports("python", py) == ("public",)


def test_relative_import_resolves_in_extension_order(repo_builder) -> None:
    repo_builder.write(
        {
            "src/main.js": "import sibling from './sibling'\n",
            "src/sibling.ts": "export default 1\n",
            "src/sibling.jsx": "export default 2\n",
        }
    )

    graph = _build_graph(repo_builder)
    edges = [edge for edge in graph.edges if edge.source == "src/main.js"]

    assert len(edges) == 1
    assert edges[0].target == "src/sibling.ts"
    assert edges[0].unresolved is False
    assert edges[0].kind == "import"


def test_directory_import_resolves_to_index(repo_builder) -> None:
    repo_builder.write(
        {
            "src/main.ts": "import { x } from './lib'\n",
            "src/lib/index.ts": "export const x = 1\n",
        }
    )

    graph = _build_graph(repo_builder)

    assert [(edge.source, edge.target) for edge in graph.edges] == [("src/main.ts", "src/lib/index.ts")]


def test_missing_import_is_recorded_as_unresolved(repo_builder) -> None:
    repo_builder.write({"src/main.js": "import missing from './missing'\n"})

    graph = _build_graph(repo_builder)

    assert len(graph.unresolved) == 1
    edge = graph.unresolved[0]
    assert edge.source == "src/main.js"
    assert edge.target == "src/missing"
    assert edge.reference == "./missing"
    for candidate in graph.edges:
        assert candidate.unresolved or candidate.target in graph.nodes


def test_non_source_targets_become_asset_nodes(repo_builder) -> None:
    repo_builder.write(
        {
            "src/main.js": "import './styles.css'\nimport data from './data.json'\nimport util from './util'\n",
            "src/util.js": "export default 1\n",
            "src/styles.css": "body { margin: 0; }\n",
            "src/data.json": "{}\n",
        }
    )

    graph = _build_graph(repo_builder)

    assert {edge.target for edge in graph.edges} == {"src/styles.css", "src/data.json", "src/util.js"}
    assert graph.unresolved == ()
    assert graph.nodes["src/styles.css"].kind == "asset"
    assert graph.nodes["src/data.json"].kind == "asset"
    assert graph.nodes["src/util.js"].kind != "asset"
    for edge in graph.edges:
        assert edge.unresolved or edge.target in graph.nodes


def test_declared_packages_become_external_nodes(repo_builder) -> None:
    repo_builder.write(
        {
            "package.json": json.dumps({"dependencies": {"@scope/pkg": "1.0.0", "lodash": "4.17.21"}}),
            "index.js": "import x from '@scope/pkg/deep'\nimport _ from 'lodash'\nimport y from 'undeclared'\n",
        }
    )

    graph = _build_graph(repo_builder)

    externals = graph.external_nodes()
    assert set(externals) == {"@scope/pkg", "lodash"}
    assert externals["lodash"].version == "4.17.21"
    targets = {edge.target for edge in graph.edges if edge.source == "index.js"}
    assert targets == {"@scope/pkg", "lodash"}


def test_python_absolute_and_relative_imports_resolve(repo_builder) -> None:
    repo_builder.write(
        {
            "pkg/__init__.py": "",
            "pkg/core.py": "from . import helpers\nfrom pkg.models import User\n",
            "pkg/helpers.py": "import os\n",
            "pkg/models/__init__.py": "class User: ...\n",
        }
    )

    graph = _build_graph(repo_builder)
    targets = sorted(edge.target for edge in graph.edges if edge.source == "pkg/core.py")

    assert targets == ["pkg/helpers.py", "pkg/models/__init__.py"]
    assert graph.nodes["pkg/core.py"].language == "python"


def test_import_cycles_are_allowed(repo_builder) -> None:
    repo_builder.write(
        {
            "a.js": "import b from './b'\n",
            "b.js": "import a from './a'\n",
        }
    )

    graph = _build_graph(repo_builder)

    assert {(edge.source, edge.target) for edge in graph.edges} == {("a.js", "b.js"), ("b.js", "a.js")}
