"""Tests for devassist.classifier."""

from __future__ import annotations

from dataclasses import replace

from devassist.classifier import FileClassifier
from devassist.constants import DEFAULT_TABLES
from devassist.models import FileKind


def test_unknown_extension_is_not_an_error() -> None:
    kind = FileClassifier().classify("data/blob.xyz", "whatever")

    assert kind == FileKind(language="unknown", framework_hint=None, purpose_tags=())


def test_special_filenames_map_to_languages() -> None:
    classifier = FileClassifier()

    assert classifier.language_for("Dockerfile") == "dockerfile"
    assert classifier.language_for("Gemfile") == "ruby"
    assert classifier.language_for("src/App.TSX") == "typescript"


def test_content_sample_adds_multiple_purpose_tags() -> None:
    sample = "const express = require('express')\napp.get('/users', (req, res) => db.query('SELECT 1'))\n"

    kind = FileClassifier().classify("server/index.js", sample)

    assert kind.language == "javascript"
    assert kind.framework_hint == "express"
    assert "routing" in kind.purpose_tags
    assert "database" in kind.purpose_tags


def test_test_files_are_tagged_by_name_and_directory() -> None:
    classifier = FileClassifier()

    assert "test" in classifier.classify("src/button.test.tsx").purpose_tags
    assert "test" in classifier.classify("pkg/test_util.py").purpose_tags
    assert "test" in classifier.classify("__tests__/helpers.js").purpose_tags
    assert "test" not in classifier.classify("src/contest.py").purpose_tags


def test_python_framework_hint() -> None:
    kind = FileClassifier().classify("app/main.py", "from fastapi import FastAPI\napp = FastAPI()\n")

    assert kind.framework_hint == "fastapi"


def test_substituted_tables_change_classification() -> None:
    tables = replace(DEFAULT_TABLES, language_by_extension={".zz": "zedlang"})

    classifier = FileClassifier(tables)

    assert classifier.language_for("main.zz") == "zedlang"
    assert classifier.language_for("main.py") == "unknown"


def test_bare_and_suffixed_test_names_are_tagged() -> None:
    classifier = FileClassifier()

    assert "test" in classifier.classify("test.js").purpose_tags
    assert "test" in classifier.classify("spec.ts").purpose_tags
    assert "test" in classifier.classify("src/main/FooTest.java").purpose_tags
    assert "test" in classifier.classify("App/ServiceTests.cs").purpose_tags
    assert "test" not in classifier.classify("src/main/Contest.java").purpose_tags
    assert "test" not in classifier.classify("lib/testing.js").purpose_tags
