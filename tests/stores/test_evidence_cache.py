"""Tests for the per-file evidence cache."""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path

from devassist.models import FileEvidence, FileKind, FileRecord, QualityFinding
from devassist.stores import EvidenceCache


def _record(path: str = "src/app.py", size: int = 10, mtime_ns: int = 1) -> FileRecord:
    return FileRecord(
        path=path,
        size=size,
        extension=".py",
        kind=FileKind(language="python"),
        modified=0.0,
        mtime_ns=mtime_ns,
    )


def _evidence(path: str = "src/app.py") -> FileEvidence:
    return FileEvidence(
        path=path,
        lines=3,
        references=("./helpers",),
        exports=("main",),
        findings=(
            QualityFinding(
                rule_id="hardcoded-secret",
                category="security",
                severity="error",
                description="Credential-like literal in source",
                file=path,
                line=2,
            ),
        ),
    )


def test_evidence_survives_persist_and_reload(tmp_path: Path) -> None:
    cache_path = tmp_path / "cache" / "evidence.json"
    cache = EvidenceCache(cache_path)
    cache.store(_record(), signature="sig-1", evidence=_evidence())
    cache.persist()

    loaded = EvidenceCache(cache_path)

    assert loaded.get(_record(), signature="sig-1") == _evidence()
    assert loaded.hits == 1


def test_entry_invalidated_by_signature_size_or_mtime(tmp_path: Path) -> None:
    cache = EvidenceCache(tmp_path / "evidence.json")
    cache.store(_record(), signature="sig-1", evidence=_evidence())

    assert cache.get(_record(), signature="sig-2") is None
    assert cache.get(replace(_record(), size=11), signature="sig-1") is None
    assert cache.get(replace(_record(), mtime_ns=2), signature="sig-1") is None
    assert cache.misses == 3


def test_unreadable_file_evidence_is_cached(tmp_path: Path) -> None:
    cache = EvidenceCache(tmp_path / "evidence.json")
    cache.store(_record("big.py"), signature="s", evidence=FileEvidence(path="big.py"))

    reused = cache.get(_record("big.py"), signature="s")

    assert reused == FileEvidence(path="big.py")
    assert reused.readable is False


def test_prune_drops_missing_paths(tmp_path: Path) -> None:
    cache_path = tmp_path / "evidence.json"
    cache = EvidenceCache(cache_path)
    cache.store(_record("a.py"), signature="s", evidence=_evidence("a.py"))
    cache.store(_record("b.py"), signature="s", evidence=_evidence("b.py"))

    cache.prune(["a.py"])
    cache.persist()

    reloaded = EvidenceCache(cache_path)
    assert len(reloaded) == 1
    assert reloaded.get(_record("b.py"), signature="s") is None


def test_corrupt_or_foreign_cache_is_ignored(tmp_path: Path) -> None:
    cache_path = tmp_path / "evidence.json"
    cache_path.write_text("{not json", encoding="utf-8")
    assert len(EvidenceCache(cache_path)) == 0

    cache_path.write_text('{"version": 999, "entries": {"a.py": {"signature": "s"}}}', encoding="utf-8")
    assert len(EvidenceCache(cache_path)) == 0
