"""Persistent per-file evidence cache for incremental analysis runs."""

from __future__ import annotations

import json
from dataclasses import asdict
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from ..models import FileEvidence, FileRecord, QualityFinding

_CACHE_VERSION = 1
CACHE_RELATIVE_PATH = Path("cache") / "evidence.json"


class EvidenceCache:
    """Stores FileEvidence keyed by relative path.

    An entry is reused only when the file's size and ``mtime_ns`` are unchanged
    and the rule-table signature matches the one it was computed with.
    """

    def __init__(self, path: Optional[Path]) -> None:
        self._path = path
        self._entries: Dict[str, Dict[str, object]] = {}
        self._dirty = False
        self.hits = 0
        self.misses = 0
        if self._path is not None:
            self._load(self._path)

    def get(self, record: FileRecord, *, signature: str) -> Optional[FileEvidence]:
        entry = self._entries.get(record.path)
        if (
            not entry
            or entry.get("signature") != signature
            or entry.get("size") != record.size
            or entry.get("mtime_ns") != record.mtime_ns
        ):
            self.misses += 1
            return None
        evidence = _evidence_from_dict(record.path, entry)
        if evidence is None:
            self.misses += 1
            return None
        self.hits += 1
        return evidence

    def store(self, record: FileRecord, *, signature: str, evidence: FileEvidence) -> None:
        self._entries[record.path] = {
            "signature": signature,
            "size": record.size,
            "mtime_ns": record.mtime_ns,
            "lines": evidence.lines,
            "references": list(evidence.references),
            "exports": list(evidence.exports),
            "findings": [asdict(finding) for finding in evidence.findings],
        }
        self._dirty = True

    def prune(self, paths_to_keep: Iterable[str]) -> None:
        keep = set(paths_to_keep)
        removed = [path for path in self._entries if path not in keep]
        for path in removed:
            self._entries.pop(path, None)
        if removed:
            self._dirty = True

    def persist(self) -> None:
        if not self._dirty or self._path is None:
            return
        payload = {"version": _CACHE_VERSION, "entries": self._entries}
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")
        self._dirty = False

    def clear(self) -> None:
        self._entries.clear()
        self._dirty = True

    def __len__(self) -> int:
        return len(self._entries)

    def _load(self, path: Path) -> None:
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return
        except (OSError, json.JSONDecodeError):
            return
        if not isinstance(data, dict) or data.get("version") != _CACHE_VERSION:
            return
        entries = data.get("entries")
        if not isinstance(entries, dict):
            return
        self._entries = {
            key: raw
            for key, raw in entries.items()
            if isinstance(key, str) and isinstance(raw, dict) and "signature" in raw
        }


def _evidence_from_dict(path: str, payload: Dict[str, object]) -> Optional[FileEvidence]:
    lines = payload.get("lines")
    references = payload.get("references")
    exports = payload.get("exports")
    raw_findings = payload.get("findings")
    if lines is not None and not isinstance(lines, int):
        return None
    if not isinstance(references, list) or not isinstance(exports, list):
        return None
    if not isinstance(raw_findings, list):
        return None
    findings: List[QualityFinding] = []
    for raw in raw_findings:
        if not isinstance(raw, dict):
            return None
        try:
            findings.append(QualityFinding(**raw))
        except TypeError:
            return None
    return FileEvidence(
        path=path,
        lines=lines,
        references=tuple(str(item) for item in references),
        exports=tuple(str(item) for item in exports),
        findings=tuple(findings),
    )


__all__ = ["CACHE_RELATIVE_PATH", "EvidenceCache"]
