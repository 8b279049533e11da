"""Depth-bounded, filtered traversal of a project tree."""

from __future__ import annotations

import os
from dataclasses import dataclass
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Dict, FrozenSet, Iterable, Iterator, List, Optional, Sequence, Tuple

from .classifier import FileClassifier
from .constants import (
    DEFAULT_IGNORE_DIRS,
    DEFAULT_MAX_DEPTH,
    DEFAULT_MAX_FILE_SIZE,
    DEFAULT_TABLES,
    AnalysisTables,
)
from .logging import get_logger
from .models import DirectoryNode, FileRecord

_EXCLUDED_FILES = {".DS_Store", "Thumbs.db", "desktop.ini"}
_SAMPLE_BYTES = 4096
ROOT_PURPOSE = "project root"


@dataclass
class IgnoreRule:
    """A gitignore-style pattern from .gitignore or ``analysis.exclude_paths``."""

    pattern: str
    directory_only: bool
    anchored: bool
    negate: bool
    has_slash: bool

    def matches(self, rel_path: str, is_dir: bool) -> bool:
        if not self.pattern:
            return False
        if self.directory_only and not is_dir:
            return False

        if self.anchored or self.has_slash:
            if fnmatchcase(rel_path, self.pattern):
                return True
            return rel_path.startswith(f"{self.pattern}/")

        return any(fnmatchcase(part, self.pattern) for part in rel_path.split("/"))


def build_ignore_rule(pattern: str, negate: bool = False) -> Optional[IgnoreRule]:
    pattern = pattern.strip()
    if not pattern:
        return None

    directory_only = pattern.endswith("/")
    if directory_only:
        pattern = pattern.rstrip("/")

    anchored = pattern.startswith("/")
    if anchored:
        pattern = pattern.lstrip("/")

    return IgnoreRule(
        pattern=pattern,
        directory_only=directory_only,
        anchored=anchored,
        negate=negate,
        has_slash="/" in pattern,
    )


def parse_ignore_lines(lines: Iterable[str]) -> List[IgnoreRule]:
    rules: List[IgnoreRule] = []
    for raw_line in lines:
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        negate = line.startswith("!")
        if negate:
            line = line[1:]
        rule = build_ignore_rule(line, negate=negate)
        if rule is not None:
            rules.append(rule)
    return rules


def is_ignored(rel_path: str, is_dir: bool, rules: Sequence[IgnoreRule]) -> bool:
    ignored = False
    for rule in rules:
        if rule.matches(rel_path, is_dir):
            ignored = not rule.negate
    return ignored


@dataclass(frozen=True)
class WalkEntry:
    """One traversal event: a directory (``record is None``) or a file inside it."""

    directory: str
    depth: int
    record: Optional[FileRecord] = None
    readable: bool = True


@dataclass(frozen=True)
class ScanResult:
    root: Path
    files: Tuple[FileRecord, ...]
    tree: DirectoryNode
    skipped: Tuple[str, ...] = ()

    def root_files(self) -> Tuple[str, ...]:
        return tuple(record.path for record in self.tree.files)


class DirectoryWalker:
    """Produces FileRecords and a DirectoryNode tree for a project root.

    The root sits at depth 0 and a directory's entries are listed only while
    its depth is below ``max_depth``; deeper subtrees are dropped without error.
    Unreadable subdirectories are reported in ``skipped`` and contribute nothing.
    """

    def __init__(
        self,
        *,
        ignore_dirs: FrozenSet[str] = DEFAULT_IGNORE_DIRS,
        max_depth: int = DEFAULT_MAX_DEPTH,
        exclude_patterns: Sequence[str] = (),
        use_gitignore: bool = True,
        max_file_size: int = DEFAULT_MAX_FILE_SIZE,
        tables: AnalysisTables = DEFAULT_TABLES,
        classifier: Optional[FileClassifier] = None,
    ) -> None:
        self.ignore_dirs = frozenset(ignore_dirs)
        self.max_depth = max_depth
        self.exclude_patterns = tuple(exclude_patterns)
        self.use_gitignore = use_gitignore
        self.max_file_size = max_file_size
        self.tables = tables
        self.classifier = classifier or FileClassifier(tables)
        self.logger = get_logger("walker")

    def walk(self, root: Path) -> Iterator[WalkEntry]:
        """Validate ``root`` eagerly, then lazily yield traversal entries."""
        root_path = check_root(root)
        rules = self._load_rules(root_path)
        return self._walk_dir(root_path, "", 0, rules)

    def scan(self, root: Path) -> ScanResult:
        root_path = check_root(root)
        files: List[FileRecord] = []
        directory_files: Dict[str, List[FileRecord]] = {}
        readable: Dict[str, bool] = {}
        skipped: List[str] = []

        for entry in self.walk(root_path):
            if entry.record is None:
                directory_files.setdefault(entry.directory, [])
                readable[entry.directory] = entry.readable
                if not entry.readable:
                    skipped.append(entry.directory)
                continue
            files.append(entry.record)
            directory_files.setdefault(entry.directory, []).append(entry.record)

        tree = _assemble_tree(root_path, directory_files, readable, self.tables)
        self.logger.debug(
            "Walked %s: %d files, %d unreadable directories", root_path, len(files), len(skipped)
        )
        return ScanResult(root=root_path, files=tuple(files), tree=tree, skipped=tuple(skipped))

    def _load_rules(self, root: Path) -> List[IgnoreRule]:
        rules: List[IgnoreRule] = []
        if self.use_gitignore:
            gitignore = root / ".gitignore"
            try:
                rules.extend(parse_ignore_lines(gitignore.read_text(encoding="utf-8").splitlines()))
            except FileNotFoundError:
                pass
            except (OSError, UnicodeDecodeError) as exc:
                self.logger.debug("Ignoring unreadable .gitignore: %s", exc)
        rules.extend(parse_ignore_lines(self.exclude_patterns))
        return rules

    def _walk_dir(
        self, root: Path, rel_dir: str, depth: int, rules: Sequence[IgnoreRule]
    ) -> Iterator[WalkEntry]:
        current = root / rel_dir if rel_dir else root
        try:
            with os.scandir(current) as iterator:
                entries = sorted(iterator, key=lambda item: item.name)
        except OSError as exc:
            if not rel_dir:
                raise
            self.logger.warning("Skipping unreadable directory %s: %s", rel_dir, exc)
            yield WalkEntry(directory=rel_dir, depth=depth, readable=False)
            return

        yield WalkEntry(directory=rel_dir, depth=depth)

        subdirectories: List[str] = []
        for entry in entries:
            rel_path = f"{rel_dir}/{entry.name}" if rel_dir else entry.name
            try:
                is_dir = entry.is_dir(follow_symlinks=False)
            except OSError:
                continue
            if is_dir:
                if entry.name in self.ignore_dirs or is_ignored(rel_path, True, rules):
                    continue
                subdirectories.append(rel_path)
                continue
            if entry.name in _EXCLUDED_FILES or is_ignored(rel_path, False, rules):
                continue
            record = self._record_for(root, rel_path, entry)
            if record is not None:
                yield WalkEntry(directory=rel_dir, depth=depth, record=record)

        if depth + 1 >= self.max_depth:
            if subdirectories:
                self.logger.debug("Depth limit reached below %s", rel_dir or ".")
            return
        for rel_path in subdirectories:
            yield from self._walk_dir(root, rel_path, depth + 1, rules)

    def _record_for(self, root: Path, rel_path: str, entry: os.DirEntry) -> Optional[FileRecord]:
        try:
            stat_result = entry.stat(follow_symlinks=False)
        except OSError as exc:
            self.logger.debug("Cannot stat %s: %s", rel_path, exc)
            return None

        sample = None
        language = self.classifier.language_for(rel_path)
        if self.tables.is_countable(language) and stat_result.st_size <= self.max_file_size:
            sample = _read_sample(root / rel_path)

        extension = os.path.splitext(entry.name)[1].lower()
        return FileRecord(
            path=rel_path,
            size=stat_result.st_size,
            extension=extension,
            kind=self.classifier.classify(rel_path, sample),
            modified=stat_result.st_mtime,
            mtime_ns=stat_result.st_mtime_ns,
        )


def check_root(root: Path) -> Path:
    root_path = Path(root).expanduser().resolve()
    if not root_path.exists():
        raise FileNotFoundError(f"Project path not found: {root}")
    if not root_path.is_dir():
        raise NotADirectoryError(f"Project path is not a directory: {root}")
    if not os.access(root_path, os.R_OK | os.X_OK):
        raise PermissionError(f"Project path is not readable: {root}")
    return root_path


def _read_sample(path: Path) -> Optional[str]:
    try:
        with path.open("rb") as handle:
            return handle.read(_SAMPLE_BYTES).decode("utf-8", errors="ignore")
    except OSError:
        return None


def _assemble_tree(
    root: Path,
    directory_files: Dict[str, List[FileRecord]],
    readable: Dict[str, bool],
    tables: AnalysisTables,
) -> DirectoryNode:
    children: Dict[str, List[str]] = {}
    for rel_dir in directory_files:
        if not rel_dir:
            continue
        parent = rel_dir.rpartition("/")[0]
        children.setdefault(parent, []).append(rel_dir)

    def build(rel_dir: str) -> DirectoryNode:
        child_nodes = tuple(build(child) for child in sorted(children.get(rel_dir, [])))
        own_files = tuple(directory_files.get(rel_dir, ()))
        name = rel_dir.rpartition("/")[2] if rel_dir else root.name
        purpose = tables.purpose_for(name) if rel_dir else ROOT_PURPOSE
        return DirectoryNode(
            name=name,
            path=rel_dir,
            purpose=purpose,
            directories=child_nodes,
            files=own_files,
            file_count=len(own_files) + sum(child.file_count for child in child_nodes),
            size=sum(record.size for record in own_files) + sum(child.size for child in child_nodes),
            readable=readable.get(rel_dir, True),
        )

    return build("")


__all__ = [
    "DirectoryWalker",
    "IgnoreRule",
    "ScanResult",
    "WalkEntry",
    "build_ignore_rule",
    "check_root",
    "is_ignored",
    "parse_ignore_lines",
]
