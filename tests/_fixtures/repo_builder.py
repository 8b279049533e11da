"""Helper utilities for constructing temporary projects in tests."""

from __future__ import annotations

import textwrap
from pathlib import Path
from typing import Mapping

from devassist.walker import DirectoryWalker, ScanResult


class RepoBuilder:
    """Utility for writing files into a throwaway project and rescanning it."""

    def __init__(self, tmp_path: Path) -> None:
        self.root = tmp_path / "repo"
        self.root.mkdir()
        self._walker = DirectoryWalker()

    def write(self, files: Mapping[str, str]) -> None:
        """Write `path -> contents` entries into the project."""
        for relative, content in files.items():
            path = self.root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            normalised = textwrap.dedent(content).lstrip("\n")
            path.write_text(normalised, encoding="utf-8")

    def scan(self, **walker_options) -> ScanResult:
        """Return a fresh scan of the project contents."""
        walker = DirectoryWalker(**walker_options) if walker_options else self._walker
        return walker.scan(self.root)

    def path(self) -> Path:
        """Return the project root path."""
        return self.root


__all__ = ["RepoBuilder"]
