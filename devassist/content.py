"""Size-guarded text access shared by the content-scanning stages."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Optional

from .constants import DEFAULT_MAX_FILE_SIZE
from .logging import get_logger


class ContentReader:
    """Reads project files as text, at most once per path.

    Files above ``max_file_size`` and files that cannot be read or decoded
    yield ``None``; callers treat that as "no evidence".
    """

    def __init__(self, root: Path, max_file_size: int = DEFAULT_MAX_FILE_SIZE) -> None:
        self.root = root
        self.max_file_size = max_file_size
        self._texts: Dict[str, Optional[str]] = {}
        self.logger = get_logger("content")

    def read(self, rel_path: str) -> Optional[str]:
        if rel_path in self._texts:
            return self._texts[rel_path]
        text = self._load(rel_path)
        self._texts[rel_path] = text
        return text

    def _load(self, rel_path: str) -> Optional[str]:
        path = self.root / rel_path
        try:
            if path.stat().st_size > self.max_file_size:
                self.logger.debug("Skipping %s: larger than %d bytes", rel_path, self.max_file_size)
                return None
            return path.read_text(encoding="utf-8")
        except UnicodeDecodeError:
            self.logger.debug("Skipping %s: not valid UTF-8", rel_path)
            return None
        except OSError as exc:
            self.logger.debug("Cannot read %s: %s", rel_path, exc)
            return None


__all__ = ["ContentReader"]
