"""Filesystem scanning and capped source reading."""

from __future__ import annotations

import logging
import re

from dataclasses import dataclass
from pathlib import Path

from codegrade.domain.batching.value_objects import SourceItem
from codegrade.shared.constants import (
    DEFAULT_EXCLUDED_DIRS,
    DEFAULT_EXTENSIONS,
    MAX_FILE_CHARS,
    TRUNCATION_MARKER,
)
from codegrade.shared.exceptions import SourceReadError
from codegrade.shared.types import FilePath

logger = logging.getLogger(__name__)

_ARTIFACT_ID_RE = re.compile(r"<artifactId>(.*?)</artifactId>")


@dataclass
class SourceReader:
    """Finds source files under a root and reads them with a size cap."""

    max_chars: int = MAX_FILE_CHARS
    extensions: tuple[str, ...] = DEFAULT_EXTENSIONS
    excluded_dirs: tuple[str, ...] = DEFAULT_EXCLUDED_DIRS

    def scan(self, root: Path) -> list[FilePath]:
        """Recursively list files with a supported extension, sorted by path.

        Raises:
            SourceReadError: If *root* is not a readable directory.
        """
        if not root.is_dir():
            raise SourceReadError(FilePath(str(root)), "directory not found")

        found: list[FilePath] = []
        for path in sorted(root.rglob("*")):
            if not path.is_file() or path.suffix not in self.extensions:
                continue
            relative_parts = path.relative_to(root).parts[:-1]
            if any(part in self.excluded_dirs for part in relative_parts):
                continue
            found.append(FilePath(str(path)))
        return found

    def read(self, path: FilePath) -> SourceItem | None:
        """Read one file, truncating long content.

        Undecodable bytes are replaced with U+FFFD.

        Returns:
            The source item, or None if the file could not be read.
        """
        try:
            content = Path(path).read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            logger.warning("Error reading file %s, skipping: %s", path, e)
            return None

        if len(content) > self.max_chars:
            content = content[: self.max_chars] + TRUNCATION_MARKER
        return SourceItem(path=path, name=Path(path).name, content=content)

    def read_all(self, paths: list[FilePath]) -> list[SourceItem]:
        """Read every path, silently dropping unreadable files."""
        items: list[SourceItem] = []
        for path in paths:
            item = self.read(path)
            if item is not None:
                items.append(item)
        return items

    def project_name(self, root: Path) -> str:
        """Use the Maven ``artifactId`` when present, else the directory name."""
        pom = root / "pom.xml"
        if pom.is_file():
            try:
                match = _ARTIFACT_ID_RE.search(pom.read_text(encoding="utf-8"))
            except (OSError, UnicodeDecodeError) as e:
                logger.debug("Could not read %s, using folder name: %s", pom, e)
                match = None
            if match and match.group(1).strip():
                return match.group(1).strip()
        return root.resolve().name
