# src/batch/scanner.py — v2
"""Media scanner — expand files and directories into an ordered file list.

Directories are scanned (recursively by default) for supported image and
video extensions; explicit file arguments keep their given order.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

from mediatagger.preparation.image_preparer import IMAGE_EXTENSIONS, VIDEO_EXTENSIONS

logger = logging.getLogger(__name__)

# Supported file extensions mapped to media kinds
SUPPORTED_FORMATS: dict[str, str] = {
    **{ext: "image" for ext in IMAGE_EXTENSIONS},
    **{ext: "video" for ext in VIDEO_EXTENSIONS},
}


def media_kind(path: Path | str) -> str | None:
    """Return "image", "video" or None for unsupported files."""
    return SUPPORTED_FORMATS.get(Path(path).suffix.lower())


class MediaScanner:
    """Discover media files to feed the batch processor."""

    def __init__(self, kinds: Iterable[str] | None = None) -> None:
        self._kinds = set(kinds) if kinds else None

    def _accepts(self, path: Path) -> bool:
        kind = media_kind(path)
        if kind is None:
            return False
        return self._kinds is None or kind in self._kinds

    def scan(self, scan_root: Path, recursive: bool = True) -> list[str]:
        """List supported media files under a directory, sorted by path.

        Raises:
            ValueError: If ``scan_root`` is not a directory.
        """
        if not scan_root.is_dir():
            msg = f"Scan root is not a directory: {scan_root}"
            raise ValueError(msg)

        pattern_fn = scan_root.rglob if recursive else scan_root.glob
        files = [
            str(path.resolve())
            for path in sorted(pattern_fn("*"))
            if path.is_file() and self._accepts(path)
        ]

        logger.info(
            "Scanned %s: found %d media files (recursive=%s)",
            scan_root, len(files), recursive,
        )
        return files

    def collect(self, inputs: Iterable[Path | str], recursive: bool = True) -> list[str]:
        """Expand files and directories into a de-duplicated, ordered list.

        Unsupported or missing explicit files are skipped with a warning.
        """
        collected: list[str] = []
        seen: set[str] = set()

        for raw in inputs:
            path = Path(raw).expanduser()
            if path.is_dir():
                candidates = self.scan(path, recursive=recursive)
            elif path.is_file() and self._accepts(path):
                candidates = [str(path.resolve())]
            else:
                logger.warning("Skipping %s (missing or unsupported)", path)
                continue

            for candidate in candidates:
                if candidate in seen:
                    continue
                seen.add(candidate)
                collected.append(candidate)

        return collected
