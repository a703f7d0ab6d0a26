# src/export/embedder.py — v1
"""Write generated metadata into media files via ExifTool (pyexiftool).

Images get XMP-dc, IPTC and EXIF fields; videos get XMP-dc and QuickTime
fields. With ``sidecar=True`` only XMP fields are written, to a ``.xmp``
file next to the media file.

Requires the ``exiftool`` executable on PATH (or ``executable`` set).
"""

from __future__ import annotations

import logging
import re
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable

from mediatagger.batch.scanner import media_kind
from mediatagger.core.errors import EmbedError
from mediatagger.core.models import FileMetadata

logger = logging.getLogger(__name__)

# Model output sometimes carries XMP-style lang attributes or wrapping quotes
_LANG_ATTR_RE = re.compile(r'lang="[^"]*"\s*|^"|"$')

_WRITE_PARAMS = ["-P", "-codedcharacterset=utf8"]


def clean_text(value: str) -> str:
    return _LANG_ATTR_RE.sub("", value).strip()


def build_tags(
    file_path: str | Path, metadata: FileMetadata, sidecar: bool = False,
) -> dict[str, str | list[str]]:
    """ExifTool tag map for one file. Empty fields are left out."""
    title = clean_text(metadata.title)
    description = clean_text(metadata.description)
    keywords = metadata.unique_keywords()

    tags: dict[str, str | list[str]] = {}
    if title:
        tags["XMP-dc:Title"] = title
    if description:
        tags["XMP-dc:Description"] = description
    if keywords:
        tags["XMP-dc:Subject"] = keywords
    if sidecar:
        return tags

    if media_kind(file_path) == "video":
        if title:
            tags["QuickTime:Title"] = title
        if description:
            tags["QuickTime:Description"] = description
        if keywords:
            tags["QuickTime:Keywords"] = ", ".join(keywords)
        return tags

    if title:
        tags["IPTC:ObjectName"] = title
        tags["EXIF:XPTitle"] = title
    if description:
        tags["IPTC:Caption-Abstract"] = description
        tags["EXIF:ImageDescription"] = description
    if keywords:
        # Lightroom reads IPTC:Keywords first for JPEGs
        tags["IPTC:Keywords"] = keywords
        tags["EXIF:XPKeywords"] = ";".join(keywords)
    return tags


@dataclass
class EmbedReport:
    """Outcome of embedding a set of files."""

    written: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failed


class MetadataEmbedder:
    """Embed title, description and keywords with a shared ExifTool process."""

    def __init__(
        self,
        executable: str = "exiftool",
        backup: bool = False,
        sidecar: bool = False,
    ) -> None:
        self.executable = executable
        self.backup = backup
        self.sidecar = sidecar

    def target_for(self, file_path: str | Path) -> Path:
        path = Path(file_path)
        return path.with_suffix(".xmp") if self.sidecar else path

    def embed(self, file_path: str | Path, metadata: FileMetadata) -> Path:
        """Write metadata for one file and return the path written.

        Raises:
            EmbedError: If the file is missing, exiftool is unavailable,
                there is nothing to write, or the write fails.
        """
        report = self.embed_many([(str(file_path), metadata)], raise_on_error=True)
        if report.skipped:
            raise EmbedError(str(file_path), "No metadata to write")
        return self.target_for(file_path)

    def embed_many(
        self,
        entries: Iterable[tuple[str, FileMetadata | None]],
        raise_on_error: bool = False,
    ) -> EmbedReport:
        """Write metadata for several files through one ExifTool process.

        A failing file is recorded in the report and the rest continue,
        unless ``raise_on_error`` is set.
        """
        from exiftool import ExifToolHelper

        if shutil.which(self.executable) is None:
            raise EmbedError(self.executable, "exiftool was not found in PATH; cannot embed metadata")

        params = list(_WRITE_PARAMS)
        if not self.backup:
            params.insert(0, "-overwrite_original")

        report = EmbedReport()
        with ExifToolHelper(executable=self.executable) as et:
            for file_path, metadata in entries:
                tags = build_tags(file_path, metadata, self.sidecar) if metadata else {}
                if not tags:
                    logger.info("No metadata for %s, skipping", file_path)
                    report.skipped.append(file_path)
                    continue

                try:
                    target = self._write(et, file_path, tags, params)
                except EmbedError as exc:
                    if raise_on_error:
                        raise
                    report.failed[file_path] = exc.reason
                    logger.warning("Embedding failed for %s: %s", file_path, exc.reason)
                    continue

                report.written.append(file_path)
                logger.debug(
                    "Embedded %d tag(s) into %s", len(tags), target,
                    extra={"data": {"tags": sorted(tags)}},
                )

        logger.info(
            "Embedding done: %d written, %d skipped, %d failed",
            len(report.written), len(report.skipped), len(report.failed),
        )
        return report

    def _write(
        self,
        et: Any,
        file_path: str,
        tags: dict[str, str | list[str]],
        params: list[str],
    ) -> Path:
        from exiftool.exceptions import ExifToolExecuteError

        if not Path(file_path).is_file():
            raise EmbedError(file_path, "File not found")
        target = self.target_for(file_path)
        try:
            et.set_tags(files=[str(target)], tags=tags, params=params)
        except ExifToolExecuteError as exc:
            raise EmbedError(file_path, _execute_error_details(exc)) from exc
        except (ValueError, TypeError) as exc:
            raise EmbedError(file_path, str(exc)) from exc
        return target


def _execute_error_details(exc: Any) -> str:
    """Last stderr line of a failed exiftool call, else the exception text."""
    stderr = getattr(exc, "stderr", "") or ""
    if isinstance(stderr, bytes):
        stderr = stderr.decode(errors="ignore")
    lines = stderr.strip().splitlines()
    return lines[-1] if lines else (str(exc) or "exiftool failed")
