# src/export/csv_exporter.py — v1
"""Platform-specific CSV export of stored metadata.

Adobe Stock:  Filename,Title,Description,Keywords,Category
Shutterstock: Filename,Title,Description,Keywords,Categories
"""

from __future__ import annotations

import csv
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path, PureWindowsPath
from typing import Iterable

from mediatagger.core.models import FileMetadata

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlatformFormat:
    """CSV layout for one stock platform."""

    slug: str
    category_header: str
    default_category: str


PLATFORMS: dict[str, PlatformFormat] = {
    "adobe_stock": PlatformFormat("adobe-stock", "Category", "1"),
    "shutterstock": PlatformFormat("shutter-stock", "Categories", "Miscellaneous,Miscellaneous"),
}

HEADER_PREFIX = ["Filename", "Title", "Description", "Keywords"]


def get_platform(name: str) -> PlatformFormat:
    key = name.strip().lower().replace("-", "_").replace(" ", "_")
    if key not in PLATFORMS:
        raise ValueError(
            f"Unknown export platform: {name!r}. Available: {', '.join(sorted(PLATFORMS))}"
        )
    return PLATFORMS[key]


def filename_from_path(file_path: str) -> str:
    """Base name of a path written with either slash style."""
    return PureWindowsPath(file_path).name


def build_rows(
    entries: Iterable[tuple[str, FileMetadata | None]],
    platform: str,
    categories: dict[str, str] | None = None,
) -> list[list[str]]:
    """Header plus one row per file with metadata."""
    fmt = get_platform(platform)
    categories = categories or {}

    rows = [[*HEADER_PREFIX, fmt.category_header]]
    for file_path, metadata in entries:
        if metadata is None:
            logger.info("No metadata for %s, skipping", file_path)
            continue
        rows.append([
            filename_from_path(file_path),
            metadata.title,
            metadata.description,
            ",".join(metadata.keywords),
            categories.get(file_path, fmt.default_category),
        ])
    return rows


def export_csv(
    entries: Iterable[tuple[str, FileMetadata | None]],
    platform: str,
    output_dir: Path,
    categories: dict[str, str] | None = None,
    now: datetime | None = None,
) -> Path:
    """Write a platform CSV into ``output_dir`` and return its path.

    Args:
        entries: (file path, metadata) pairs; entries without metadata are skipped.
        platform: "adobe_stock" or "shutterstock".
        output_dir: Directory receiving the file.
        categories: Optional per-file category override.
        now: Timestamp used in the file name (defaults to current UTC time).

    Raises:
        ValueError: If the platform is unknown.
    """
    fmt = get_platform(platform)
    rows = build_rows(entries, platform, categories)

    stamp = (now or datetime.now(timezone.utc)).strftime("%Y-%m-%dT%H-%M-%S")
    path = Path(output_dir).expanduser() / f"{fmt.slug}-export-{stamp}.csv"
    path.parent.mkdir(parents=True, exist_ok=True)

    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f, quoting=csv.QUOTE_MINIMAL)
        writer.writerows(rows)

    logger.info("Exported %d file(s) to %s", len(rows) - 1, path)
    return path
