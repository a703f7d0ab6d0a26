# src/storage/metadata_store.py — v1
"""JSON file metadata store, keyed by media file path.

One JSON document maps each file path to its {title, description, keywords}
record. Writes go to a temporary file that then replaces the store.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

from mediatagger.batch.models import ProcessingResult
from mediatagger.core.models import FileMetadata

logger = logging.getLogger(__name__)


class JsonMetadataStore:
    """File-based key-value store for generated metadata."""

    def __init__(self, path: Path) -> None:
        self._path = Path(path).expanduser()
        self._entries: dict[str, FileMetadata] | None = None

    @property
    def path(self) -> Path:
        return self._path

    @staticmethod
    def _key(file_path: str | Path) -> str:
        return str(Path(file_path).expanduser().resolve())

    def _load(self) -> dict[str, FileMetadata]:
        if self._entries is not None:
            return self._entries

        entries: dict[str, FileMetadata] = {}
        if self._path.exists():
            try:
                raw = json.loads(self._path.read_text(encoding="utf-8"))
                for key, value in raw.items():
                    entries[key] = FileMetadata(**value)
            except (json.JSONDecodeError, AttributeError, TypeError, ValueError) as e:
                logger.warning("Ignoring unreadable metadata store %s: %s", self._path, e)
                entries = {}
        self._entries = entries
        return entries

    def _save(self) -> None:
        entries = self._load()
        self._path.parent.mkdir(parents=True, exist_ok=True)
        payload = {key: meta.model_dump() for key, meta in entries.items()}
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
        os.replace(tmp, self._path)

    def get(self, file_path: str | Path) -> FileMetadata | None:
        """Retrieve metadata for a file, None if never stored."""
        meta = self._load().get(self._key(file_path))
        return meta.model_copy(deep=True) if meta is not None else None

    def put(self, file_path: str | Path, metadata: FileMetadata) -> None:
        """Store (or replace) metadata for a file."""
        self._load()[self._key(file_path)] = metadata.model_copy(deep=True)
        self._save()

    def delete(self, file_path: str | Path) -> bool:
        """Remove a file's metadata. Returns True if something was removed."""
        removed = self._load().pop(self._key(file_path), None) is not None
        if removed:
            self._save()
        return removed

    def items(self) -> list[tuple[str, FileMetadata]]:
        """All stored (file path, metadata) pairs in insertion order."""
        return [(key, meta.model_copy(deep=True)) for key, meta in self._load().items()]

    def record(self, result: ProcessingResult) -> bool:
        """Persist a successful result; failed results are ignored."""
        if not result.success or result.metadata is None:
            return False
        self.put(result.file_path, result.metadata)
        return True
