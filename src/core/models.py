# src/core/models.py — v1
"""Shared Pydantic domain models used across modules.

FileMetadata is the record persisted per media file and the payload of a
successful ProcessingResult.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class FileMetadata(BaseModel):
    """SEO metadata generated for a single media file.

    Keywords keep insertion order (relevance order). Duplicates are allowed;
    consumers de-duplicate for display.
    """

    title: str = ""
    description: str = ""
    keywords: list[str] = Field(default_factory=list)

    @property
    def is_complete(self) -> bool:
        """True when every field carries a value."""
        return bool(self.title and self.description and self.keywords)

    @property
    def missing_fields(self) -> list[str]:
        """Names of fields the classifier left empty."""
        missing: list[str] = []
        if not self.title:
            missing.append("title")
        if not self.description:
            missing.append("description")
        if not self.keywords:
            missing.append("keywords")
        return missing

    def unique_keywords(self) -> list[str]:
        """Keywords de-duplicated case-insensitively, first occurrence wins."""
        seen: set[str] = set()
        unique: list[str] = []
        for keyword in self.keywords:
            key = keyword.lower()
            if key in seen:
                continue
            seen.add(key)
            unique.append(keyword)
        return unique
