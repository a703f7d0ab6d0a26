# src/classification/parser.py — v1
"""Tolerant line-oriented parser for classifier responses.

The model is asked for ``Title: / Description: / Keywords:`` lines but the
format is not enforced. Each line is matched against a label marker
("Title:", case-insensitive, optionally wrapped in markdown emphasis) or a
numbered marker ("1.", "2.", "3."). A label takes precedence over the number
on the same line. The first line matching a field wins. Fields that never
match stay empty; parsing never raises.
"""

from __future__ import annotations

import re

from mediatagger.core.models import FileMetadata

_FIELDS_BY_NUMBER = {"1": "title", "2": "description", "3": "keywords"}

_MARKER_RE = re.compile(
    r"""^\s*
    (?:[-*>#]+\s*)?                              # bullet / quote / heading
    (?:(?P<num>[123])\.(?!\d)\s*)?               # numbered marker
    [*_]*\s*
    (?:(?P<label>title|description|keywords)     # labeled marker
       \s*[*_]*\s*:[*_]*)?
    """,
    re.IGNORECASE | re.VERBOSE,
)

_WRAPPERS = '*_[]" \t'


def _match_line(line: str) -> tuple[str, str] | None:
    """Return (field, value) for a marker line, None otherwise."""
    match = _MARKER_RE.match(line)
    if match is None:
        return None
    label = match.group("label")
    num = match.group("num")
    if label:
        field = label.lower()
    elif num:
        field = _FIELDS_BY_NUMBER[num]
    else:
        return None
    return field, line[match.end():].strip().strip(_WRAPPERS)


def split_keywords(text: str) -> list[str]:
    """Split a comma-separated keyword list, trimming and dropping empties."""
    return [k for k in (part.strip() for part in text.split(",")) if k]


def parse_metadata_response(text: str | None) -> FileMetadata:
    """Extract title, description and keywords from free text."""
    found: dict[str, str] = {}
    for line in (text or "").splitlines():
        matched = _match_line(line)
        if matched is None:
            continue
        field, value = matched
        if field in found:
            continue
        found[field] = value

    return FileMetadata(
        title=found.get("title", ""),
        description=found.get("description", ""),
        keywords=split_keywords(found.get("keywords", "")),
    )
