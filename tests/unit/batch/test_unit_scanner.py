# tests/unit/batch/test_unit_scanner.py — v2
"""Tests for batch.scanner — media discovery and input expansion."""

from __future__ import annotations

from pathlib import Path

import pytest

from mediatagger.batch.scanner import SUPPORTED_FORMATS, MediaScanner, media_kind


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _create_test_files(tmp_path: Path) -> dict[str, Path]:
    """Create a small media tree in tmp_path."""
    files = {}
    for name in [
        "b_photo.jpg",
        "a_scan.PNG",
        "notes.txt",
        "clip.mp4",
        "sub/nested.webp",
        "sub/readme.md",
    ]:
        p = tmp_path / name
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_bytes(b"fake")
        files[name] = p
    return files


class TestMediaKind:
    def test_images_and_videos(self):
        assert media_kind("x.JPG") == "image"
        assert media_kind("/tmp/y.tiff") == "image"
        assert media_kind("clip.mov") == "video"

    def test_unsupported(self):
        assert media_kind("doc.pdf") is None
        assert media_kind("noext") is None

    def test_formats_cover_both_kinds(self):
        assert set(SUPPORTED_FORMATS.values()) == {"image", "video"}


class TestScan:
    def test_recursive_sorted(self, tmp_path):
        files = _create_test_files(tmp_path)
        found = MediaScanner().scan(tmp_path)
        assert found == sorted(found)
        names = [Path(f).name for f in found]
        assert set(names) == {"b_photo.jpg", "a_scan.PNG", "clip.mp4", "nested.webp"}
        assert str(files["sub/nested.webp"].resolve()) in found

    def test_non_recursive(self, tmp_path):
        _create_test_files(tmp_path)
        names = [Path(f).name for f in MediaScanner().scan(tmp_path, recursive=False)]
        assert "nested.webp" not in names
        assert len(names) == 3

    def test_kind_filter(self, tmp_path):
        _create_test_files(tmp_path)
        found = MediaScanner(kinds=["video"]).scan(tmp_path)
        assert [Path(f).name for f in found] == ["clip.mp4"]

    def test_not_a_directory(self, tmp_path):
        with pytest.raises(ValueError, match="not a directory"):
            MediaScanner().scan(tmp_path / "missing")


class TestCollect:
    def test_explicit_files_keep_order(self, tmp_path):
        files = _create_test_files(tmp_path)
        result = MediaScanner().collect([files["b_photo.jpg"], files["a_scan.PNG"]])
        assert [Path(f).name for f in result] == ["b_photo.jpg", "a_scan.PNG"]

    def test_deduplicates(self, tmp_path):
        files = _create_test_files(tmp_path)
        result = MediaScanner().collect([files["clip.mp4"], tmp_path, str(files["clip.mp4"])])
        assert result.count(str(files["clip.mp4"].resolve())) == 1
        assert result[0] == str(files["clip.mp4"].resolve())

    def test_skips_missing_and_unsupported(self, tmp_path, caplog):
        files = _create_test_files(tmp_path)
        with caplog.at_level("WARNING"):
            result = MediaScanner().collect(
                [tmp_path / "nope.jpg", files["notes.txt"], files["b_photo.jpg"]]
            )
        assert [Path(f).name for f in result] == ["b_photo.jpg"]
        assert "Skipping" in caplog.text
