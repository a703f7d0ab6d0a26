# tests/unit/export/test_unit_embedder.py — v1
"""Tests for export/embedder.py — exiftool metadata embedding (ExifToolHelper mocked)."""

from __future__ import annotations

from unittest.mock import MagicMock

import exiftool
import pytest
from exiftool.exceptions import ExifToolExecuteError

from mediatagger.core.errors import EmbedError
from mediatagger.core.models import FileMetadata
from mediatagger.export import embedder as embedder_module
from mediatagger.export.embedder import MetadataEmbedder, build_tags, clean_text

CAR = FileMetadata(
    title="Red Car", description="A red car on a street", keywords=["car", "red", "car", "street"],
)


@pytest.fixture
def exiftool_session(monkeypatch) -> MagicMock:
    """Patch ExifToolHelper; returns the object used inside ``with``."""
    session = MagicMock()
    helper_cls = MagicMock()
    helper_cls.return_value.__enter__.return_value = session
    helper_cls.return_value.__exit__.return_value = False
    monkeypatch.setattr(exiftool, "ExifToolHelper", helper_cls)
    monkeypatch.setattr(embedder_module.shutil, "which", lambda _: "/usr/bin/exiftool")
    session.helper_cls = helper_cls
    return session


@pytest.fixture
def media_files(tmp_path):
    photo = tmp_path / "car.jpg"
    photo.write_bytes(b"\xff\xd8\xff")
    clip = tmp_path / "clip.mp4"
    clip.write_bytes(b"\x00\x00")
    return photo, clip


class TestBuildTags:
    def test_image_tags(self):
        tags = build_tags("/photos/car.jpg", CAR)
        assert tags["XMP-dc:Title"] == "Red Car"
        assert tags["IPTC:ObjectName"] == "Red Car"
        assert tags["IPTC:Caption-Abstract"] == "A red car on a street"
        assert tags["EXIF:ImageDescription"] == "A red car on a street"
        assert tags["IPTC:Keywords"] == ["car", "red", "street"]
        assert tags["XMP-dc:Subject"] == ["car", "red", "street"]
        assert tags["EXIF:XPKeywords"] == "car;red;street"
        assert not any(k.startswith("QuickTime:") for k in tags)

    def test_video_tags(self):
        tags = build_tags("/clips/clip.MOV", CAR)
        assert tags["QuickTime:Title"] == "Red Car"
        assert tags["QuickTime:Keywords"] == "car, red, street"
        assert not any(k.startswith(("IPTC:", "EXIF:")) for k in tags)

    def test_sidecar_is_xmp_only(self):
        tags = build_tags("/photos/car.jpg", CAR, sidecar=True)
        assert set(tags) == {"XMP-dc:Title", "XMP-dc:Description", "XMP-dc:Subject"}

    def test_empty_fields_left_out(self):
        tags = build_tags("/photos/car.jpg", FileMetadata(title="Only"))
        assert "XMP-dc:Description" not in tags
        assert "IPTC:Keywords" not in tags
        assert build_tags("/photos/car.jpg", FileMetadata()) == {}

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [('lang="x-default" Red Car', "Red Car"), ('"Quoted"', "Quoted"), ("  plain ", "plain")],
    )
    def test_clean_text(self, raw, expected):
        assert clean_text(raw) == expected


class TestMetadataEmbedder:
    def test_embeds_in_place(self, exiftool_session, media_files):
        photo, _ = media_files

        target = MetadataEmbedder().embed(photo, CAR)

        assert target == photo
        kwargs = exiftool_session.set_tags.call_args.kwargs
        assert kwargs["files"] == [str(photo)]
        assert kwargs["tags"]["IPTC:ObjectName"] == "Red Car"
        assert "-overwrite_original" in kwargs["params"]
        exiftool_session.helper_cls.assert_called_once_with(executable="exiftool")

    def test_backup_keeps_original(self, exiftool_session, media_files):
        photo, _ = media_files
        MetadataEmbedder(backup=True).embed(photo, CAR)
        assert "-overwrite_original" not in exiftool_session.set_tags.call_args.kwargs["params"]

    def test_sidecar_target(self, exiftool_session, media_files):
        photo, _ = media_files

        target = MetadataEmbedder(sidecar=True).embed(photo, CAR)

        assert target == photo.with_suffix(".xmp")
        assert exiftool_session.set_tags.call_args.kwargs["files"] == [str(photo.with_suffix(".xmp"))]

    def test_missing_file(self, exiftool_session, tmp_path):
        with pytest.raises(EmbedError, match="File not found"):
            MetadataEmbedder().embed(tmp_path / "gone.jpg", CAR)
        exiftool_session.set_tags.assert_not_called()

    def test_nothing_to_write(self, exiftool_session, media_files):
        photo, _ = media_files
        with pytest.raises(EmbedError, match="No metadata to write"):
            MetadataEmbedder().embed(photo, FileMetadata())

    def test_exiftool_not_installed(self, exiftool_session, media_files, monkeypatch):
        monkeypatch.setattr(embedder_module.shutil, "which", lambda _: None)
        photo, _ = media_files
        with pytest.raises(EmbedError, match="not found in PATH"):
            MetadataEmbedder().embed(photo, CAR)
        exiftool_session.helper_cls.assert_not_called()

    def test_execute_error_reports_stderr(self, exiftool_session, media_files):
        photo, _ = media_files
        exiftool_session.set_tags.side_effect = ExifToolExecuteError(
            1, "", "Warning: minor\nError: Not a valid JPG", ["-IPTC:ObjectName=Red Car"],
        )
        with pytest.raises(EmbedError, match="Not a valid JPG"):
            MetadataEmbedder().embed(photo, CAR)


class TestEmbedMany:
    def test_failures_are_isolated(self, exiftool_session, media_files, tmp_path):
        photo, clip = media_files
        exiftool_session.set_tags.side_effect = [ValueError("bad tag value"), None]

        report = MetadataEmbedder().embed_many([
            (str(photo), CAR),
            (str(tmp_path / "untagged.jpg"), None),
            (str(clip), CAR),
        ])

        assert report.failed == {str(photo): "bad tag value"}
        assert report.skipped == [str(tmp_path / "untagged.jpg")]
        assert report.written == [str(clip)]
        assert report.ok is False
        exiftool_session.helper_cls.assert_called_once()

    def test_all_written(self, exiftool_session, media_files):
        photo, clip = media_files
        report = MetadataEmbedder().embed_many([(str(photo), CAR), (str(clip), CAR)])
        assert report.ok
        assert exiftool_session.set_tags.call_count == 2
