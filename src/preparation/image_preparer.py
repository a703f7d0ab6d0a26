# src/preparation/image_preparer.py — v1
"""Pillow-based image preparation, with ffmpeg first-frame grabs for videos.

Images are decoded, flattened onto white, downscaled to fit a square of
``max_dimension`` pixels (aspect ratio kept, never upscaled) and re-encoded
as JPEG. Decoding and encoding run in a worker thread.
"""

from __future__ import annotations

import asyncio
import logging
import shutil
from io import BytesIO
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from mediatagger.core.errors import PreparationError
from mediatagger.preparation.base_preparer import BaseImagePreparer, PreparedImage

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS: tuple[str, ...] = (
    ".jpg", ".jpeg", ".png", ".webp", ".bmp", ".gif", ".tif", ".tiff",
)
VIDEO_EXTENSIONS: tuple[str, ...] = (".mp4", ".mov", ".avi", ".mkv")

DEFAULT_MAX_DIMENSION = 256
DEFAULT_JPEG_QUALITY = 50
DEFAULT_MAX_BYTES = 10 * 1024 * 1024


class ImagePreparer(BaseImagePreparer):
    """Resize/recompress images and grab the first frame of videos."""

    def __init__(
        self,
        max_dimension: int = DEFAULT_MAX_DIMENSION,
        jpeg_quality: int = DEFAULT_JPEG_QUALITY,
        max_bytes: int = DEFAULT_MAX_BYTES,
    ) -> None:
        if max_dimension <= 0:
            raise ValueError("max_dimension must be > 0")
        if not 1 <= jpeg_quality <= 95:
            raise ValueError("jpeg_quality must be between 1 and 95")
        self._max_dimension = max_dimension
        self._jpeg_quality = jpeg_quality
        self._max_bytes = max_bytes

    @property
    def supported_extensions(self) -> list[str]:
        return [*IMAGE_EXTENSIONS, *VIDEO_EXTENSIONS]

    async def prepare(self, file_path: str) -> PreparedImage:
        path = Path(file_path)
        if not path.is_file():
            raise PreparationError(file_path, f"File not found: {file_path}")

        ext = path.suffix.lower()
        if ext in VIDEO_EXTENSIONS:
            source = await asyncio.to_thread(_grab_first_frame, path)
        elif ext in IMAGE_EXTENSIONS:
            source = await asyncio.to_thread(path.read_bytes)
        else:
            raise PreparationError(file_path, f"Unsupported file type: {ext or '<none>'}")

        prepared = await asyncio.to_thread(self._encode, file_path, source)

        if prepared.size_bytes > self._max_bytes:
            raise PreparationError(
                file_path,
                f"Resized image is still too large ({prepared.size_mb:.2f}MB, "
                f"limit {self._max_bytes / (1024 * 1024):.0f}MB)",
            )

        logger.debug(
            "Prepared %s: %sx%s, %d KB",
            path.name, prepared.width, prepared.height, prepared.size_bytes // 1024,
        )
        return prepared

    def _encode(self, file_path: str, source: bytes) -> PreparedImage:
        """Decode ``source``, downscale and re-encode as JPEG."""
        try:
            with Image.open(BytesIO(source)) as img:
                img.seek(0)  # first frame of animated formats
                rgb = _to_rgb(img)
        except (UnidentifiedImageError, OSError, ValueError) as e:
            raise PreparationError(file_path, f"Cannot decode image: {e}") from e

        rgb.thumbnail((self._max_dimension, self._max_dimension), Image.Resampling.LANCZOS)

        buf = BytesIO()
        rgb.save(buf, format="JPEG", quality=self._jpeg_quality)
        return PreparedImage(
            source_path=file_path,
            data=buf.getvalue(),
            media_type="image/jpeg",
            width=rgb.width,
            height=rgb.height,
        )


def _to_rgb(img: Image.Image) -> Image.Image:
    """Composite alpha onto white and convert to RGB."""
    if img.mode in ("RGBA", "LA") or (img.mode == "P" and "transparency" in img.info):
        alpha = img.convert("RGBA")
        background = Image.new("RGBA", alpha.size, (255, 255, 255, 255))
        return Image.alpha_composite(background, alpha).convert("RGB")
    return img.convert("RGB")


def _grab_first_frame(path: Path) -> bytes:
    """Extract the first video frame as PNG bytes via ffmpeg."""
    import ffmpeg

    if shutil.which("ffmpeg") is None:
        raise PreparationError(str(path), "ffmpeg was not found in PATH; cannot read video frames")

    try:
        out, _ = (
            ffmpeg.input(str(path))
            .output("pipe:", vframes=1, format="image2", vcodec="png")
            .run(capture_stdout=True, capture_stderr=True)
        )
    except ffmpeg.Error as exc:
        details = ""
        if exc.stderr:
            lines = exc.stderr.decode(errors="ignore").strip().splitlines()
            details = lines[-1] if lines else ""
        raise PreparationError(str(path), f"ffmpeg failed to read video frame. {details}".strip()) from exc

    if not out:
        raise PreparationError(str(path), "ffmpeg returned no video frame")
    return out
