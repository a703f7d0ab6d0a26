# src/preparation/base_preparer.py — v1
"""Abstract image preparation interface.

A preparer turns a media file into a size-bounded encoded image suitable
for a vision model: first frame for videos, downscaled JPEG for images.
"""

from __future__ import annotations

import base64
from abc import ABC, abstractmethod

from pydantic import BaseModel

_MB = 1024 * 1024


class PreparedImage(BaseModel):
    """Encoded visual content of one media file."""

    source_path: str
    data: bytes
    media_type: str = "image/jpeg"
    width: int | None = None
    height: int | None = None

    @property
    def size_bytes(self) -> int:
        return len(self.data)

    @property
    def size_mb(self) -> float:
        return self.size_bytes / _MB

    @property
    def base64(self) -> str:
        """Text form of the payload, as sent to HTTP vision APIs."""
        return base64.b64encode(self.data).decode("ascii")


class BaseImagePreparer(ABC):
    """Unified interface for image preparation backends."""

    @abstractmethod
    async def prepare(self, file_path: str) -> PreparedImage:
        """Return the encoded image for ``file_path``.

        Raises:
            PreparationError: If the file is missing, unreadable, unsupported,
                or cannot be encoded under the size bound.
        """

    @property
    @abstractmethod
    def supported_extensions(self) -> list[str]:
        """Lower-case file extensions this preparer accepts (with dot)."""
