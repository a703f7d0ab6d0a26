# src/__init__.py — v1
"""mediatagger: SEO metadata for stock images and videos."""

from mediatagger.version import __version__

__all__ = ["__version__"]
