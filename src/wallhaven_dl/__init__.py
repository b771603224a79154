"""wallhaven-dl core library.

This package crawls a paginated wallpaper search listing, resolves each
result to its full-size image, and downloads the images to a local directory.

Repo rules:
- Every network request goes through one rate-limited HttpClient.
- Discovery finishes before any asset is downloaded.
"""

from __future__ import annotations

__all__ = ["__version__"]

__version__ = "0.1.0"
