"""Asset-related services (e.g., product image downloads).

Network I/O is isolated here to keep the engine and test flows clean and mockable.
"""
from __future__ import annotations

import logging
import os
import ssl
import urllib.parse
import urllib.request
from typing import Optional

from .errors import AssetDownloadError


logger = logging.getLogger(__name__)

ABSOLUTE_SCHEMES = ("http://", "https://", "file://")


def resolve_image_url(reference: str, base_url: Optional[str] = None) -> str:
    """Resolve a catalog image reference to something ``fetch_image_bytes`` can read.

    Absolute URIs pass through unchanged; relative references are joined to
    ``base_url`` when one is known, otherwise returned as local paths.
    Raises ``AssetDownloadError`` for an empty reference.
    """
    ref = (reference or "").strip()
    if not ref:
        raise AssetDownloadError("Empty image reference")
    if ref.startswith(ABSOLUTE_SCHEMES):
        return ref
    if base_url:
        # "/x.jpg" resolves against the origin, "x.jpg" against the base path
        return urllib.parse.urljoin(base_url.rstrip('/') + '/', ref)
    return ref


def fetch_image_bytes(url: str, timeout: float = 10) -> bytes:
    """Return the raw bytes of an image URL or local path.

    Raises ``AssetDownloadError`` on any failure.
    """
    logger.info("Fetching image: %s", url)

    if url.startswith("file://") or not url.startswith(("http://", "https://")):
        path = urllib.request.url2pathname(urllib.parse.urlparse(url).path) if url.startswith("file://") else url
        try:
            with open(os.path.expanduser(path), "rb") as f:
                return f.read()
        except OSError as e:
            logger.error("Failed to read image %s: %s", path, e)
            raise AssetDownloadError(str(e))

    ssl_context = ssl.create_default_context()
    ssl_context.check_hostname = False
    ssl_context.verify_mode = ssl.CERT_NONE

    try:
        request = urllib.request.Request(url, headers={"User-Agent": "Mozilla/5.0"})
        with urllib.request.urlopen(request, context=ssl_context, timeout=timeout) as response:
            data = response.read()
        logger.debug("Fetched %s (%d bytes)", url, len(data))
        return data
    except Exception as e:
        logger.error("Failed to download image from %s: %s", url, e)
        raise AssetDownloadError(str(e))
