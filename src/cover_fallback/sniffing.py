from __future__ import annotations

from .models import ImageFormat


JPEG_MAGIC = b"\xff\xd8\xff"
PNG_MAGIC = b"\x89PNG"
GIF_MAGIC = b"GIF"
RIFF_MAGIC = b"RIFF"
WEBP_MARKER = b"WEBP"

MIN_HEADER_BYTES = 4


def detect_format(data: bytes) -> ImageFormat | None:
    """Identify the image format from leading bytes, ignoring any declared label.

    Only JPEG, PNG, GIF and WEBP are recognised. WEBP needs both the ``RIFF``
    header at offset 0 and the ``WEBP`` marker at offset 8.
    """

    if len(data) < MIN_HEADER_BYTES:
        return None
    if data[:3] == JPEG_MAGIC:
        return ImageFormat.JPEG
    if data[:4] == PNG_MAGIC:
        return ImageFormat.PNG
    if data[:3] == GIF_MAGIC:
        return ImageFormat.GIF
    if data[:4] == RIFF_MAGIC and data[8:12] == WEBP_MARKER:
        return ImageFormat.WEBP
    return None


__all__ = ["detect_format"]
