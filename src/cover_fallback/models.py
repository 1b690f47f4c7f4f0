"""Domain models for cover extraction requests and results."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class MediaKind(str, Enum):
    BOOK = "book"
    AUDIOBOOK = "audiobook"


class ImageFormat(str, Enum):
    JPEG = "jpeg"
    PNG = "png"
    GIF = "gif"
    WEBP = "webp"
    BMP = "bmp"

    @property
    def mime_type(self) -> str:
        return f"image/{self.value}"

    @property
    def extension(self) -> str:
        if self is ImageFormat.JPEG:
            return ".jpg"
        return f".{self.value}"


@dataclass(frozen=True, slots=True)
class ExtractionRequest:
    """A single cover lookup for a book file or an audiobook file/directory."""

    source_path: Path
    media_kind: MediaKind = MediaKind.BOOK


@dataclass(frozen=True, slots=True)
class ExtractionResult:
    """Terminal outcome of a request: either image bytes with a format, or nothing."""

    image: bytes | None = None
    image_format: ImageFormat | None = None

    def __post_init__(self) -> None:
        if (self.image is None) != (self.image_format is None):
            raise ValueError("image bytes and image format must be set together")
        if self.image is not None and not self.image:
            raise ValueError("an extracted image cannot be empty")

    @property
    def has_image(self) -> bool:
        return self.image is not None

    @classmethod
    def no_image(cls) -> ExtractionResult:
        return cls()

    @classmethod
    def with_image(cls, image: bytes, image_format: ImageFormat) -> ExtractionResult:
        return cls(image=bytes(image), image_format=image_format)


__all__ = [
    "ExtractionRequest",
    "ExtractionResult",
    "ImageFormat",
    "MediaKind",
]
