from __future__ import annotations

from enum import Enum
from pathlib import Path


class SourceKind(str, Enum):
    EPUB = "epub"
    PDF = "pdf"
    AUDIO = "audio"
    DIRECTORY = "directory"
    UNSUPPORTED = "unsupported"


IMAGE_EXTENSIONS: frozenset[str] = frozenset(
    {".jpg", ".jpeg", ".png", ".gif", ".webp", ".bmp", ".tiff", ".tif"}
)
AUDIO_EXTENSIONS: frozenset[str] = frozenset(
    {".mp3", ".m4a", ".m4b", ".flac", ".ogg", ".opus", ".wma", ".aac", ".wav"}
)

EXTENSION_MAP: dict[str, SourceKind] = {
    ".epub": SourceKind.EPUB,
    ".pdf": SourceKind.PDF,
    **{extension: SourceKind.AUDIO for extension in AUDIO_EXTENSIONS},
}


def classify_source(path: Path) -> SourceKind:
    if path.is_dir():
        return SourceKind.DIRECTORY
    return EXTENSION_MAP.get(path.suffix.lower(), SourceKind.UNSUPPORTED)


def is_audio_file(path: Path) -> bool:
    return path.suffix.lower() in AUDIO_EXTENSIONS


def first_audio_file(directory: Path) -> Path | None:
    """Return the case-insensitively first audio file directly inside *directory*.

    Raises ``OSError`` when the directory cannot be listed.
    """

    candidates = [entry for entry in directory.iterdir() if entry.is_file() and is_audio_file(entry)]
    if not candidates:
        return None
    return min(candidates, key=lambda entry: (entry.name.lower(), entry.name))


__all__ = [
    "AUDIO_EXTENSIONS",
    "EXTENSION_MAP",
    "IMAGE_EXTENSIONS",
    "SourceKind",
    "classify_source",
    "first_audio_file",
    "is_audio_file",
]
