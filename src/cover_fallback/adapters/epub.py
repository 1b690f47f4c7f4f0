"""Cover lookup inside EPUB files, treated as plain ZIP archives."""

from __future__ import annotations

import asyncio
import logging
import zipfile
import zlib
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Callable, Sequence

from ..config import ExtractionConfig
from ..detection import IMAGE_EXTENSIONS, SourceKind
from ..models import ExtractionResult, ImageFormat
from ..tools import ToolProber


logger = logging.getLogger(__name__)

COVER_NAMES: frozenset[str] = frozenset(
    {"cover", "portada", "front", "frontcover", "front_cover", "book_cover"}
)
COVER_PATH_TOKEN = "cover"
MIN_FALLBACK_SIZE = 5000

EXTENSION_FORMATS: dict[str, ImageFormat] = {
    ".png": ImageFormat.PNG,
    ".gif": ImageFormat.GIF,
    ".webp": ImageFormat.WEBP,
    ".bmp": ImageFormat.BMP,
}

ARCHIVE_ERRORS = (
    zipfile.BadZipFile,
    zlib.error,
    OSError,
    EOFError,
    NotImplementedError,
    RuntimeError,
)


@dataclass(frozen=True, slots=True)
class ArchiveImageCandidate:
    info: zipfile.ZipInfo
    size: int
    path: str
    stem: str
    extension: str

    @classmethod
    def from_info(cls, info: zipfile.ZipInfo) -> ArchiveImageCandidate:
        name = PurePosixPath(info.filename.replace("\\", "/"))
        return cls(
            info=info,
            size=info.file_size,
            path=info.filename,
            stem=name.stem.lower(),
            extension=name.suffix.lower(),
        )

    @property
    def image_format(self) -> ImageFormat:
        return EXTENSION_FORMATS.get(self.extension, ImageFormat.JPEG)


def collect_candidates(entries: Sequence[zipfile.ZipInfo]) -> list[ArchiveImageCandidate]:
    candidates: list[ArchiveImageCandidate] = []
    for info in entries:
        if info.is_dir():
            continue
        candidate = ArchiveImageCandidate.from_info(info)
        if candidate.extension in IMAGE_EXTENSIONS:
            candidates.append(candidate)
    return candidates


def _largest(
    candidates: Sequence[ArchiveImageCandidate],
    predicate: Callable[[ArchiveImageCandidate], bool],
) -> ArchiveImageCandidate | None:
    matches = [candidate for candidate in candidates if predicate(candidate)]
    if not matches:
        return None
    return max(matches, key=lambda candidate: candidate.size)


def select_candidate(candidates: Sequence[ArchiveImageCandidate]) -> ArchiveImageCandidate | None:
    """Pick the cover entry: exact cover name, then "cover" in the path, then size.

    Each tier is only consulted when the previous one matched nothing. Within
    a tier the largest entry wins. The size tier ignores entries of
    ``MIN_FALLBACK_SIZE`` bytes or less.
    """

    return (
        _largest(candidates, lambda c: c.stem in COVER_NAMES)
        or _largest(candidates, lambda c: COVER_PATH_TOKEN in c.path.lower())
        or _largest(candidates, lambda c: c.size > MIN_FALLBACK_SIZE)
    )


def locate_cover(archive_path: Path) -> ExtractionResult:
    try:
        with zipfile.ZipFile(archive_path) as archive:
            candidate = select_candidate(collect_candidates(archive.infolist()))
            if candidate is None:
                logger.debug("No cover candidate in %s", archive_path)
                return ExtractionResult.no_image()
            data = archive.read(candidate.info)
    except ARCHIVE_ERRORS as exc:
        logger.warning("Could not read archive %s: %s", archive_path, exc)
        return ExtractionResult.no_image()

    if not data:
        return ExtractionResult.no_image()
    logger.debug("Selected %s (%d bytes) from %s", candidate.path, len(data), archive_path)
    return ExtractionResult.with_image(data, candidate.image_format)


class EPUBAdapter:
    source_kind = SourceKind.EPUB

    async def extract(
        self, source: Path, config: ExtractionConfig, prober: ToolProber
    ) -> ExtractionResult:
        try:
            return await asyncio.to_thread(locate_cover, source)
        except Exception:
            logger.exception("Failed to extract EPUB cover for %s", source)
            return ExtractionResult.no_image()


__all__ = [
    "ArchiveImageCandidate",
    "COVER_NAMES",
    "EPUBAdapter",
    "MIN_FALLBACK_SIZE",
    "collect_candidates",
    "locate_cover",
    "select_candidate",
]
