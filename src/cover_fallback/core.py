from __future__ import annotations

import asyncio
import logging
import time
from pathlib import Path
from typing import Sequence

from .adapters import get_adapter
from .config import ExtractionConfig
from .detection import SourceKind, classify_source, first_audio_file
from .models import ExtractionRequest, ExtractionResult
from .runlog import BatchSummary, RunLogEntry, RunLogger
from .tools import ToolProber, get_prober
from .utils import generate_request_id


logger = logging.getLogger(__name__)


class CoverExtractionService:
    """Route each request to the strategy for its file type.

    Every outcome is an :class:`ExtractionResult`; failures are logged and
    reported as "no image". Only cancellation of the calling task propagates.
    """

    def __init__(
        self,
        config: ExtractionConfig | None = None,
        *,
        prober: ToolProber | None = None,
        run_logger: RunLogger | None = None,
    ) -> None:
        self._config = config or ExtractionConfig()
        self._prober = prober or get_prober()
        self._run_logger = run_logger

    @property
    def config(self) -> ExtractionConfig:
        return self._config

    @property
    def prober(self) -> ToolProber:
        return self._prober

    async def extract_cover(self, request: ExtractionRequest) -> ExtractionResult:
        request_id = generate_request_id()
        start = time.perf_counter()
        try:
            result = await self._dispatch(Path(request.source_path))
        except Exception:
            logger.exception("Cover extraction failed for %s", request.source_path)
            result = ExtractionResult.no_image()
        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.debug(
            "%s %s -> %s in %.1fms",
            request.media_kind.value,
            request.source_path,
            result.image_format.value if result.image_format else "no image",
            elapsed_ms,
        )
        if self._run_logger is not None:
            self._append_log(RunLogEntry.from_outcome(request_id, request, result, elapsed_ms))
        return result

    def extract_cover_sync(self, request: ExtractionRequest) -> ExtractionResult:
        return asyncio.run(self.extract_cover(request))

    async def extract_many(
        self, requests: Sequence[ExtractionRequest], *, parallelism: int = 4
    ) -> tuple[list[ExtractionResult], BatchSummary]:
        semaphore = asyncio.Semaphore(max(1, parallelism))

        async def _bounded(request: ExtractionRequest) -> ExtractionResult:
            async with semaphore:
                return await self.extract_cover(request)

        results = list(await asyncio.gather(*(_bounded(request) for request in requests)))
        summary = BatchSummary()
        for result in results:
            summary.record(result)
        return results, summary

    async def _dispatch(self, source: Path) -> ExtractionResult:
        kind = await asyncio.to_thread(classify_source, source)
        if kind is SourceKind.DIRECTORY:
            audio_file = await self._pick_audio_file(source)
            if audio_file is None:
                return ExtractionResult.no_image()
            source, kind = audio_file, SourceKind.AUDIO
        if kind is SourceKind.UNSUPPORTED:
            return ExtractionResult.no_image()
        adapter = get_adapter(kind)
        return await adapter.extract(source, self._config, self._prober)

    async def _pick_audio_file(self, directory: Path) -> Path | None:
        try:
            audio_file = await asyncio.to_thread(first_audio_file, directory)
        except OSError as exc:
            logger.warning("Could not list audiobook directory %s: %s", directory, exc)
            return None
        if audio_file is None:
            logger.debug("No audio files in %s", directory)
        return audio_file

    def _append_log(self, entry: RunLogEntry) -> None:
        try:
            self._run_logger.append(entry)  # type: ignore[union-attr]
        except OSError as exc:
            logger.warning("Could not write run log entry for %s: %s", entry.source, exc)


async def extract_cover(
    request: ExtractionRequest,
    config: ExtractionConfig | None = None,
    *,
    prober: ToolProber | None = None,
) -> ExtractionResult:
    return await CoverExtractionService(config, prober=prober).extract_cover(request)


__all__ = ["CoverExtractionService", "extract_cover"]
