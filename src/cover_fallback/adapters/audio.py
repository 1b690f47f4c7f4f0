from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from ..config import DEFAULT_TIMEOUT_S, ExtractionConfig
from ..detection import SourceKind
from ..models import ExtractionResult
from ..process import RenderInvocation, run_invocation
from ..sniffing import detect_format
from ..tools import ToolKind, ToolProber, get_prober
from ..utils import remove_quietly, scratch_path


logger = logging.getLogger(__name__)

MIN_ARTWORK_BYTES = 1000


def build_transcoder_invocation(
    executable: str, source: Path, output_path: Path, *, timeout_s: float
) -> RenderInvocation:
    # Stream copy keeps the embedded bytes as stored; the output suffix only
    # selects the single-image muxer.
    arguments = (
        "-v",
        "error",
        "-y",
        "-i",
        str(source),
        "-an",
        "-c:v",
        "copy",
        str(output_path),
    )
    return RenderInvocation(
        executable=executable,
        arguments=arguments,
        timeout_s=timeout_s,
        output_path=output_path,
    )


async def extract_embedded_audio_art(
    audio_path: Path,
    timeout_s: float = DEFAULT_TIMEOUT_S,
    *,
    prober: ToolProber | None = None,
    scratch_dir: Path | None = None,
) -> ExtractionResult:
    """Copy the attached picture out of *audio_path* and trust only its bytes.

    The format of the result comes from sniffing, never from the container's
    codec tag.
    """

    prober = prober or get_prober()
    available = await asyncio.to_thread(prober.availability, ToolKind.TRANSCODER)
    if not available.available or available.resolved_path is None:
        return ExtractionResult.no_image()

    with scratch_path(scratch_dir, "cover-art", ".jpg") as output_path:
        invocation = build_transcoder_invocation(
            available.resolved_path, audio_path, output_path, timeout_s=timeout_s
        )
        try:
            outcome = await run_invocation(invocation)
            if outcome.timed_out:
                logger.warning("ffmpeg timed out after %ss for %s", timeout_s, audio_path)
                return ExtractionResult.no_image()
            if not outcome.exited_cleanly or not output_path.exists():
                logger.warning(
                    "ffmpeg exit %s for %s: %s", outcome.returncode, audio_path, outcome.stderr
                )
                return ExtractionResult.no_image()
            data = await asyncio.to_thread(output_path.read_bytes)
            remove_quietly(output_path)
        except asyncio.CancelledError:
            logger.debug("Audio artwork extraction cancelled for %s", audio_path)
            raise
        except Exception:
            logger.exception("Failed to extract embedded artwork for %s", audio_path)
            return ExtractionResult.no_image()

    if len(data) < MIN_ARTWORK_BYTES:
        logger.debug("Embedded artwork in %s is only %d bytes, ignoring", audio_path, len(data))
        return ExtractionResult.no_image()
    image_format = detect_format(data)
    if image_format is None:
        logger.warning("Embedded artwork in %s is not a recognised image", audio_path)
        return ExtractionResult.no_image()
    return ExtractionResult.with_image(data, image_format)


class AudioAdapter:
    source_kind = SourceKind.AUDIO

    async def extract(
        self, source: Path, config: ExtractionConfig, prober: ToolProber
    ) -> ExtractionResult:
        return await extract_embedded_audio_art(
            source, config.timeout_s, prober=prober, scratch_dir=config.scratch_dir
        )


__all__ = ["AudioAdapter", "MIN_ARTWORK_BYTES", "build_transcoder_invocation", "extract_embedded_audio_art"]
