from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from ..config import DEFAULT_DPI, DEFAULT_JPEG_QUALITY, DEFAULT_TIMEOUT_S, ExtractionConfig
from ..detection import SourceKind
from ..models import ExtractionResult, ImageFormat
from ..process import RenderInvocation, run_invocation
from ..tools import ToolKind, ToolProber, get_prober
from ..utils import remove_quietly, scratch_path


logger = logging.getLogger(__name__)


def build_rasterizer_invocation(
    executable: str,
    source: Path,
    output_prefix: Path,
    *,
    dpi: int,
    jpeg_quality: int,
    timeout_s: float,
) -> RenderInvocation:
    arguments = (
        "-jpeg",
        "-jpegopt",
        f"quality={jpeg_quality}",
        "-f",
        "1",
        "-l",
        "1",
        "-r",
        str(dpi),
        "-singlefile",
        str(source),
        str(output_prefix),
    )
    return RenderInvocation(
        executable=executable,
        arguments=arguments,
        timeout_s=timeout_s,
        output_path=output_prefix.with_name(output_prefix.name + ".jpg"),
    )


async def render_pdf_first_page(
    pdf_path: Path,
    dpi: int = DEFAULT_DPI,
    jpeg_quality: int = DEFAULT_JPEG_QUALITY,
    timeout_s: float = DEFAULT_TIMEOUT_S,
    *,
    prober: ToolProber | None = None,
    scratch_dir: Path | None = None,
) -> ExtractionResult:
    prober = prober or get_prober()
    available = await asyncio.to_thread(prober.availability, ToolKind.RASTERIZER)
    if not available.available or available.resolved_path is None:
        return ExtractionResult.no_image()

    with scratch_path(scratch_dir, "cover-pdf", ".jpg") as output_path:
        invocation = build_rasterizer_invocation(
            available.resolved_path,
            pdf_path,
            output_path.with_suffix(""),
            dpi=dpi,
            jpeg_quality=jpeg_quality,
            timeout_s=timeout_s,
        )
        try:
            outcome = await run_invocation(invocation)
            if outcome.timed_out:
                logger.warning("pdftoppm timed out after %ss for %s", timeout_s, pdf_path)
                return ExtractionResult.no_image()
            if not outcome.exited_cleanly or not output_path.exists():
                logger.warning(
                    "pdftoppm exit %s for %s: %s", outcome.returncode, pdf_path, outcome.stderr
                )
                return ExtractionResult.no_image()
            data = await asyncio.to_thread(output_path.read_bytes)
            remove_quietly(output_path)
        except asyncio.CancelledError:
            logger.debug("PDF cover extraction cancelled for %s", pdf_path)
            raise
        except Exception:
            logger.exception("Failed to extract PDF cover for %s", pdf_path)
            return ExtractionResult.no_image()

    if not data:
        return ExtractionResult.no_image()
    return ExtractionResult.with_image(data, ImageFormat.JPEG)


class PDFAdapter:
    source_kind = SourceKind.PDF

    async def extract(
        self, source: Path, config: ExtractionConfig, prober: ToolProber
    ) -> ExtractionResult:
        return await render_pdf_first_page(
            source,
            config.dpi,
            config.jpeg_quality,
            config.timeout_s,
            prober=prober,
            scratch_dir=config.scratch_dir,
        )


__all__ = ["PDFAdapter", "build_rasterizer_invocation", "render_pdf_first_page"]
