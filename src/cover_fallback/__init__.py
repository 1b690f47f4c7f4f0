"""Fallback cover extraction for PDF, EPUB and audiobook files."""

from .config import AppConfig, ExtractionConfig, load_config
from .core import CoverExtractionService, extract_cover
from .models import ExtractionRequest, ExtractionResult, ImageFormat, MediaKind
from .sniffing import detect_format
from .tools import (
    ToolKind,
    ToolProber,
    get_prober,
    rasterizer_available,
    resolve_transcoder_path,
    transcoder_available,
)

__all__ = [
    "AppConfig",
    "CoverExtractionService",
    "ExtractionConfig",
    "ExtractionRequest",
    "ExtractionResult",
    "ImageFormat",
    "MediaKind",
    "ToolKind",
    "ToolProber",
    "detect_format",
    "extract_cover",
    "get_prober",
    "load_config",
    "rasterizer_available",
    "resolve_transcoder_path",
    "transcoder_available",
]
