from __future__ import annotations

from pathlib import Path
from typing import Protocol

from ..config import ExtractionConfig
from ..detection import SourceKind
from ..models import ExtractionResult
from ..tools import ToolProber


class Adapter(Protocol):
    source_kind: SourceKind

    async def extract(
        self, source: Path, config: ExtractionConfig, prober: ToolProber
    ) -> ExtractionResult:  # pragma: no cover - interface
        ...


__all__ = ["Adapter"]
