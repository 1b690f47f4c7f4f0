from __future__ import annotations

import json
import threading
import time
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

from .models import ExtractionRequest, ExtractionResult


@dataclass(slots=True)
class RunLogEntry:
    request_id: str
    source: str
    media_kind: str
    status: str
    image_format: str | None
    size_bytes: int
    elapsed_ms: float

    @classmethod
    def from_outcome(
        cls,
        request_id: str,
        request: ExtractionRequest,
        result: ExtractionResult,
        elapsed_ms: float,
    ) -> RunLogEntry:
        return cls(
            request_id=request_id,
            source=str(request.source_path),
            media_kind=request.media_kind.value,
            status="image" if result.has_image else "no_image",
            image_format=result.image_format.value if result.image_format else None,
            size_bytes=len(result.image) if result.image else 0,
            elapsed_ms=round(elapsed_ms, 2),
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class RunLogger:
    def __init__(self, log_file: Path) -> None:
        self._log_file = log_file
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._log_file

    def append(self, entry: RunLogEntry) -> None:
        line = json.dumps(entry.to_dict(), ensure_ascii=False)
        with self._lock:
            self._log_file.parent.mkdir(parents=True, exist_ok=True)
            with self._log_file.open("a", encoding="utf-8") as handle:
                handle.write(line + "\n")


@dataclass(slots=True)
class BatchSummary:
    timestamp: float = field(default_factory=time.time)
    total: int = 0
    images: int = 0
    misses: int = 0
    formats: dict[str, int] = field(default_factory=dict)

    def record(self, result: ExtractionResult) -> None:
        self.total += 1
        if result.image_format is None:
            self.misses += 1
            return
        self.images += 1
        key = result.image_format.value
        self.formats[key] = self.formats.get(key, 0) + 1


__all__ = ["BatchSummary", "RunLogEntry", "RunLogger"]
