from __future__ import annotations

from functools import lru_cache
from typing import Dict, Type

from .audio import AudioAdapter
from .base import Adapter
from .epub import EPUBAdapter
from .pdf import PDFAdapter
from ..detection import SourceKind

_ADAPTER_CLASSES: Dict[SourceKind, Type[Adapter]] = {
    SourceKind.EPUB: EPUBAdapter,
    SourceKind.PDF: PDFAdapter,
    SourceKind.AUDIO: AudioAdapter,
}


@lru_cache(maxsize=len(_ADAPTER_CLASSES))
def get_adapter(source_kind: SourceKind) -> Adapter:
    adapter_cls = _ADAPTER_CLASSES.get(source_kind)
    if not adapter_cls:
        raise KeyError(f"No adapter registered for {source_kind}")
    return adapter_cls()  # type: ignore[return-value]


__all__ = [
    "Adapter",
    "AudioAdapter",
    "EPUBAdapter",
    "PDFAdapter",
    "get_adapter",
]
