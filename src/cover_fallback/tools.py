"""Process-wide detection of the external tools used for rendering.

Each tool kind is probed at most once per :class:`ToolProber`; the result is
kept for the lifetime of the prober and never re-checked. The module keeps a
single default prober for the process, reachable through :func:`get_prober`.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
import threading
from dataclasses import dataclass
from enum import Enum
from pathlib import Path


logger = logging.getLogger(__name__)

RASTERIZER_COMMAND = "pdftoppm"
TRANSCODER_COMMAND = "ffmpeg"
BUNDLED_TRANSCODER_PATH = Path("/usr/lib/jellyfin-ffmpeg/ffmpeg")
PROBE_TIMEOUT_S = 5.0


class ToolKind(str, Enum):
    RASTERIZER = "rasterizer"
    TRANSCODER = "transcoder"


@dataclass(frozen=True, slots=True)
class ToolAvailability:
    checked: bool = False
    available: bool = False
    resolved_path: str | None = None


def _probe(command: list[str]) -> bool:
    """Return True when *command* can be started at all; its exit code is ignored."""

    try:
        process = subprocess.Popen(
            command,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
        )
    except OSError as exc:
        logger.debug("Probe of %s failed to start: %s", command[0], exc)
        return False
    try:
        process.wait(timeout=PROBE_TIMEOUT_S)
    except subprocess.TimeoutExpired:
        process.kill()
        process.wait()
    return True


class ToolProber:
    def __init__(
        self,
        *,
        rasterizer_command: str = RASTERIZER_COMMAND,
        transcoder_command: str = TRANSCODER_COMMAND,
        bundled_transcoder_path: Path | None = BUNDLED_TRANSCODER_PATH,
    ) -> None:
        self._rasterizer_command = rasterizer_command
        self._transcoder_command = transcoder_command
        self._bundled_transcoder_path = bundled_transcoder_path
        self._results: dict[ToolKind, ToolAvailability] = {}
        self._locks = {kind: threading.Lock() for kind in ToolKind}

    def availability(self, kind: ToolKind) -> ToolAvailability:
        cached = self._results.get(kind)
        if cached is not None:
            return cached
        with self._locks[kind]:
            cached = self._results.get(kind)
            if cached is None:
                cached = self._detect(kind)
                self._results[kind] = cached
            return cached

    def is_available(self, kind: ToolKind) -> bool:
        return self.availability(kind).available

    def resolve_rasterizer_path(self) -> str | None:
        return self.availability(ToolKind.RASTERIZER).resolved_path

    def resolve_transcoder_path(self) -> str | None:
        return self.availability(ToolKind.TRANSCODER).resolved_path

    def _detect(self, kind: ToolKind) -> ToolAvailability:
        if kind is ToolKind.RASTERIZER:
            return self._detect_rasterizer()
        return self._detect_transcoder()

    def _detect_rasterizer(self) -> ToolAvailability:
        command = self._rasterizer_command
        if self._run_check([command, "-v"]):
            logger.info("%s detected, PDF cover extraction enabled", command)
            return ToolAvailability(checked=True, available=True, resolved_path=_resolve(command))
        logger.warning("%s not found. Install poppler-utils to enable PDF cover extraction", command)
        return ToolAvailability(checked=True, available=False)

    def _detect_transcoder(self) -> ToolAvailability:
        bundled = self._bundled_transcoder_path
        if bundled is not None and bundled.is_file():
            logger.info("Using bundled transcoder at %s", bundled)
            return ToolAvailability(checked=True, available=True, resolved_path=str(bundled))
        command = self._transcoder_command
        if self._run_check([command, "-version"]):
            logger.info("%s detected, embedded audio artwork extraction enabled", command)
            return ToolAvailability(checked=True, available=True, resolved_path=_resolve(command))
        logger.warning("%s not found. Install ffmpeg to enable audiobook cover extraction", command)
        return ToolAvailability(checked=True, available=False)

    def _run_check(self, command: list[str]) -> bool:
        return _probe(command)


def _resolve(command: str) -> str:
    return shutil.which(command) or command


_DEFAULT_PROBER = ToolProber()


def get_prober() -> ToolProber:
    return _DEFAULT_PROBER


def rasterizer_available() -> bool:
    return get_prober().is_available(ToolKind.RASTERIZER)


def transcoder_available() -> bool:
    return get_prober().is_available(ToolKind.TRANSCODER)


def resolve_transcoder_path() -> str | None:
    return get_prober().resolve_transcoder_path()


__all__ = [
    "ToolAvailability",
    "ToolKind",
    "ToolProber",
    "get_prober",
    "rasterizer_available",
    "resolve_transcoder_path",
    "transcoder_available",
]
