from __future__ import annotations

import os
import stat
import zipfile
from pathlib import Path

import pytest

from cover_fallback.tools import ToolProber


posix_only = pytest.mark.skipif(os.name != "posix", reason="fake tools are POSIX shell scripts")

JPEG_BYTES = b"\xff\xd8\xff\xe0" + b"\x00" * 1200
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 1200


PROBE_GUARD = 'case "$1" in -v|-version) exit 0 ;; esac\n'


def write_script(directory: Path, name: str, body: str, *, probe_guard: bool = True) -> Path:
    """Write an executable shell script; by default it exits at once when probed."""

    script = directory / name
    script.write_text("#!/bin/sh\n" + (PROBE_GUARD if probe_guard else "") + body, encoding="utf-8")
    script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return script


def make_epub(path: Path, entries: dict[str, bytes]) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(path, "w") as archive:
        archive.writestr("mimetype", "application/epub+zip")
        for name, payload in entries.items():
            archive.writestr(name, payload)
    return path


class CountingToolProber(ToolProber):
    """Counts how many times a tool command is actually launched."""

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self.launches = 0

    def _run_check(self, command: list[str]) -> bool:
        self.launches += 1
        return super()._run_check(command)


def make_prober(
    tmp_path: Path,
    *,
    rasterizer: Path | None = None,
    transcoder: Path | None = None,
    bundled: Path | None = None,
) -> CountingToolProber:
    return CountingToolProber(
        rasterizer_command=str(rasterizer or tmp_path / "missing-pdftoppm"),
        transcoder_command=str(transcoder or tmp_path / "missing-ffmpeg"),
        bundled_transcoder_path=bundled,
    )


def process_alive(pid: int) -> bool:
    if Path("/proc").is_dir():
        stat_file = Path(f"/proc/{pid}/stat")
        try:
            state = stat_file.read_text().rsplit(")", 1)[1].split()[0]
        except (OSError, IndexError):
            return False
        return state != "Z"
    try:
        os.kill(pid, 0)
    except ProcessLookupError:
        return False
    return True


@pytest.fixture
def scratch_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "scratch"
    directory.mkdir()
    return directory


@pytest.fixture
def fake_pdftoppm(tmp_path: Path) -> Path:
    """Writes a small JPEG to ``<prefix>.jpg`` and records its arguments."""

    args_file = tmp_path / "pdftoppm.args"
    return write_script(
        tmp_path,
        "pdftoppm",
        f"""if [ "$1" = "-v" ]; then echo "pdftoppm version 0.0" >&2; exit 99; fi
printf '%s\\n' "$@" > '{args_file}'
for last; do :; done
printf '\\377\\330\\377\\340fake-jpeg' > "$last.jpg"
""",
        probe_guard=False,
    )


@pytest.fixture
def artwork_file(tmp_path: Path) -> Path:
    path = tmp_path / "artwork.bin"
    path.write_bytes(PNG_BYTES)
    return path


@pytest.fixture
def fake_ffmpeg(tmp_path: Path, artwork_file: Path) -> Path:
    """Copies ``artwork.bin`` to the output path and records its arguments."""

    args_file = tmp_path / "ffmpeg.args"
    return write_script(
        tmp_path,
        "ffmpeg",
        f"""if [ "$1" = "-version" ]; then echo "ffmpeg version 0.0"; exit 0; fi
printf '%s\\n' "$@" > '{args_file}'
for last; do :; done
cat '{artwork_file}' > "$last"
""",
        probe_guard=False,
    )
