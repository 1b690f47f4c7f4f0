from __future__ import annotations

import hashlib
import logging
import os
import re
import tempfile
import time
import uuid
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator


logger = logging.getLogger(__name__)

SAFE_FILENAME_RE = re.compile(r"[^A-Za-z0-9._-]+")


def slugify(value: str, max_length: int = 120) -> str:
    normalized = SAFE_FILENAME_RE.sub("-", value.strip())
    normalized = re.sub("-+", "-", normalized)
    normalized = normalized.replace("-.", ".")
    normalized = normalized.strip("-._")
    if not normalized:
        normalized = "file"
    if len(normalized) > max_length:
        normalized = normalized[:max_length]
    return normalized


def generate_token() -> str:
    return uuid.uuid4().hex


def generate_request_id(prefix: str = "cover") -> str:
    epoch_ms = int(time.time() * 1000)
    random_bits = hashlib.sha256(os.urandom(16)).hexdigest()[:8]
    return f"{prefix}-{epoch_ms}-{random_bits}"


def truncate(text: str, limit: int = 200) -> str:
    return text if len(text) <= limit else text[:limit]


def resolve_scratch_dir(directory: Path | None) -> Path:
    if directory is None:
        return Path(tempfile.gettempdir())
    directory.mkdir(parents=True, exist_ok=True)
    return directory


def remove_quietly(path: Path) -> None:
    try:
        path.unlink(missing_ok=True)
    except OSError as exc:
        logger.warning("Could not remove temporary file %s: %s", path, exc)


@contextmanager
def scratch_path(directory: Path | None, prefix: str, suffix: str = "") -> Iterator[Path]:
    """Reserve a unique temp file name and delete whatever is left there on exit.

    The file itself is not created; external tools write to it.
    """

    path = resolve_scratch_dir(directory) / f"{prefix}-{generate_token()}{suffix}"
    try:
        yield path
    finally:
        remove_quietly(path)


__all__ = [
    "generate_request_id",
    "generate_token",
    "remove_quietly",
    "resolve_scratch_dir",
    "scratch_path",
    "slugify",
    "truncate",
]
