from __future__ import annotations

import json
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping


CONFIG_FILE = Path("config.toml")

DEFAULT_DPI = 150
DEFAULT_JPEG_QUALITY = 85
DEFAULT_TIMEOUT_S = 30


@dataclass(slots=True)
class ExtractionConfig:
    dpi: int = DEFAULT_DPI
    jpeg_quality: int = DEFAULT_JPEG_QUALITY
    timeout_s: int = DEFAULT_TIMEOUT_S
    scratch_dir: Path | None = None


@dataclass(slots=True)
class RuntimeConfig:
    log_level: str = "INFO"
    log_file: str = "log.jsonl"
    parallelism: int = 4
    enable_local_api: bool = False


@dataclass(slots=True)
class APIConfig:
    host: str = "127.0.0.1"
    port: int = 8000


@dataclass(slots=True)
class AppConfig:
    extraction: ExtractionConfig = field(default_factory=ExtractionConfig)
    runtime: RuntimeConfig = field(default_factory=RuntimeConfig)
    api: APIConfig = field(default_factory=APIConfig)


def _read_toml(path: Path) -> Mapping[str, object]:
    if not path.exists():
        return {}
    with path.open("rb") as handle:
        return tomllib.load(handle)


def _positive_int(value: object, default: int) -> int:
    try:
        number = int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return default
    return number if number > 0 else default


def _quality(value: object) -> int:
    try:
        number = int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return DEFAULT_JPEG_QUALITY
    return max(1, min(number, 100))


def _build_extraction(data: Mapping[str, object] | None) -> ExtractionConfig:
    if not data:
        return ExtractionConfig()
    scratch = data.get("scratch_dir")
    return ExtractionConfig(
        dpi=_positive_int(data.get("dpi", DEFAULT_DPI), DEFAULT_DPI),
        jpeg_quality=_quality(data.get("jpeg_quality", DEFAULT_JPEG_QUALITY)),
        timeout_s=_positive_int(data.get("timeout_s", DEFAULT_TIMEOUT_S), DEFAULT_TIMEOUT_S),
        scratch_dir=Path(str(scratch)) if scratch else None,
    )


def _build_runtime(data: Mapping[str, object] | None) -> RuntimeConfig:
    if not data:
        return RuntimeConfig()
    return RuntimeConfig(
        log_level=str(data.get("log_level", "INFO")).upper(),
        log_file=str(data.get("log_file", "log.jsonl")),
        parallelism=_positive_int(data.get("parallelism", 4), 4),
        enable_local_api=bool(data.get("enable_local_api", False)),
    )


def _build_api(data: Mapping[str, object] | None) -> APIConfig:
    if not data:
        return APIConfig()
    return APIConfig(host=str(data.get("host", "127.0.0.1")), port=int(data.get("port", 8000)))


def _section(raw: Mapping[str, object], name: str) -> Mapping[str, object] | None:
    value = raw.get(name) if isinstance(raw, Mapping) else None
    return value if isinstance(value, Mapping) else None


def load_config(path: Path | None = None) -> AppConfig:
    path = path or CONFIG_FILE
    raw = _read_toml(path)
    return AppConfig(
        extraction=_build_extraction(_section(raw, "extraction")),
        runtime=_build_runtime(_section(raw, "runtime")),
        api=_build_api(_section(raw, "api")),
    )


def dump_config(config: AppConfig) -> str:
    payload = {
        "extraction": {
            "dpi": config.extraction.dpi,
            "jpeg_quality": config.extraction.jpeg_quality,
            "timeout_s": config.extraction.timeout_s,
            "scratch_dir": str(config.extraction.scratch_dir) if config.extraction.scratch_dir else "",
        },
        "runtime": {
            "log_level": config.runtime.log_level,
            "log_file": config.runtime.log_file,
            "parallelism": config.runtime.parallelism,
            "enable_local_api": config.runtime.enable_local_api,
        },
        "api": {
            "host": config.api.host,
            "port": config.api.port,
        },
    }
    return json.dumps(payload, indent=2)
