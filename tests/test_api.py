from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from conftest import make_epub, make_prober

from api.app import create_app
from cover_fallback.config import AppConfig, ExtractionConfig, RuntimeConfig


def build_client(tmp_path: Path, bundled: Path | None = None) -> TestClient:
    config = AppConfig(
        extraction=ExtractionConfig(scratch_dir=tmp_path / "scratch"),
        runtime=RuntimeConfig(enable_local_api=True),
    )
    return TestClient(create_app(config, prober=make_prober(tmp_path, bundled=bundled)))


def test_disabled_api_refuses_to_start(tmp_path: Path) -> None:
    with pytest.raises(RuntimeError):
        create_app(AppConfig(), prober=make_prober(tmp_path))


def test_health(tmp_path: Path) -> None:
    response = build_client(tmp_path).get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_status_reports_tool_availability(tmp_path: Path) -> None:
    bundled = tmp_path / "ffmpeg"
    bundled.write_bytes(b"")
    response = build_client(tmp_path, bundled=bundled).get("/status")
    assert response.status_code == 200
    assert response.json() == {
        "rasterizer_available": False,
        "transcoder_available": True,
        "transcoder_path": str(bundled),
    }


def test_cover_returns_image_bytes(tmp_path: Path) -> None:
    payload = b"GIF89a" + b"\x00" * 64
    epub = make_epub(tmp_path / "book.epub", {"Images/front_cover.gif": payload})
    response = build_client(tmp_path).get("/cover", params={"path": str(epub)})
    assert response.status_code == 200
    assert response.headers["content-type"] == "image/gif"
    assert response.content == payload


def test_cover_without_image_is_404(tmp_path: Path) -> None:
    source = tmp_path / "notes.txt"
    source.write_text("no cover here")
    response = build_client(tmp_path).get("/cover", params={"path": str(source), "kind": "audiobook"})
    assert response.status_code == 404
    assert response.json()["detail"] == "NO_IMAGE"


def test_cover_rejects_unknown_kind(tmp_path: Path) -> None:
    response = build_client(tmp_path).get("/cover", params={"path": "x.pdf", "kind": "movie"})
    assert response.status_code == 422
