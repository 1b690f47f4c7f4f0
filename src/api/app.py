from __future__ import annotations

from fastapi import FastAPI

from core.settings import Settings, get_settings
from cover_fallback.config import AppConfig, load_config
from cover_fallback.core import CoverExtractionService
from cover_fallback.tools import ToolProber

from .routers import covers, health, status


def create_app(
    config: AppConfig | None = None,
    *,
    prober: ToolProber | None = None,
    require_enabled: bool = True,
) -> FastAPI:
    config = config or _prepare_config(get_settings())
    if require_enabled and not config.runtime.enable_local_api:
        raise RuntimeError("Local API is disabled. Enable it via configuration or environment.")

    app = FastAPI(title="Book Cover Fallback", version="0.1.0")
    app.state.config = config
    app.state.service = CoverExtractionService(config.extraction, prober=prober)

    app.include_router(health.router)
    app.include_router(status.router)
    app.include_router(covers.router)
    return app


def _prepare_config(settings: Settings) -> AppConfig:
    config = load_config(settings.config_path)
    if settings.enable_local_api is not None:
        config.runtime.enable_local_api = settings.enable_local_api
    return config


__all__ = ["create_app"]
