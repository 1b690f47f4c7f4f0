from __future__ import annotations

from pydantic import BaseModel


class HealthStatus(BaseModel):
    status: str


class ToolStatus(BaseModel):
    rasterizer_available: bool
    transcoder_available: bool
    transcoder_path: str | None = None


__all__ = ["HealthStatus", "ToolStatus"]
