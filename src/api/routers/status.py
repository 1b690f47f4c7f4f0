from __future__ import annotations

from fastapi import APIRouter, Depends

from api.dependencies import get_prober
from api.schemas import ToolStatus
from api.utils import probe_tools
from cover_fallback.tools import ToolKind, ToolProber

router = APIRouter(tags=["status"])


@router.get("/status", summary="External tool availability", response_model=ToolStatus)
async def tool_status(prober: ToolProber = Depends(get_prober)) -> ToolStatus:
    tools = await probe_tools(prober)
    transcoder = tools[ToolKind.TRANSCODER]
    return ToolStatus(
        rasterizer_available=tools[ToolKind.RASTERIZER].available,
        transcoder_available=transcoder.available,
        transcoder_path=transcoder.resolved_path,
    )


__all__ = ["router"]
