from __future__ import annotations

from pathlib import Path

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from api.dependencies import get_service
from cover_fallback.core import CoverExtractionService
from cover_fallback.models import ExtractionRequest, MediaKind

router = APIRouter(tags=["covers"])


@router.get("/cover", summary="Extract a cover image from a local file")
async def get_cover(
    path: str = Query(..., description="Book file, audio file or audiobook directory"),
    kind: MediaKind = Query(MediaKind.BOOK),
    service: CoverExtractionService = Depends(get_service),
) -> Response:
    request = ExtractionRequest(source_path=Path(path), media_kind=kind)
    result = await service.extract_cover(request)
    if result.image is None or result.image_format is None:
        raise HTTPException(status_code=404, detail="NO_IMAGE")
    return Response(content=result.image, media_type=result.image_format.mime_type)


__all__ = ["router"]
