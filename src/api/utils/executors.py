"""Helpers for running blocking engine calls from request handlers."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any, TypeVar

from cover_fallback.tools import ToolAvailability, ToolKind, ToolProber

T = TypeVar("T")


async def run_sync(func: Callable[..., T], /, *args: Any, **kwargs: Any) -> T:
    return await asyncio.to_thread(func, *args, **kwargs)


async def probe_tools(prober: ToolProber) -> dict[ToolKind, ToolAvailability]:
    """Query every tool kind off the event loop; first calls may spawn probes."""

    kinds = list(ToolKind)
    results = await asyncio.gather(*(run_sync(prober.availability, kind) for kind in kinds))
    return dict(zip(kinds, results))


__all__ = ["probe_tools", "run_sync"]
