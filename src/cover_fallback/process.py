"""Bounded-lifetime execution of external rendering tools."""

from __future__ import annotations

import asyncio
import logging
import os
import signal
import subprocess
from dataclasses import dataclass
from pathlib import Path

from .utils import truncate


logger = logging.getLogger(__name__)

KILL_GRACE_S = 2.0
STDERR_EXCERPT_CHARS = 200


@dataclass(frozen=True, slots=True)
class RenderInvocation:
    executable: str
    arguments: tuple[str, ...]
    timeout_s: float
    output_path: Path

    @property
    def command(self) -> list[str]:
        return [self.executable, *self.arguments]


@dataclass(frozen=True, slots=True)
class ProcessOutcome:
    returncode: int | None
    stderr: str = ""
    timed_out: bool = False

    @property
    def exited_cleanly(self) -> bool:
        return not self.timed_out and self.returncode == 0


def _kill_tree(process: asyncio.subprocess.Process) -> None:
    # The group can outlive its leader: a child may still hold the stderr pipe.
    try:
        if os.name == "posix":
            os.killpg(process.pid, signal.SIGKILL)
        elif process.returncode is None:
            process.kill()
    except ProcessLookupError:
        pass
    except OSError as exc:
        logger.warning("Could not kill process %s: %s", process.pid, exc)


async def _terminate(process: asyncio.subprocess.Process) -> None:
    _kill_tree(process)
    try:
        await asyncio.wait_for(process.wait(), KILL_GRACE_S)
    except asyncio.TimeoutError:
        logger.warning("Process %s did not exit within %.1fs of being killed", process.pid, KILL_GRACE_S)
        return
    if process.stderr is not None:
        try:
            await asyncio.wait_for(process.stderr.read(), KILL_GRACE_S)
        except asyncio.TimeoutError:
            logger.warning("Error output of process %s still open after kill", process.pid)


async def run_invocation(invocation: RenderInvocation) -> ProcessOutcome:
    """Run *invocation* until it exits or its timeout elapses.

    The tool is started in its own session so that a timeout or a cancelled
    caller kills the tool together with any children it spawned. Cancellation
    is re-raised after the kill; a timeout is reported through the outcome.
    """

    process = await asyncio.create_subprocess_exec(
        *invocation.command,
        stdin=subprocess.DEVNULL,
        stdout=subprocess.DEVNULL,
        stderr=subprocess.PIPE,
        start_new_session=True,
    )
    try:
        _, stderr = await asyncio.wait_for(process.communicate(), invocation.timeout_s)
    except asyncio.TimeoutError:
        await _terminate(process)
        return ProcessOutcome(returncode=process.returncode, timed_out=True)
    except asyncio.CancelledError:
        await asyncio.shield(_terminate(process))
        raise
    text = (stderr or b"").decode("utf-8", errors="replace")
    return ProcessOutcome(returncode=process.returncode, stderr=truncate(text.strip(), STDERR_EXCERPT_CHARS))


__all__ = ["ProcessOutcome", "RenderInvocation", "run_invocation"]
