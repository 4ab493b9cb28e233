# File: app/core/process.py

import asyncio
import logging
from dataclasses import dataclass
from typing import List, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProcessResult:
    returncode: int
    stdout: str
    stderr: str


async def run_process(cmd: List[str], timeout: Optional[float] = None) -> ProcessResult:
    """
    Runs an external tool without blocking the event loop.
    If the caller is cancelled (or the timeout expires) the child process is killed and reaped.

    Raises:
        OSError: If the binary cannot be started.
        asyncio.TimeoutError: If the timeout expires.
    """
    logger.debug(f"Executing: {' '.join(cmd)}")
    proc = await asyncio.create_subprocess_exec(
        *cmd,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE
    )
    try:
        stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout)
    except BaseException:
        if proc.returncode is None:
            proc.kill()
            await proc.wait()
        raise

    return ProcessResult(
        returncode=proc.returncode,
        stdout=stdout.decode(errors="replace") if stdout else "",
        stderr=stderr.decode(errors="replace") if stderr else ""
    )
