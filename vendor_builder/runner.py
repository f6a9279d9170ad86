"""
runner.py

Responsibility: run a generated script in a separate interpreter process.

The script never shares the orchestrating process's module graph; the only
channel back is its captured standard output. There is no timeout: a hung
script blocks the run.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from pathlib import Path

from vendor_builder.errors import ScriptExecutionError

logger = logging.getLogger(__name__)

# Anything that runs a script file and returns its stdout.
ScriptRunner = Callable[[Path], Awaitable[str]]


class NodeScriptRunner:
    """Run scripts with the Node executable (or any interpreter given as `executable`)."""

    def __init__(self, executable: str = "node", *, args: Sequence[str] = (), cwd: Path | None = None) -> None:
        self.executable = executable
        self.args = tuple(args)
        self.cwd = cwd

    async def __call__(self, script: Path) -> str:
        cmd = [self.executable, *self.args, str(script)]
        logger.debug("Running %s", " ".join(cmd))
        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=str(self.cwd) if self.cwd is not None else None,
            )
        except OSError as e:
            raise ScriptExecutionError(str(script), -1, stderr=f"Could not start {self.executable}: {e}") from e

        # create_subprocess_exec has no text mode; decode here.
        stdout_b, stderr_b = await process.communicate()
        stdout = stdout_b.decode("utf-8", errors="replace") if stdout_b is not None else ""
        stderr = stderr_b.decode("utf-8", errors="replace") if stderr_b is not None else ""

        if process.returncode != 0:
            raise ScriptExecutionError(str(script), process.returncode or -1, stdout=stdout, stderr=stderr)
        if stderr.strip():
            logger.debug("%s stderr:\n%s", script.name, stderr.rstrip())
        return stdout.strip()
