"""
minify.py

Responsibility: minify production bundles with terser through a Node driver script.
"""

from __future__ import annotations

import itertools
import logging
from typing import Any, Protocol

from vendor_builder.errors import MinificationError, ScriptExecutionError
from vendor_builder.runner import ScriptRunner
from vendor_builder.templating import render_to_file, write_source
from vendor_builder.workspace import Workspace

logger = logging.getLogger(__name__)

TERSER_PROFILE: dict[str, Any] = {
    "compress": {
        "dead_code": True,
        "drop_console": True,
        "drop_debugger": True,
        "passes": 1,
        "unused": True,
    },
    "mangle": False,
    "format": {
        "comments": False,
        "ascii_only": True,
    },
}


class Minifier(Protocol):
    async def minify(self, source: str, *, name: str) -> str: ...


class TerserMinifier:
    def __init__(self, runner: ScriptRunner, workspace: Workspace, profile: dict[str, Any] | None = None) -> None:
        self.runner = runner
        self.workspace = workspace
        self.profile = profile if profile is not None else TERSER_PROFILE
        self._counter = itertools.count()

    async def minify(self, source: str, *, name: str) -> str:
        n = next(self._counter)
        input_path = write_source(self.workspace.script_path(f"terser-in-{n}.js"), source)
        output_path = self.workspace.script_path(f"terser-out-{n}.js")
        driver = render_to_file(
            "terser_driver.mjs.j2",
            self.workspace.script_path(f"terser-{n}.mjs"),
            {
                "profile": self.profile,
                "input_path": str(input_path),
                "output_path": str(output_path),
            },
        )
        logger.info("Minifying %s", name)
        try:
            await self.runner(driver)
            return output_path.read_text(encoding="utf-8")
        except ScriptExecutionError as e:
            raise MinificationError(f"terser failed for {name}\n{e.output}".rstrip()) from e
        except OSError as e:
            raise MinificationError(f"terser produced no output for {name}") from e
