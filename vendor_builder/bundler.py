"""
bundler.py

Responsibility: describe and drive the four webpack invocations.

`plan_targets` is pure and decides entry, mode settings, library naming and
externals for every (artifact, mode) pair. `WebpackBundler` turns one target
into a generated Node driver script and runs it; webpack itself is an
external collaborator.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Protocol

from vendor_builder.config import VendorConfig
from vendor_builder.errors import CompileError, ScriptExecutionError
from vendor_builder.runner import ScriptRunner
from vendor_builder.templating import render_to_file
from vendor_builder.workspace import Workspace

logger = logging.getLogger(__name__)

# Loading conventions a UMD build resolves externals under.
EXTERNAL_CONVENTIONS = ("root", "commonjs", "commonjs2", "amd")


class ArtifactId(str, Enum):
    CORE = "core"
    RENDERER = "renderer"


class Mode(str, Enum):
    PRODUCTION = "production"
    DEVELOPMENT = "development"

    @property
    def minimize(self) -> bool:
        return self is Mode.PRODUCTION


@dataclass(frozen=True)
class BuildTarget:
    artifact: ArtifactId
    mode: Mode
    entry: str
    filename: str
    library: str
    externals: dict[str, dict[str, str]] = field(default_factory=dict)

    @property
    def node_env(self) -> str:
        return self.mode.value

    def describe(self, output_path: Path, node_modules: Path) -> dict[str, Any]:
        """
        The JSON build description handed to the webpack driver script.

        Packages and loaders resolve from `node_modules` first, the same tree
        the installed version is read from.
        """
        # No `library.export`: the whole module namespace becomes the global.
        output: dict[str, Any] = {
            "path": str(output_path),
            "filename": self.filename,
            "library": {"name": self.library, "type": "umd"},
            "globalObject": "this",
            "iife": True,
        }
        if self.artifact is ArtifactId.CORE:
            output["environment"] = {"arrowFunction": True, "const": True}
        return {
            "artifact": self.artifact.value,
            "mode": self.mode.value,
            "minimize": self.mode.minimize,
            "nodeEnv": self.node_env,
            "entry": self.entry,
            "context": str(node_modules.parent),
            "modules": [str(node_modules), "node_modules"],
            "devtool": False,
            "externals": self.externals,
            "output": output,
        }


def artifact_filename(package: str, mode: Mode) -> str:
    if mode is Mode.PRODUCTION:
        return f"{package}.production.min.js"
    return f"{package}.development.js"


def core_externals(config: VendorConfig) -> dict[str, dict[str, str]]:
    """Resolve the core package to the core global under every loading convention."""
    return {config.core.package: {c: config.core.global_name for c in EXTERNAL_CONVENTIONS}}


def plan_targets(config: VendorConfig, renderer_entry: str) -> list[BuildTarget]:
    """
    Return the four targets in build order.

    Core is built before renderer in each mode; the renderer build relies on
    the global name the core build installs.
    """
    targets: list[BuildTarget] = []
    for mode in (Mode.PRODUCTION, Mode.DEVELOPMENT):
        targets.append(
            BuildTarget(
                artifact=ArtifactId.CORE,
                mode=mode,
                entry=config.core.package,
                filename=artifact_filename(config.core.package, mode),
                library=config.core.global_name,
            )
        )
        targets.append(
            BuildTarget(
                artifact=ArtifactId.RENDERER,
                mode=mode,
                entry=renderer_entry,
                filename=artifact_filename(config.renderer.package, mode),
                library=config.renderer.global_name,
                externals=core_externals(config),
            )
        )
    return targets


class Bundler(Protocol):
    async def build(self, target: BuildTarget, workspace: Workspace) -> Path: ...


class WebpackBundler:
    def __init__(self, runner: ScriptRunner) -> None:
        self.runner = runner

    async def build(self, target: BuildTarget, workspace: Workspace) -> Path:
        """Compile one target into the workspace dist dir and return the bundle path."""
        driver = render_to_file(
            "webpack_driver.mjs.j2",
            workspace.script_path(f"webpack-{target.artifact.value}-{target.mode.value}.mjs"),
            {"target": target.describe(workspace.dist_dir, workspace.node_modules)},
        )
        logger.info("Building %s (%s)", target.filename, target.mode.value)
        try:
            await self.runner(driver)
        except ScriptExecutionError as e:
            raise CompileError(f"webpack failed for {target.filename}", diagnostics=e.output) from e

        bundle = workspace.dist_path(target.filename)
        if not bundle.is_file():
            raise CompileError(f"webpack reported success but produced no {target.filename}")
        return bundle
