"""
pipeline.py

Responsibility: run one vendoring pass end to end.

Flow:
1) Read the installed core version (fails before any directory is created)
2) Open the workspace scope
3) Pick the entry strategy and resolve the renderer entry
4) Build core/renderer x production/development, one at a time
5) Finish (minify production, banner all) and emit the four assets
6) Close the workspace scope

Collaborators (script runner, bundler, minifier, surface provider) can be
injected; the defaults drive Node, webpack and terser.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path

from vendor_builder.bundler import Bundler, BuildTarget, WebpackBundler, plan_targets
from vendor_builder.config import VendorConfig
from vendor_builder.finisher import Artifact, AssetFinisher, emit_assets
from vendor_builder.minify import Minifier, TerserMinifier
from vendor_builder.runner import NodeScriptRunner, ScriptRunner
from vendor_builder.strategy import default_surface_provider, select_strategy
from vendor_builder.surface import SurfaceProvider
from vendor_builder.versioning import LibraryVersion, read_installed_version
from vendor_builder.workspace import open_workspace

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PipelineResult:
    version: LibraryVersion
    strategy: str
    artifacts: list[Artifact]
    paths: list[Path]


class VendorPipeline:
    def __init__(
        self,
        config: VendorConfig,
        *,
        runner: ScriptRunner | None = None,
        bundler: Bundler | None = None,
        minifier: Minifier | None = None,
        surface_provider: SurfaceProvider | None = None,
    ) -> None:
        self.config = config
        self.runner = runner
        self.bundler = bundler
        self.minifier = minifier
        self.surface_provider = surface_provider

    async def run(self) -> PipelineResult:
        config = self.config
        # Same tree the generated scripts and webpack resolve packages from.
        version = read_installed_version(config.workspace.node_modules, config.core.package)
        logger.info("Vendoring %s %s", config.core.package, version)

        ws_config = config.workspace
        with open_workspace(
            ws_config.root,
            scripts_name=ws_config.scripts_dir,
            dist_name=ws_config.dist_dir,
            keep_on_failure=ws_config.keep_on_failure,
        ) as ws:
            runner = self.runner or NodeScriptRunner(config.node, cwd=ws.root)
            provider = self.surface_provider or default_surface_provider(config, ws, runner)
            strategy = select_strategy(version, config, provider=provider)
            renderer_entry = await strategy.renderer_entry(ws)

            bundler = self.bundler or WebpackBundler(runner)
            bundles: list[tuple[BuildTarget, Path]] = []
            # Sequential: renderer builds depend on the core global, the finisher on every bundle.
            for target in plan_targets(config, renderer_entry):
                bundles.append((target, await bundler.build(target, ws)))

            finisher = AssetFinisher(self.minifier or TerserMinifier(runner, ws))
            artifacts = await finisher.finish(bundles, str(version))
            paths = emit_assets(artifacts, config.output_dir)

        return PipelineResult(version=version, strategy=strategy.name, artifacts=artifacts, paths=paths)


def run_pipeline(config: VendorConfig, **collaborators) -> PipelineResult:
    return asyncio.run(VendorPipeline(config, **collaborators).run())
