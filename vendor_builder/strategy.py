"""
strategy.py

Responsibility: choose, once per run, how the renderer entry point is obtained.

- `DirectEntryStrategy`: the renderer package is bundled as-is.
- `SynthesizedEntryStrategy`: the export surface is enumerated and a unified
  entry module is generated in the workspace.
"""

from __future__ import annotations

import logging
from typing import Protocol

from vendor_builder.config import VendorConfig
from vendor_builder.entry import write_entry_module
from vendor_builder.runner import ScriptRunner
from vendor_builder.surface import NodeSurfaceProvider, StaticSurfaceProvider, SurfaceProvider
from vendor_builder.versioning import LibraryVersion, uses_split_surface
from vendor_builder.workspace import Workspace

logger = logging.getLogger(__name__)


class BuildStrategy(Protocol):
    name: str

    async def renderer_entry(self, workspace: Workspace) -> str: ...


class DirectEntryStrategy:
    name = "direct"

    def __init__(self, renderer_package: str) -> None:
        self.renderer_package = renderer_package

    async def renderer_entry(self, workspace: Workspace) -> str:
        return self.renderer_package


class SynthesizedEntryStrategy:
    name = "synthesized"

    def __init__(self, provider: SurfaceProvider, *, legacy_module: str, advanced_module: str) -> None:
        self.provider = provider
        self.legacy_module = legacy_module
        self.advanced_module = advanced_module

    async def renderer_entry(self, workspace: Workspace) -> str:
        surface = await self.provider.enumerate()
        path = write_entry_module(
            surface,
            workspace,
            legacy_module=self.legacy_module,
            advanced_module=self.advanced_module,
        )
        logger.info("Synthesized renderer entry with %d exports: %s", len(surface.names), path.name)
        return str(path)


def default_surface_provider(config: VendorConfig, workspace: Workspace, runner: ScriptRunner) -> SurfaceProvider:
    renderer = config.renderer
    if renderer.legacy_exports is not None:
        return StaticSurfaceProvider(renderer.legacy_exports, renderer.primary_exports)
    return NodeSurfaceProvider(
        workspace=workspace,
        runner=runner,
        legacy_module=renderer.package,
        advanced_module=renderer.advanced_module,
        primary=renderer.primary_exports,
    )


def select_strategy(
    version: LibraryVersion,
    config: VendorConfig,
    *,
    provider: SurfaceProvider,
) -> BuildStrategy:
    if uses_split_surface(version, config.split_threshold):
        logger.info("%s %s is split across %s and %s", config.core.package, version, config.renderer.package, config.renderer.advanced_module)
        return SynthesizedEntryStrategy(
            provider,
            legacy_module=config.renderer.package,
            advanced_module=config.renderer.advanced_module,
        )
    return DirectEntryStrategy(config.renderer.package)
