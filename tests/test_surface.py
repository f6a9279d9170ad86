from __future__ import annotations

import asyncio
import json
from pathlib import Path

import pytest

from vendor_builder.errors import IntrospectionFailure, ScriptExecutionError
from vendor_builder.surface import (
    ExportSurface,
    NodeSurfaceProvider,
    StaticSurfaceProvider,
    parse_surface,
    partition_exports,
)
from vendor_builder.workspace import open_workspace


def test_partition_mock_legacy_surface() -> None:
    legacy = ["render", "unmountComponentAtNode", "createPortal", "createRoot", "hydrateRoot"]
    surface = partition_exports(legacy, ["createRoot", "hydrateRoot"])

    assert surface.primary == ("createRoot", "hydrateRoot")
    assert surface.shared == ("render", "unmountComponentAtNode", "createPortal")
    assert not set(surface.primary) & set(surface.shared)
    assert set(surface.names) == set(legacy)


def test_partition_drops_default_marker_and_keeps_order() -> None:
    surface = partition_exports(["default", "version", "flushSync", "createRoot"], ["createRoot"])
    assert surface.shared == ("version", "flushSync")


def test_export_surface_invariants() -> None:
    with pytest.raises(ValueError, match="overlap"):
        ExportSurface(primary=("createRoot",), shared=("createRoot",))
    with pytest.raises(ValueError, match="identifier"):
        ExportSurface(primary=("createRoot",), shared=("not-valid",))
    with pytest.raises(ValueError, match="default"):
        ExportSurface(primary=("createRoot",), shared=("default",))


def test_parse_surface() -> None:
    surface = parse_surface(json.dumps({"primary": ["createRoot"], "shared": ["render"]}))
    assert surface == ExportSurface(primary=("createRoot",), shared=("render",))


@pytest.mark.parametrize(
    "text",
    [
        "",
        "not json",
        "[]",
        json.dumps({"primary": ["createRoot"]}),
        json.dumps({"primary": ["createRoot"], "shared": [1]}),
        json.dumps({"primary": ["createRoot"], "shared": ["createRoot"]}),
    ],
)
def test_parse_surface_rejects_malformed_output(text: str) -> None:
    with pytest.raises(IntrospectionFailure):
        parse_surface(text)


def test_static_provider() -> None:
    provider = StaticSurfaceProvider(["default", "render", "createRoot"], ["createRoot", "hydrateRoot"])
    surface = asyncio.run(provider.enumerate())
    assert surface.primary == ("createRoot", "hydrateRoot")
    assert surface.shared == ("render",)


def test_node_provider_writes_script_and_parses_output(tmp_path: Path) -> None:
    seen: dict[str, str] = {}

    async def runner(script: Path) -> str:
        seen["name"] = script.name
        seen["text"] = script.read_text(encoding="utf-8")
        return json.dumps({"primary": ["createRoot", "hydrateRoot"], "shared": ["render", "flushSync"]})

    async def scenario() -> ExportSurface:
        with open_workspace(tmp_path) as ws:
            provider = NodeSurfaceProvider(
                workspace=ws,
                runner=runner,
                legacy_module="react-dom",
                advanced_module="react-dom/client",
                primary=["createRoot", "hydrateRoot"],
            )
            return await provider.enumerate()

    surface = asyncio.run(scenario())
    assert surface.shared == ("render", "flushSync")
    assert seen["name"] == "temp-script.mjs"
    assert 'import * as legacyModule from "react-dom";' in seen["text"]
    assert 'import * as advancedModule from "react-dom/client";' in seen["text"]
    assert 'const primary = ["createRoot", "hydrateRoot"];' in seen["text"]


def test_node_provider_nonzero_exit_is_introspection_failure(tmp_path: Path) -> None:
    async def runner(script: Path) -> str:
        raise ScriptExecutionError(str(script), 1, stderr="Cannot find module 'react-dom/client'")

    async def scenario() -> None:
        with open_workspace(tmp_path) as ws:
            provider = NodeSurfaceProvider(
                workspace=ws,
                runner=runner,
                legacy_module="react-dom",
                advanced_module="react-dom/client",
                primary=["createRoot"],
            )
            await provider.enumerate()

    with pytest.raises(IntrospectionFailure, match="Cannot find module"):
        asyncio.run(scenario())


def test_node_provider_rejects_unexpected_primary(tmp_path: Path) -> None:
    async def runner(script: Path) -> str:
        return json.dumps({"primary": ["createRoot"], "shared": []})

    async def scenario() -> None:
        with open_workspace(tmp_path) as ws:
            provider = NodeSurfaceProvider(
                workspace=ws,
                runner=runner,
                legacy_module="react-dom",
                advanced_module="react-dom/client",
                primary=["createRoot", "hydrateRoot"],
            )
            await provider.enumerate()

    with pytest.raises(IntrospectionFailure, match="expected"):
        asyncio.run(scenario())
