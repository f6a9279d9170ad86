"""
surface.py

Responsibility: determine the renderer's export surface when it is split
across two physical modules.

Providers:
- `NodeSurfaceProvider` loads both modules in a separate Node process and
  reports the categorized names as JSON on stdout.
- `StaticSurfaceProvider` partitions a known list of legacy export names.

Both apply the same rule (`partition_exports`), so callers never depend on how
the surface was obtained.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Protocol

from vendor_builder.errors import IntrospectionFailure, ScriptExecutionError
from vendor_builder.runner import ScriptRunner
from vendor_builder.templating import render_to_file
from vendor_builder.workspace import Workspace

logger = logging.getLogger(__name__)

DEFAULT_MARKER = "default"
INTROSPECT_SCRIPT = "temp-script.mjs"

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")


@dataclass(frozen=True)
class ExportSurface:
    """Export names re-exported from the advanced module (`primary`) and the legacy one (`shared`)."""

    primary: tuple[str, ...]
    shared: tuple[str, ...]

    def __post_init__(self) -> None:
        for name in (*self.primary, *self.shared):
            if not _IDENTIFIER_RE.match(name):
                raise ValueError(f"Export name is not a valid identifier: {name!r}")
            if name == DEFAULT_MARKER:
                raise ValueError("The default export marker cannot be re-exported by name")
        overlap = set(self.primary) & set(self.shared)
        if overlap:
            raise ValueError(f"Export sets overlap: {', '.join(sorted(overlap))}")
        if len(set(self.primary)) != len(self.primary) or len(set(self.shared)) != len(self.shared):
            raise ValueError("Export sets contain duplicate names")

    @property
    def names(self) -> tuple[str, ...]:
        return self.primary + self.shared


class SurfaceProvider(Protocol):
    async def enumerate(self) -> ExportSurface: ...


def partition_exports(legacy_names: Iterable[str], primary: Sequence[str]) -> ExportSurface:
    """
    Split legacy export names into the fixed primary list and everything else.

    `shared` keeps the legacy order and drops the default marker and any
    primary name.
    """
    primary_t = tuple(primary)
    excluded = set(primary_t) | {DEFAULT_MARKER}
    seen: set[str] = set()
    shared: list[str] = []
    for name in legacy_names:
        if name in excluded or name in seen:
            continue
        seen.add(name)
        shared.append(name)
    return ExportSurface(primary=primary_t, shared=tuple(shared))


def parse_surface(text: str) -> ExportSurface:
    """Parse the introspection script's `{"primary": [...], "shared": [...]}` output."""
    try:
        data = json.loads(text)
    except ValueError as e:
        raise IntrospectionFailure(f"Introspection output is not valid JSON: {text[:200]!r}") from e

    if not isinstance(data, dict):
        raise IntrospectionFailure("Introspection output must be a JSON object")
    lists = {}
    for key in ("primary", "shared"):
        value = data.get(key)
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            raise IntrospectionFailure(f"Introspection output field `{key}` must be a list of strings")
        lists[key] = tuple(value)

    try:
        return ExportSurface(primary=lists["primary"], shared=lists["shared"])
    except ValueError as e:
        raise IntrospectionFailure(f"Introspection output is inconsistent: {e}") from e


class StaticSurfaceProvider:
    def __init__(self, legacy_names: Sequence[str], primary: Sequence[str]) -> None:
        self.legacy_names = tuple(legacy_names)
        self.primary = tuple(primary)

    async def enumerate(self) -> ExportSurface:
        try:
            return partition_exports(self.legacy_names, self.primary)
        except ValueError as e:
            raise IntrospectionFailure(f"Configured export list is invalid: {e}") from e


class NodeSurfaceProvider:
    def __init__(
        self,
        *,
        workspace: Workspace,
        runner: ScriptRunner,
        legacy_module: str,
        advanced_module: str,
        primary: Sequence[str],
    ) -> None:
        self.workspace = workspace
        self.runner = runner
        self.legacy_module = legacy_module
        self.advanced_module = advanced_module
        self.primary = tuple(primary)

    async def enumerate(self) -> ExportSurface:
        script = render_to_file(
            "introspect.mjs.j2",
            self.workspace.script_path(INTROSPECT_SCRIPT),
            {
                "legacy_module": self.legacy_module,
                "advanced_module": self.advanced_module,
                "primary": list(self.primary),
            },
        )
        logger.info("Introspecting exports of %s and %s", self.legacy_module, self.advanced_module)
        try:
            output = await self.runner(script)
        except ScriptExecutionError as e:
            raise IntrospectionFailure(f"{e}\n{e.output}".rstrip()) from e

        surface = parse_surface(output)
        if surface.primary != self.primary:
            raise IntrospectionFailure(
                f"Introspection reported primary exports {list(surface.primary)}, expected {list(self.primary)}"
            )
        logger.debug("Export surface: %d primary, %d shared", len(surface.primary), len(surface.shared))
        return surface
