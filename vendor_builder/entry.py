"""
entry.py

Responsibility: synthesize the unified renderer entry module.

The generated module imports both physical modules and re-exports every name
of an `ExportSurface` under one module, primary names first, so the bundler
sees a single coherent entry point.
"""

from __future__ import annotations

from pathlib import Path

from vendor_builder.surface import ExportSurface
from vendor_builder.templating import render_source, write_source
from vendor_builder.workspace import Workspace

ENTRY_FILENAME = "react-dom-entry.js"


def synthesize_entry_source(surface: ExportSurface, *, legacy_module: str, advanced_module: str) -> str:
    """Return the entry module source; identical surfaces give identical text."""
    return render_source(
        "entry.js.j2",
        {
            "legacy_module": legacy_module,
            "advanced_module": advanced_module,
            "primary": surface.primary,
            "shared": surface.shared,
        },
    )


def write_entry_module(
    surface: ExportSurface,
    workspace: Workspace,
    *,
    legacy_module: str,
    advanced_module: str,
    filename: str = ENTRY_FILENAME,
) -> Path:
    source = synthesize_entry_source(surface, legacy_module=legacy_module, advanced_module=advanced_module)
    return write_source(workspace.script_path(filename), source)
