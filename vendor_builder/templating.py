"""
templating.py

Responsibility: render the JavaScript sources the pipeline generates.

Rules:
- Templates live in `vendor_builder/templates` and are looked up by name.
- Undefined variables are errors; output keeps trailing newlines.
- Values are embedded in JavaScript through the `js` filter (JSON encoding),
  never by raw string interpolation.
- Written files always use `\\n` newlines for stable output.

This module intentionally does NOT know about Node, webpack or terser.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from jinja2 import Environment, PackageLoader, StrictUndefined, TemplateError

from vendor_builder.errors import FileSystemError, RenderError


def _js_literal(value: Any) -> str:
    return json.dumps(value, ensure_ascii=True, sort_keys=False)


def _environment() -> Environment:
    env = Environment(
        loader=PackageLoader("vendor_builder", "templates"),
        autoescape=False,
        undefined=StrictUndefined,
        keep_trailing_newline=True,
    )
    env.filters["js"] = _js_literal
    return env


_ENV = _environment()


def render_source(template_name: str, context: dict[str, Any]) -> str:
    try:
        return _ENV.get_template(template_name).render(**context)
    except TemplateError as e:
        raise RenderError(f"Failed rendering template: {template_name}") from e


def write_source(path: Path, text: str) -> Path:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8", newline="\n")
    except OSError as e:
        raise FileSystemError(f"Failed writing generated source: {path}") from e
    return path


def render_to_file(template_name: str, path: Path, context: dict[str, Any]) -> Path:
    """Render `template_name` and write the result to `path`."""
    return write_source(path, render_source(template_name, context))
