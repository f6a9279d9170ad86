"""
config.py

Responsibility: Load the optional `vendor.yml` file into a deterministic, typed model.

Every key has a default matching the stock React layout, so a missing file is
a valid configuration. The pipeline and CLI treat the parsed result as the
single source of truth; CLI flags are applied on top with `dataclasses.replace`.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from vendor_builder.errors import ConfigError, VersionParseError
from vendor_builder.versioning import parse_version

DEFAULT_CONFIG_NAME = "vendor.yml"

_GLOBAL_NAME_RE = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")


@dataclass(frozen=True)
class CoreConfig:
    """The core library: bundled standalone and installed as a global."""

    package: str = "react"
    global_name: str = "React"


@dataclass(frozen=True)
class RendererConfig:
    """The DOM renderer, bundled against the core global."""

    package: str = "react-dom"
    global_name: str = "ReactDOM"
    advanced_module: str = "react-dom/client"
    primary_exports: tuple[str, ...] = ("createRoot", "hydrateRoot")
    # When set, the export surface is taken from this list instead of running Node.
    legacy_exports: tuple[str, ...] | None = None


@dataclass(frozen=True)
class WorkspaceConfig:
    root: Path = Path(".")
    scripts_dir: str = "temp"
    dist_dir: str = "temp-dist"
    keep_on_failure: bool = False

    @property
    def node_modules(self) -> Path:
        """The tree Node and webpack resolve packages from; versions are read here too."""
        return self.root / "node_modules"


@dataclass(frozen=True)
class VendorConfig:
    core: CoreConfig = field(default_factory=CoreConfig)
    renderer: RendererConfig = field(default_factory=RendererConfig)
    workspace: WorkspaceConfig = field(default_factory=WorkspaceConfig)
    split_threshold: str = "19.0.0"
    node: str = "node"
    output_dir: Path = Path("dist")


def _section(data: dict[str, Any], key: str) -> dict[str, Any]:
    raw = data.get(key) or {}
    if not isinstance(raw, dict):
        raise ConfigError(f"`{key}` must be an object/mapping when provided.")
    return raw


def _str(raw: dict[str, Any], key: str, default: str) -> str:
    value = raw.get(key)
    if value is None:
        return default
    value = str(value).strip()
    if not value:
        raise ConfigError(f"`{key}` must not be empty.")
    return value


def _names(raw: dict[str, Any], key: str) -> tuple[str, ...] | None:
    value = raw.get(key)
    if value is None:
        return None
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigError(f"`{key}` must be a list of strings.")
    return tuple(value)


def _bool(raw: dict[str, Any], key: str, default: bool) -> bool:
    value = raw.get(key)
    if value is None:
        return default
    if not isinstance(value, bool):
        raise ConfigError(f"`{key}` must be true or false, got {value!r}")
    return value


def _global_name(raw: dict[str, Any], default: str) -> str:
    name = _str(raw, "global", default)
    if not _GLOBAL_NAME_RE.match(name):
        raise ConfigError(f"`global` must be a valid JavaScript identifier: {name!r}")
    return name


def config_from_mapping(data: dict[str, Any], *, base_dir: Path | None = None) -> VendorConfig:
    """
    Build a `VendorConfig` from an already-loaded mapping.

    Relative paths are resolved against `base_dir` (the config file's directory)
    when one is given.
    """
    if not isinstance(data, dict):
        raise ConfigError("Configuration must be a mapping/object at the top level.")

    def _path(value: Any, default: Path) -> Path:
        p = Path(str(value)) if value is not None else default
        if base_dir is not None and not p.is_absolute():
            p = base_dir / p
        return p

    core_raw = _section(data, "core")
    core = CoreConfig(
        package=_str(core_raw, "package", CoreConfig.package),
        global_name=_global_name(core_raw, CoreConfig.global_name),
    )

    renderer_raw = _section(data, "renderer")
    primary = _names(renderer_raw, "primary_exports")
    renderer = RendererConfig(
        package=_str(renderer_raw, "package", RendererConfig.package),
        global_name=_global_name(renderer_raw, RendererConfig.global_name),
        advanced_module=_str(renderer_raw, "advanced_module", RendererConfig.advanced_module),
        primary_exports=primary if primary is not None else RendererConfig.primary_exports,
        legacy_exports=_names(renderer_raw, "legacy_exports"),
    )
    if not renderer.primary_exports:
        raise ConfigError("`renderer.primary_exports` must name at least one export.")
    if core.global_name == renderer.global_name:
        raise ConfigError("Core and renderer must install different global names.")

    if "node_modules" in data:
        raise ConfigError("`node_modules` is not configurable; packages resolve from `workspace.root`/node_modules.")

    split_threshold = _str(data, "split_threshold", VendorConfig.split_threshold)
    try:
        parse_version(split_threshold)
    except VersionParseError as e:
        raise ConfigError(f"`split_threshold` must be a semantic version: {split_threshold!r}") from e

    ws_raw = _section(data, "workspace")
    workspace = WorkspaceConfig(
        root=_path(ws_raw.get("root"), WorkspaceConfig.root),
        scripts_dir=_str(ws_raw, "scripts_dir", WorkspaceConfig.scripts_dir),
        dist_dir=_str(ws_raw, "dist_dir", WorkspaceConfig.dist_dir),
        keep_on_failure=_bool(ws_raw, "keep_on_failure", WorkspaceConfig.keep_on_failure),
    )
    if workspace.scripts_dir == workspace.dist_dir:
        raise ConfigError("`workspace.scripts_dir` and `workspace.dist_dir` must differ.")

    return VendorConfig(
        core=core,
        renderer=renderer,
        workspace=workspace,
        split_threshold=split_threshold,
        node=_str(data, "node", VendorConfig.node),
        output_dir=_path(data.get("output_dir"), VendorConfig.output_dir),
    )


def load_config(config_path: str | Path | None = None) -> VendorConfig:
    """
    Load configuration from a YAML file.

    With no explicit path, `vendor.yml` in the working directory is used if it
    exists; otherwise the defaults apply. An explicit path must exist.
    """
    if config_path is None:
        path = Path(DEFAULT_CONFIG_NAME)
        if not path.exists():
            return VendorConfig()
    else:
        path = Path(config_path)
        if not path.exists():
            raise ConfigError(f"Config file does not exist: {path}")

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Config file is not valid YAML: {path}") from e
    return config_from_mapping(data, base_dir=path.resolve().parent)
