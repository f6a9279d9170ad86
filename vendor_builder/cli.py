"""
cli.py

Responsibility: CLI entrypoint for vendor-builder.

High-level flow (single command `build`):
1) Load `vendor.yml` (or defaults) -> `VendorConfig`
2) Apply CLI overrides
3) Run the pipeline -> four vendored assets in the output directory

This module should orchestrate behavior but keep concerns isolated:
- Configuration: `config.py`
- Pipeline stages: `pipeline.py` and the modules it drives
"""

from __future__ import annotations

import argparse
import dataclasses
import logging
from pathlib import Path

from vendor_builder.config import VendorConfig, load_config
from vendor_builder.errors import PipelineError
from vendor_builder.pipeline import run_pipeline

logger = logging.getLogger("vendor_builder")


def _apply_overrides(config: VendorConfig, args: argparse.Namespace) -> VendorConfig:
    changes: dict[str, object] = {}
    if args.out_dir:
        changes["output_dir"] = Path(args.out_dir)
    if args.node:
        changes["node"] = args.node

    workspace = config.workspace
    if args.workspace_root:
        workspace = dataclasses.replace(workspace, root=Path(args.workspace_root))
    if args.keep_workspace:
        workspace = dataclasses.replace(workspace, keep_on_failure=True)
    changes["workspace"] = workspace

    return dataclasses.replace(config, **changes)


def build_cmd(args: argparse.Namespace) -> int:
    try:
        config = _apply_overrides(load_config(args.config), args)
        result = run_pipeline(config)
    except PipelineError as e:
        logger.error("Error during build: %s", e)
        return 1

    for path in result.paths:
        print(path)
    logger.info("Vendored %s %s (%s entry)", config.core.package, result.version, result.strategy)
    return 0


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="vendor-builder", description="Build global-script (UMD) bundles of react and react-dom")
    p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = p.add_subparsers(dest="command", required=True)

    b = sub.add_parser("build", help="Bundle, minify and emit the four vendored assets")
    b.add_argument("--config", default=None, help="Path to a YAML config file (default: ./vendor.yml if present)")
    b.add_argument("--out-dir", default=None, help="Directory the assets are emitted into (default: dist)")
    b.add_argument(
        "--workspace-root",
        default=None,
        help="Project directory: packages resolve from its node_modules; temporary directories are created here",
    )
    b.add_argument("--node", default=None, help="Node executable (default: node)")
    b.add_argument(
        "--keep-workspace",
        action="store_true",
        help="Keep temporary directories when the run fails",
    )

    b.set_defaults(func=build_cmd)
    return p


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )
    return int(args.func(args))


if __name__ == "__main__":
    raise SystemExit(main())
