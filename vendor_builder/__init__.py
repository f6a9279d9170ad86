"""
vendor_builder package

Builds loader-independent global-script (UMD) bundles of `react` and
`react-dom` for pages without a module system.

Key responsibilities are split across modules:
- `config.py`: load `vendor.yml` into a typed configuration
- `versioning.py`: read the installed version and pick the entry strategy
- `workspace.py`: scoped temporary directories for one run
- `surface.py` / `entry.py`: enumerate split exports and synthesize a unified entry
- `bundler.py`: plan and drive the four webpack builds
- `minify.py` / `finisher.py`: terser minification, version banners, emission
- `pipeline.py`: sequential orchestration of all stages
- `cli.py`: CLI entrypoint
"""

from __future__ import annotations

__all__ = ["__version__"]

__version__ = "0.1.0"
