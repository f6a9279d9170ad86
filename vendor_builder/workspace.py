"""
workspace.py

Responsibility: own the two transient directories of one pipeline run.

- `scripts_dir` holds generated scripts (introspection, entry module, drivers).
- `dist_dir` holds raw bundler output before finishing.

Both live under an explicit root so separate runs can be isolated by passing
different roots. Scripts are written inside the root so Node resolves
`node_modules` from the project the root belongs to.
"""

from __future__ import annotations

import logging
import shutil
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path

from vendor_builder.errors import FileSystemError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Workspace:
    root: Path
    scripts_dir: Path
    dist_dir: Path

    @property
    def node_modules(self) -> Path:
        return self.root / "node_modules"

    def script_path(self, name: str) -> Path:
        return self.scripts_dir / name

    def dist_path(self, filename: str) -> Path:
        return self.dist_dir / filename


def _remove_dir(path: Path) -> None:
    try:
        shutil.rmtree(path)
    except FileNotFoundError:
        pass
    except OSError as e:
        raise FileSystemError(f"Failed to remove workspace directory: {path}") from e


def _create_dir(path: Path) -> None:
    try:
        path.mkdir(parents=True, exist_ok=False)
    except OSError as e:
        raise FileSystemError(f"Failed to create workspace directory: {path}") from e


@contextmanager
def open_workspace(
    root: str | Path,
    *,
    scripts_name: str = "temp",
    dist_name: str = "temp-dist",
    keep_on_failure: bool = False,
) -> Iterator[Workspace]:
    """
    Create fresh workspace directories under `root` and remove them on exit.

    Stale directories left by an earlier run are removed first. Cleanup runs on
    every exit path; with `keep_on_failure` the directories are left in place
    when the body raises, so intermediate files can be inspected.
    """
    root_path = Path(root).resolve()
    ws = Workspace(
        root=root_path,
        scripts_dir=root_path / scripts_name,
        dist_dir=root_path / dist_name,
    )

    for d in (ws.scripts_dir, ws.dist_dir):
        _remove_dir(d)
    for d in (ws.scripts_dir, ws.dist_dir):
        _create_dir(d)
    logger.debug("Opened workspace %s (%s, %s)", root_path, scripts_name, dist_name)

    try:
        yield ws
    except BaseException:
        if keep_on_failure:
            logger.warning("Run failed; keeping workspace for inspection: %s, %s", ws.scripts_dir, ws.dist_dir)
        else:
            try:
                _close(ws)
            except FileSystemError as cleanup_error:
                # Surface the body's error, not the cleanup error.
                logger.warning("Workspace cleanup failed after error: %s", cleanup_error)
        raise
    _close(ws)


def _close(ws: Workspace) -> None:
    for d in (ws.scripts_dir, ws.dist_dir):
        _remove_dir(d)
    logger.debug("Closed workspace %s", ws.root)
