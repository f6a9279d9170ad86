"""
finisher.py

Responsibility: turn raw bundles into the final vendored assets.

Rules:
- Production bundles are minified; development bundles are kept byte-for-byte.
- Every asset is prefixed with `/*! <filename> v<version> */\\n`.
- Nothing is emitted until every asset is finished, and assets are staged
  before being moved into the output directory, so a failed run emits none.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from vendor_builder.bundler import BuildTarget, Mode
from vendor_builder.errors import FileSystemError
from vendor_builder.minify import Minifier

logger = logging.getLogger(__name__)


def make_banner(filename: str, version: str) -> str:
    return f"/*! {filename} v{version} */\n"


@dataclass(frozen=True)
class Artifact:
    name: str
    mode: Mode
    raw_content: str
    final_content: str
    banner: str


class AssetFinisher:
    def __init__(self, minifier: Minifier) -> None:
        self.minifier = minifier

    async def finish(self, bundles: Sequence[tuple[BuildTarget, Path]], version: str) -> list[Artifact]:
        """Read every bundle first, then minify and banner them in order."""
        raw: list[tuple[BuildTarget, str]] = []
        for target, path in bundles:
            try:
                # newline="" keeps the bundler output byte-for-byte.
                with path.open("r", encoding="utf-8", newline="") as handle:
                    raw.append((target, handle.read()))
            except OSError as e:
                raise FileSystemError(f"Failed reading bundle {target.filename}: {path}") from e

        artifacts: list[Artifact] = []
        for target, content in raw:
            body = content
            if target.mode is Mode.PRODUCTION:
                body = await self.minifier.minify(content, name=target.filename)
                logger.debug("%s: %d -> %d bytes", target.filename, len(content), len(body))
            banner = make_banner(target.filename, version)
            artifacts.append(
                Artifact(
                    name=target.filename,
                    mode=target.mode,
                    raw_content=content,
                    final_content=banner + body,
                    banner=banner,
                )
            )
        return artifacts


def emit_assets(artifacts: Sequence[Artifact], output_dir: str | Path) -> list[Path]:
    """
    Write finished artifacts into `output_dir`; returns the written paths.

    Every asset is staged next to its final name first. Existing assets are
    moved aside before the staged ones are renamed in, and restored if any
    rename fails, so the directory ends up with all new assets or all old ones.
    """
    out = Path(output_dir)
    staged: list[tuple[Path, Path]] = []
    backups: list[tuple[Path, Path]] = []
    promoted: list[Path] = []
    try:
        out.mkdir(parents=True, exist_ok=True)
        for artifact in artifacts:
            final = out / artifact.name
            tmp = out / f".{artifact.name}.partial"
            staged.append((tmp, final))
            tmp.write_text(artifact.final_content, encoding="utf-8", newline="")
        for _tmp, final in staged:
            if final.exists():
                backup = out / f".{final.name}.previous"
                os.replace(final, backup)
                backups.append((backup, final))
        for tmp, final in staged:
            os.replace(tmp, final)
            promoted.append(final)
    except OSError as e:
        _rollback(staged, backups, promoted)
        raise FileSystemError(f"Failed emitting assets into {out}") from e

    for backup, _final in backups:
        backup.unlink(missing_ok=True)
    written = [final for _tmp, final in staged]
    for path in written:
        logger.info("Emitted %s", path)
    return written


def _rollback(staged: list[tuple[Path, Path]], backups: list[tuple[Path, Path]], promoted: list[Path]) -> None:
    for final in promoted:
        final.unlink(missing_ok=True)
    for backup, final in backups:
        try:
            os.replace(backup, final)
        except OSError as restore_error:
            logger.warning("Could not restore %s from %s: %s", final, backup, restore_error)
    for tmp, _final in staged:
        tmp.unlink(missing_ok=True)
