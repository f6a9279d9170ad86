from __future__ import annotations

import argparse
from pathlib import Path

import pytest

from vendor_builder import cli
from vendor_builder.config import VendorConfig
from vendor_builder.errors import CompileError


def _args(**overrides) -> argparse.Namespace:
    values = dict(
        config=None,
        out_dir=None,
        workspace_root=None,
        node=None,
        keep_workspace=False,
    )
    values.update(overrides)
    return argparse.Namespace(**values)


def test_overrides_apply_on_top_of_config() -> None:
    config = cli._apply_overrides(
        VendorConfig(),
        _args(out_dir="public", workspace_root="/tmp/ws", node="/opt/node", keep_workspace=True),
    )
    assert config.output_dir == Path("public")
    assert config.node == "/opt/node"
    assert config.workspace.root == Path("/tmp/ws")
    assert config.workspace.node_modules == Path("/tmp/ws/node_modules")
    assert config.workspace.keep_on_failure is True
    assert config.workspace.scripts_dir == "temp"


def test_build_success_prints_assets(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    from vendor_builder.pipeline import PipelineResult
    from vendor_builder.versioning import parse_version

    seen: dict[str, VendorConfig] = {}

    def fake_run(config: VendorConfig) -> PipelineResult:
        seen["config"] = config
        return PipelineResult(
            version=parse_version("18.2.0"),
            strategy="direct",
            artifacts=[],
            paths=[config.output_dir / "react.production.min.js"],
        )

    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(cli, "run_pipeline", fake_run)

    assert cli.main(["build", "--out-dir", "public"]) == 0
    assert seen["config"].output_dir == Path("public")
    assert "react.production.min.js" in capsys.readouterr().out


def test_build_failure_returns_1(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    def fake_run(config: VendorConfig):
        raise CompileError("webpack failed for react.production.min.js", diagnostics="ERROR in react")

    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(cli, "run_pipeline", fake_run)
    assert cli.main(["build"]) == 1


def test_missing_config_file_returns_1(tmp_path: Path) -> None:
    assert cli.main(["build", "--config", str(tmp_path / "missing.yml")]) == 1


def test_command_is_required() -> None:
    with pytest.raises(SystemExit):
        cli.main([])
