from __future__ import annotations

import json
import re
from pathlib import Path

import pytest

from vendor_builder.config import VendorConfig, WorkspaceConfig
from vendor_builder.errors import ScriptExecutionError

LEGACY_EXPORTS = ["default", "render", "unmountComponentAtNode", "createPortal", "createRoot", "hydrateRoot"]

_TARGET_RE = re.compile(r"^const target = (.*);$", re.MULTILINE)
_PRIMARY_RE = re.compile(r"^const primary = (.*);$", re.MULTILINE)
_FS_CALL_RE = re.compile(r'(readFileSync|writeFileSync)\(("(?:[^"\\]|\\.)*")')


def fake_bundle(target: dict) -> str:
    """Bundle text shaped like webpack's UMD output, padded so minifying shrinks it."""
    library = target["output"]["library"]["name"]
    externals = [conv["root"] for conv in target["externals"].values()]
    deps = ", ".join(f'root["{name}"]' for name in externals)
    return (
        "(function webpackUniversalModuleDefinition(root, factory) {\n"
        f'    root["{library}"] = factory({deps});\n'
        "})(this, function(__WEBPACK_EXTERNAL_MODULE__) {\n"
        f"    /* entry: {target['entry']} ({target['nodeEnv']}) */\n"
        f"    /* implementation of {library} */\n"
        "    return      {};\n"
        "});\n"
    )


def fake_minify(source: str) -> str:
    no_comments = re.sub(r"/\*.*?\*/", "", source, flags=re.DOTALL)
    return re.sub(r"\s+", " ", no_comments).strip()


class FakeNode:
    """
    Stands in for the Node executable: interprets the generated scripts the way
    the real introspection, webpack and terser drivers would.
    """

    def __init__(self, legacy_exports: list[str] | None = None, fail_on: str | None = None) -> None:
        self.legacy_exports = list(legacy_exports if legacy_exports is not None else LEGACY_EXPORTS)
        self.fail_on = fail_on
        self.calls: list[str] = []
        self.scripts: list[Path] = []
        self.targets: list[dict] = []
        self.entries: dict[str, str] = {}

    async def __call__(self, script: Path) -> str:
        text = script.read_text(encoding="utf-8")
        self.calls.append(script.name)
        self.scripts.append(script)
        if self.fail_on and script.name.startswith(self.fail_on):
            raise ScriptExecutionError(str(script), 1, stderr=f"{script.name}: simulated failure")

        if script.name == "temp-script.mjs":
            primary = json.loads(_PRIMARY_RE.search(text).group(1))
            shared = [n for n in self.legacy_exports if n != "default" and n not in primary]
            return json.dumps({"primary": primary, "shared": shared})

        if script.name.startswith("webpack-"):
            target = json.loads(_TARGET_RE.search(text).group(1))
            self.targets.append(target)
            entry = Path(target["entry"])
            if entry.is_file():
                self.entries[target["output"]["filename"]] = entry.read_text(encoding="utf-8")
            out = Path(target["output"]["path"]) / target["output"]["filename"]
            out.write_text(fake_bundle(target), encoding="utf-8")
            return json.dumps({"filename": target["output"]["filename"], "hash": "0"})

        if script.name.startswith("terser-"):
            paths = {call: json.loads(literal) for call, literal in _FS_CALL_RE.findall(text)}
            source = Path(paths["readFileSync"]).read_text(encoding="utf-8")
            Path(paths["writeFileSync"]).write_text(fake_minify(source), encoding="utf-8")
            return ""

        raise AssertionError(f"unexpected script {script.name}")


class FakeMinifier:
    def __init__(self) -> None:
        self.names: list[str] = []

    async def minify(self, source: str, *, name: str) -> str:
        self.names.append(name)
        return fake_minify(source)


def write_package(node_modules: Path, package: str, version: str) -> Path:
    manifest = node_modules / package / "package.json"
    manifest.parent.mkdir(parents=True, exist_ok=True)
    manifest.write_text(json.dumps({"name": package, "version": version}), encoding="utf-8")
    return manifest


@pytest.fixture()
def make_project(tmp_path: Path):
    """Return a factory creating a project dir with react installed at `version`."""

    def _make(version: str = "19.1.0", **overrides) -> VendorConfig:
        project = tmp_path / "project"
        node_modules = project / "node_modules"
        write_package(node_modules, "react", version)
        write_package(node_modules, "react-dom", version)
        fields = {
            "output_dir": project / "dist",
            "workspace": WorkspaceConfig(root=project),
        }
        fields.update(overrides)
        return VendorConfig(**fields)

    return _make
