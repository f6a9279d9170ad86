"""
errors.py

Responsibility: the error taxonomy shared by every pipeline stage.

Each stage raises its own subclass; every one of them is terminal for a run.
"""

from __future__ import annotations


class PipelineError(RuntimeError):
    pass


class ConfigError(PipelineError, ValueError):
    pass


class VersionParseError(PipelineError, ValueError):
    pass


class FileSystemError(PipelineError):
    pass


class RenderError(PipelineError):
    pass


class IntrospectionFailure(PipelineError):
    pass


class CompileError(PipelineError):
    def __init__(self, message: str, diagnostics: str = "") -> None:
        super().__init__(message if not diagnostics else f"{message}\n\n{diagnostics}")
        self.diagnostics = diagnostics


class MinificationError(PipelineError):
    pass


class ScriptExecutionError(PipelineError):
    def __init__(self, script: str, returncode: int, stdout: str = "", stderr: str = "") -> None:
        super().__init__(f"Script execution failed with code {returncode}: {script}")
        self.script = script
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr

    @property
    def output(self) -> str:
        return "\n".join(part for part in (self.stdout.strip(), self.stderr.strip()) if part)
