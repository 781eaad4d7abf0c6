"""Running external executables with an explicit environment.

Tools installed into layers are found through an ExecutionContext rather
than by mutating the process-wide PATH, so repeated builds in one process
never see each other's search path segments.
"""

from __future__ import annotations

import os
import shutil
import subprocess
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol, TextIO

from module_bom.logging import get_logger

logger = get_logger(__name__)


@dataclass
class ExecutionContext:
    """Search path and environment handed to executed tools."""

    search_path: list[str] = field(default_factory=list)
    """Directories searched for executables, in order"""

    env: dict[str, str] = field(default_factory=dict)
    """Base environment (PATH is rendered from search_path)"""

    @classmethod
    def from_environ(cls, environ: Mapping[str, str] | None = None) -> ExecutionContext:
        """Create a context seeded from a process environment.

        Args:
            environ: Environment to copy (defaults to os.environ)

        Returns:
            ExecutionContext whose search path is the environment's PATH
        """
        environ = dict(os.environ if environ is None else environ)
        search_path = [p for p in environ.get("PATH", "").split(os.pathsep) if p]
        return cls(search_path=search_path, env=environ)

    def append_path(self, directory: Path | str) -> None:
        """Append a directory to the end of the search path."""
        self.search_path.append(str(directory))

    @property
    def path(self) -> str:
        return os.pathsep.join(self.search_path)

    def environ(self) -> dict[str, str]:
        """Environment for a child process, with PATH rendered from the search path."""
        env = dict(self.env)
        env["PATH"] = self.path
        return env

    def which(self, command: str) -> str | None:
        return shutil.which(command, path=self.path)


@dataclass
class Execution:
    """A single invocation of an executable."""

    args: list[str] = field(default_factory=list)
    dir: Path | None = None
    stdout: TextIO | None = None
    stderr: TextIO | None = None
    context: ExecutionContext | None = None


class ToolExecutable(Protocol):
    """Anything that can run an Execution."""

    def execute(self, execution: Execution) -> None: ...


class Executable:
    """Runs a named command found on the execution context's search path."""

    def __init__(self, name: str):
        self.name = name

    def execute(self, execution: Execution) -> None:
        """Run the command and wait for it to finish.

        Output is written to the execution's stdout/stderr sinks. When both
        sinks are the same object the streams are interleaved.

        Args:
            execution: Arguments, working directory, sinks and context

        Raises:
            FileNotFoundError: If the command is not on the search path
            subprocess.CalledProcessError: If the command exits non-zero
        """
        context = execution.context or ExecutionContext.from_environ()

        command = context.which(self.name)
        if command is None:
            raise FileNotFoundError(f"{self.name} not found in PATH")

        combined = execution.stdout is not None and execution.stdout is execution.stderr
        cmd = [command, *execution.args]
        logger.debug(f"Executing: {' '.join(cmd)}")

        result = subprocess.run(
            cmd,
            cwd=execution.dir,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT if combined else subprocess.PIPE,
            text=True,
            errors="replace",
            env=context.environ(),
        )

        if execution.stdout is not None and result.stdout:
            execution.stdout.write(result.stdout)
        if execution.stderr is not None and result.stderr:
            execution.stderr.write(result.stderr)

        if result.returncode != 0:
            raise subprocess.CalledProcessError(
                result.returncode, cmd, output=result.stdout, stderr=result.stderr
            )
