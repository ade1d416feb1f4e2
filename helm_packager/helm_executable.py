"""Helm command building and execution."""

import subprocess
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Optional, Union

from .errors import ExternalToolError, LaunchError
from .utils import log, format_command

# Flag value telling helm to read a file argument from standard input.
STDIN_SENTINEL = "-"

FlagValue = Union[str, Path, bool, None]


@dataclass(frozen=True)
class SubprocessResult:
    """Exit code and captured output of a finished helm process."""
    exit_code: int
    output: str


@dataclass(frozen=True)
class HelmCommand:
    """
    Immutable builder for a helm invocation.

    Every builder method returns a new command, so a partially built command
    can be reused safely:

        base = HelmCommand().arguments("package", chart_dir)
        base.flag("destination", out).flag("version", "1.0.0").execute("Unable to package chart")

    Flags keep the order in which they were added. A flag whose value is None,
    an empty string or False is dropped; True renders a bare ``--name``.
    """
    executable: str = "helm"
    global_flags: tuple = ()
    args: tuple = ()
    flags: tuple = ()
    stdin: Optional[str] = field(default=None, repr=False)

    def arguments(self, *args) -> "HelmCommand":
        """Append positional arguments (subcommand, chart path, ...)."""
        return replace(self, args=self.args + tuple(str(arg) for arg in args))

    def flag(self, name: str, value: FlagValue = True) -> "HelmCommand":
        """Append ``--name [value]``, or nothing if value is empty."""
        return replace(self, flags=self.flags + ((name, value),))

    def with_stdin(self, data: Optional[str]) -> "HelmCommand":
        """Feed data to the process's standard input when executing."""
        return replace(self, stdin=data)

    def argv(self) -> list[str]:
        """Render the full argument vector."""
        argv = [self.executable, *self.global_flags, *self.args]
        for name, value in self.flags:
            if value is None or value is False or value == "":
                continue
            argv.append(f"--{name}")
            if value is not True:
                argv.append(str(value))
        return argv

    def execute(self, error_message: str, verbose: bool = False) -> SubprocessResult:
        """
        Run the command and wait for it to finish.

        Args:
            error_message: Context prepended to the failure message
            verbose: Enable verbose logging

        Returns:
            SubprocessResult of the successful run

        Raises:
            LaunchError: If the executable cannot be started
            ExternalToolError: If helm exits with a non-zero code
        """
        cmd = self.argv()
        log(f"Running: {format_command(cmd)}", verbose)

        try:
            process = subprocess.Popen(
                cmd,
                stdin=subprocess.PIPE if self.stdin is not None else subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                # helm output is diagnostic only; undecodable bytes must not mask the failure
                errors="replace"
            )
        except OSError as e:
            raise LaunchError(self.executable, e) from e

        # communicate() writes the payload and closes stdin
        output, _ = process.communicate(input=self.stdin)
        output = output or ""

        if process.returncode != 0:
            raise ExternalToolError(error_message, process.returncode, output)

        if output:
            log(output.rstrip(), verbose)

        return SubprocessResult(exit_code=process.returncode, output=output)


def global_flags(
    debug: bool = False,
    registry_config: Optional[Path] = None,
    repository_cache: Optional[Path] = None,
    repository_config: Optional[Path] = None,
) -> tuple:
    """Build helm's global flags, shared by every subcommand."""
    flags = []
    if debug:
        flags.append("--debug")
    if registry_config:
        flags.extend(["--registry-config", str(registry_config)])
    if repository_cache:
        flags.extend(["--repository-cache", str(repository_cache)])
    if repository_config:
        flags.extend(["--repository-config", str(repository_config)])
    return tuple(flags)
