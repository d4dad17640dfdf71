"""npm process management for dependency installation.

Spawns the package manager to install a list of package specifiers into the
manifest and dependency store found in a given working directory.  The child
inherits the terminal so npm's own progress output reaches the user.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from pathlib import Path

from rich.markup import escape

from .errors import InstallationFailure
from .utils import console, run_command


def format_specifier(name: str, version: str | None = None) -> str:
    """Return ``name@version``, or just ``name`` when no version is pinned."""
    return f"{name}@{version}" if version else name


def specifier_name(specifier: str) -> str:
    """Strip the version from a specifier, keeping any ``@scope/`` prefix.

    Examples::

        specifier_name("jest") -> "jest"
        specifier_name("jest@29.7.0") -> "jest"
        specifier_name("@types/node@20.1.0") -> "@types/node"
    """
    if not specifier:
        return specifier
    head, sep, _ = specifier[1:].partition("@")
    return specifier[0] + head if sep else specifier


class PackageInstaller:
    """Runs ``npm install`` for a set of specifiers.

    Calls on one instance never overlap: each ``install`` holds a lock for
    the lifetime of its child process, because every call writes the same
    manifest and dependency store.
    """

    def __init__(self, binary: str = "npm") -> None:
        self.binary = binary
        self._lock = asyncio.Lock()

    def build_command(
        self,
        specifiers: Sequence[str],
        verbose: bool = False,
        is_dev: bool = False,
    ) -> list[str]:
        """Build the argv for an install call.

        Produces ``npm install --save|--save-dev --save-exact --loglevel error
        <specifiers...> [--verbose]``.
        """
        cmd = [
            self.binary,
            "install",
            "--save-dev" if is_dev else "--save",
            "--save-exact",
            "--loglevel",
            "error",
            *specifiers,
        ]
        if verbose:
            cmd.append("--verbose")
        return cmd

    async def install(
        self,
        specifiers: Sequence[str],
        verbose: bool = False,
        is_dev: bool = False,
        cwd: str | Path | None = None,
    ) -> None:
        """Install *specifiers* into the project at *cwd*.

        Args:
            specifiers: ``name`` or ``name@version`` strings, passed verbatim.
            verbose: Escalate npm's logging.
            is_dev: Save as devDependencies instead of dependencies.
            cwd: Directory holding the manifest to update.

        Raises:
            InstallationFailure: If npm cannot be started or exits non-zero.
        """
        cmd = self.build_command(specifiers, verbose=verbose, is_dev=is_dev)
        command_line = " ".join(cmd)

        async with self._lock:
            if verbose:
                console.print(f"  [dim]{escape(command_line)}[/dim]")
            try:
                returncode, _, _ = await run_command(cmd, cwd=cwd, capture=False)
            except FileNotFoundError:
                raise InstallationFailure(
                    command_line,
                    reason=f"'{self.binary}' not found. Ensure it is installed and in PATH.",
                )
            except PermissionError:
                raise InstallationFailure(
                    command_line,
                    reason=f"permission denied executing '{self.binary}'.",
                )

        if returncode != 0:
            raise InstallationFailure(command_line, exit_code=returncode)

    async def check_available(self) -> bool:
        """Check if the package manager can be executed.

        Returns:
            True if ``<binary> --version`` exits successfully.
        """
        try:
            returncode, stdout, _ = await run_command(
                [self.binary, "--version"], timeout=30.0
            )
        except (FileNotFoundError, PermissionError):
            console.print(
                f"[red]{escape(self.binary)} not available:[/red] not found in PATH."
            )
            return False

        if returncode != 0:
            console.print(f"[red]{escape(self.binary)} --version failed.[/red]")
            return False

        console.print(f"[green]{escape(self.binary)} available:[/green] {escape(stdout)}")
        return True
