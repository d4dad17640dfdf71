"""Exception hierarchy for the bootstrap run.

Every failure carries the context needed to report it (the failing command,
the offending path) as attributes, so the orchestrator can decide how to
present it without parsing messages.
"""

from __future__ import annotations

from pathlib import Path


class CreateLibraryError(Exception):
    """Base class for all create-js-library failures."""


class InstallationFailure(CreateLibraryError):
    """Raised when the package installer cannot run or exits non-zero."""

    def __init__(
        self,
        command: str,
        exit_code: int | None = None,
        reason: str = "",
    ) -> None:
        self.command = command
        self.exit_code = exit_code
        self.reason = reason
        if reason:
            message = f"{command} could not be run: {reason}"
        else:
            message = f"{command} exited with code {exit_code}"
        super().__init__(message)


class TemplateLoadFailure(CreateLibraryError):
    """Raised when an installed template's metadata cannot be loaded."""

    def __init__(self, message: str, path: str | Path = "") -> None:
        self.path = Path(path) if path else None
        super().__init__(message)


class FilesystemFailure(CreateLibraryError):
    """Raised when reading, writing, copying or removing files fails."""

    def __init__(self, message: str, path: str | Path = "") -> None:
        self.path = Path(path) if path else None
        super().__init__(message)


class TemplateResolutionError(CreateLibraryError):
    """Raised when a template name cannot be turned into a package."""

    def __init__(self, message: str, template: str = "") -> None:
        self.template = template
        super().__init__(message)


class ProjectSetupError(CreateLibraryError):
    """Raised when the target directory cannot be prepared."""
