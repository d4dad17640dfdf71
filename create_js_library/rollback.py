"""Compensating cleanup for a failed bootstrap.

The ledger records which generated artifacts a run is responsible for.  Only
names from a fixed allow-list, directly under the target root, can ever be
recorded, so rollback cannot delete anything the run did not generate.
"""

from __future__ import annotations

import shutil
from collections.abc import Iterable
from pathlib import Path

from rich.markup import escape

from .utils import console, print_warning


class ArtifactLedger:
    """Transaction log of generated artifacts under a target root."""

    def __init__(self, root: str | Path, allowed: Iterable[str]) -> None:
        self.root = Path(root)
        self.allowed = tuple(allowed)
        self._recorded: list[str] = []

    @property
    def recorded(self) -> list[str]:
        return list(self._recorded)

    def record(self, name: str) -> None:
        """Mark ``<root>/<name>`` as generated by this run.

        Raises:
            ValueError: If *name* is not one of the allowed artifacts.
        """
        if name not in self.allowed:
            raise ValueError(
                f"{name!r} is not a known generated artifact (allowed: {', '.join(self.allowed)})"
            )
        if name not in self._recorded:
            self._recorded.append(name)

    def rollback(self, app_name: str | None = None) -> list[str]:
        """Delete every recorded artifact, then the root if it is left empty.

        Best-effort: a deletion error is reported and the remaining artifacts
        are still attempted.

        Returns:
            Names of the entries that were deleted.  The root itself is
            reported as ``"<app_name>/"`` when removed.
        """
        deleted: list[str] = []
        if not self.root.is_dir():
            return deleted

        for name in self._recorded:
            target = self.root / name
            if not (target.exists() or target.is_symlink()):
                continue
            console.print(f"Deleting generated file... [cyan]{escape(name)}[/cyan]")
            if _remove(target):
                deleted.append(name)

        if not any(self.root.iterdir()):
            label = f"{app_name or self.root.name}/"
            console.print(
                f"Deleting [cyan]{escape(label)}[/cyan] from "
                f"[cyan]{escape(str(self.root.parent.resolve()))}[/cyan]"
            )
            if _remove(self.root):
                deleted.append(label)

        return deleted


def _remove(path: Path) -> bool:
    try:
        if path.is_dir() and not path.is_symlink():
            shutil.rmtree(path)
        else:
            path.unlink()
    except OSError as exc:
        print_warning(f"Could not delete {path}: {exc}")
        return False
    return True
