"""Scratch workspace for installing a template package in isolation.

The template package is installed into ``<root>/tmp-template`` rather than
the new library itself, so that the template's own dependency tree never
lands in the consumer manifest.  npm needs a manifest to write into, so the
workspace starts with a copy of the consumer's ``package.json``.
"""

from __future__ import annotations

import asyncio
import shutil
from pathlib import Path
from types import TracebackType

from ..errors import FilesystemFailure
from ..utils import print_warning


class ScratchWorkspace:
    """Async context manager owning the scratch directory.

    The directory is created on entry and removed on exit, whether the body
    succeeded or raised.

    Usage::

        async with ScratchWorkspace(root / "tmp-template", root / "package.json") as ws:
            await installer.install([spec], cwd=ws.path)
            ws.release_manifest()
    """

    def __init__(self, path: str | Path, manifest_source: str | Path) -> None:
        self.path = Path(path)
        self.manifest_source = Path(manifest_source)
        self.manifest_copy = self.path / self.manifest_source.name

    async def __aenter__(self) -> "ScratchWorkspace":
        await asyncio.to_thread(self._create)
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await asyncio.to_thread(self.remove)

    def _create(self) -> None:
        try:
            self.path.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(self.manifest_source, self.manifest_copy)
        except OSError as exc:
            self.remove()
            raise FilesystemFailure(
                f"Cannot prepare scratch workspace {self.path}: {exc}", path=self.path
            ) from exc

    def release_manifest(self) -> None:
        """Drop the manifest copy once the template package is installed."""
        self.manifest_copy.unlink(missing_ok=True)

    def remove(self) -> None:
        """Delete the scratch directory and everything in it."""
        if not self.path.exists():
            return
        try:
            shutil.rmtree(self.path)
        except OSError as exc:
            print_warning(f"Could not remove {self.path}: {exc}")
