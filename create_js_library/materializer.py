"""Copy a template's bundled file tree into the new library."""

from __future__ import annotations

import shutil
from pathlib import Path

from .errors import FilesystemFailure


def materialize(
    template_package_path: str | Path,
    target_root: str | Path,
    template_dir: str = "template",
) -> list[Path]:
    """Copy ``<template_package_path>/template`` into *target_root*.

    A template without a ``template/`` directory only carries manifest
    metadata; nothing is written and an empty list is returned.  Existing
    files in *target_root* are overwritten by the template's copies.

    Returns:
        The files written, as paths under *target_root*.

    Raises:
        FilesystemFailure: If the copy fails part-way.
    """
    source = Path(template_package_path) / template_dir
    if not source.is_dir():
        return []

    root = Path(target_root)
    written: list[Path] = []

    def _copy(src: str, dst: str) -> str:
        result = shutil.copy2(src, dst)
        written.append(Path(result))
        return result

    try:
        # children only: the root keeps its own mode and mtime
        for child in sorted(source.iterdir()):
            target = root / child.name
            if child.is_dir():
                shutil.copytree(child, target, copy_function=_copy, dirs_exist_ok=True)
            else:
                _copy(str(child), str(target))
    except (OSError, shutil.Error) as exc:
        raise FilesystemFailure(
            f"Cannot copy template files from {source} to {root}: {exc}", path=source
        ) from exc
    return written
