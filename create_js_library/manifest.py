"""Consumer manifest merging.

After the installer has written ``dependencies`` and ``devDependencies`` into
the new library's ``package.json``, the template's ``scripts`` replace the
manifest's own.  Everything else in the manifest is kept verbatim.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from .errors import FilesystemFailure
from .template.metadata import TemplateMetadata
from .utils import load_json, write_manifest

_DEPENDENCY_SECTIONS = ("dependencies", "devDependencies")


def merge_manifest(
    current: dict[str, Any], metadata: TemplateMetadata
) -> dict[str, Any] | None:
    """Return *current* with the template's scripts merged in.

    Returns ``None`` when the template declares no scripts; there is nothing
    to merge in that case.  The dependency sections are moved after
    ``scripts`` and only emitted when present in *current*.
    """
    if metadata.scripts is None:
        return None

    merged = {k: v for k, v in current.items() if k not in _DEPENDENCY_SECTIONS}
    # an existing "scripts" key keeps its position
    merged["scripts"] = dict(metadata.scripts)
    for section in _DEPENDENCY_SECTIONS:
        if section in current:
            merged[section] = current[section]
    return merged


def merge_into(manifest_path: str | Path, metadata: TemplateMetadata) -> bool:
    """Merge the template's scripts into the manifest file at *manifest_path*.

    Returns:
        ``True`` if the file was rewritten, ``False`` if the template declares
        no scripts and the file was left untouched.

    Raises:
        FilesystemFailure: If the manifest cannot be read, parsed or written.
    """
    path = Path(manifest_path)
    if metadata.scripts is None:
        return False

    try:
        current = load_json(path)
    except (OSError, ValueError) as exc:
        # json.JSONDecodeError is a ValueError
        raise FilesystemFailure(f"Cannot read manifest {path}: {exc}", path=path) from exc

    merged = merge_manifest(current, metadata) or current

    try:
        write_manifest(merged, path)
    except (OSError, TypeError) as exc:
        raise FilesystemFailure(f"Cannot write manifest {path}: {exc}", path=path) from exc
    return True
