"""Target directory preparation.

Validates the library name, creates the directory and writes the initial
``package.json`` that the installer and the manifest merger then build on.
"""

from __future__ import annotations

import re
from pathlib import Path
from urllib.parse import quote

from .config import Config
from .errors import ProjectSetupError
from .installer import specifier_name
from .utils import write_manifest

# Entries that may already exist in a directory we scaffold into.
SAFE_EXISTING_ENTRIES: frozenset[str] = frozenset(
    {
        ".DS_Store",
        ".git",
        ".gitattributes",
        ".gitignore",
        ".gitlab-ci.yml",
        ".hg",
        ".hgcheck",
        ".hgignore",
        ".idea",
        ".npmignore",
        ".travis.yml",
        "docs",
        "LICENSE",
        "README.md",
        "mkdocs.yml",
        "Thumbs.db",
    }
)

_SAFE_SUFFIXES = (".iml",)
_LOG_PREFIXES = ("npm-debug.log", "yarn-error.log", "yarn-debug.log")

_RESERVED_NAMES = frozenset({"node_modules", "favicon.ico"})
_SCOPED_RE = re.compile(r"^(?:@([^/]+?)/)?([^/]+?)$")

INITIAL_VERSION = "0.1.0"


def validate_package_name(name: str) -> list[str]:
    """Return the reasons *name* is not a valid npm package name.

    An empty list means the name is valid.
    """
    problems: list[str] = []
    if not name:
        return ["name length must be greater than zero"]
    if len(name) > 214:
        problems.append("name can no longer contain more than 214 characters")
    if name != name.strip():
        problems.append("name cannot contain leading or trailing spaces")
    if name.startswith("."):
        problems.append("name cannot start with a period")
    if name.startswith("_"):
        problems.append("name cannot start with an underscore")
    if name.lower() in _RESERVED_NAMES:
        problems.append(f"{name} is a reserved name")
    if name.lower() != name:
        problems.append("name can no longer contain capital letters")
    if re.search(r"[~'!()*]", name.split("/")[-1]):
        problems.append('name can no longer contain special characters ("~\'!()*")')

    match = _SCOPED_RE.match(name)
    if match:
        scope, bare = match.group(1), match.group(2)
        if quote(bare, safe="") != bare or (scope and quote(scope, safe="") != scope):
            problems.append("name can only contain URL-friendly characters")
    elif quote(name, safe="") != name:
        problems.append("name can only contain URL-friendly characters")
    return problems


def conflicting_entries(root: Path) -> list[str]:
    """Entries in *root* that would be clobbered or confuse the bootstrap."""
    if not root.exists():
        return []
    conflicts = []
    for entry in sorted(root.iterdir()):
        name = entry.name
        if name in SAFE_EXISTING_ENTRIES:
            continue
        if name.endswith(_SAFE_SUFFIXES) or name.startswith(_LOG_PREFIXES):
            continue
        conflicts.append(name)
    return conflicts


def prepare_project(name: str, parent: str | Path, config: Config) -> Path:
    """Create ``<parent>/<name>`` and write its initial manifest.

    Raises:
        ProjectSetupError: If the name is invalid, clashes with a dependency
            the bootstrap installs, or the directory holds conflicting files.
    """
    problems = validate_package_name(name)
    if problems:
        raise ProjectSetupError(
            f'Cannot create a project named "{name}" because of npm naming restrictions:\n'
            + "\n".join(f"  * {p}" for p in problems)
        )

    fixed_dependencies = {config.test_runner, *config.typed_tooling}
    if name in {specifier_name(d) for d in fixed_dependencies}:
        raise ProjectSetupError(
            f'Cannot create a project named "{name}" because a dependency with '
            "the same name exists. Please choose a different project name."
        )

    root = Path(parent).resolve() / name.split("/")[-1]
    conflicts = conflicting_entries(root)
    if conflicts:
        raise ProjectSetupError(
            f"The directory {root} contains files that could conflict:\n"
            + "\n".join(f"  {c}" for c in conflicts)
            + "\nEither try using a new directory name, or remove the files listed above."
        )

    try:
        root.mkdir(parents=True, exist_ok=True)
        write_manifest(
            {"name": name, "version": INITIAL_VERSION, "private": True},
            config.manifest_path(root),
        )
    except OSError as exc:
        raise ProjectSetupError(f"Cannot create {root}: {exc}") from exc
    return root
