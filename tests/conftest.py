"""Shared pytest fixtures for the create-js-library test suite.

Provides reusable fixtures for:
- A target library root holding an initial ``package.json``
- Installed template packages on disk
- A fake package installer that behaves like npm without the network
- Mock subprocess helpers
"""

from __future__ import annotations

import json
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from create_js_library.config import Config
from create_js_library.errors import InstallationFailure
from create_js_library.installer import specifier_name
from create_js_library.template.resolver import TemplatePackage


# ---------------------------------------------------------------------------
# Paths & Directories
# ---------------------------------------------------------------------------

INITIAL_MANIFEST: dict[str, Any] = {"name": "my-lib", "version": "0.1.0", "private": True}


@pytest.fixture
def config() -> Config:
    """Default configuration."""
    return Config()


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    """Library root with the initial manifest the CLI writes."""
    root = tmp_path / "my-lib"
    root.mkdir()
    (root / "package.json").write_text(json.dumps(INITIAL_MANIFEST, indent=2) + "\n", encoding="utf-8")
    yield root


def write_template_package(
    package_dir: Path,
    metadata: dict[str, Any] | None = None,
    files: dict[str, str] | None = None,
) -> Path:
    """Lay out an installed template package.

    Args:
        package_dir: ``.../node_modules/<name>``.
        metadata: Contents of ``template.json``; omitted when ``None``.
        files: Relative path -> content for the bundled ``template/`` tree.
    """
    package_dir.mkdir(parents=True, exist_ok=True)
    (package_dir / "package.json").write_text(
        json.dumps({"name": package_dir.name, "version": "1.0.0"}), encoding="utf-8"
    )
    if metadata is not None:
        (package_dir / "template.json").write_text(json.dumps(metadata), encoding="utf-8")
    for rel, content in (files or {}).items():
        target = package_dir / "template" / rel
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
    return package_dir


@pytest.fixture
def template_package(tmp_path: Path) -> Callable[..., Path]:
    """Factory creating an installed template package under ``tmp_path``."""

    def factory(
        metadata: dict[str, Any] | None = None,
        files: dict[str, str] | None = None,
        name: str = "cjl-template-lib",
    ) -> Path:
        return write_template_package(
            tmp_path / "installed" / "node_modules" / name, metadata, files
        )

    return factory


# ---------------------------------------------------------------------------
# Fake installer / resolver
# ---------------------------------------------------------------------------


class FakeInstaller:
    """Stands in for ``PackageInstaller``.

    The first call (the template package, run inside the scratch workspace)
    lays out the template package from ``template_metadata`` and
    ``template_files``.  Later calls behave like ``npm install --save-exact``
    in the library root: ``node_modules`` is created and the manifest's
    dependency sections are updated.

    Attributes:
        calls: ``(specifiers, verbose, is_dev, cwd)`` for every call.
        fail_on: Zero-based call indices that exit non-zero.
    """

    def __init__(
        self,
        template_name: str = "cjl-template-lib",
        template_metadata: dict[str, Any] | None = None,
        template_files: dict[str, str] | None = None,
        fail_on: Sequence[int] = (),
        available: bool = True,
    ) -> None:
        self.template_name = template_name
        self.template_metadata = template_metadata if template_metadata is not None else {}
        self.template_files = template_files or {}
        self.fail_on = set(fail_on)
        self.available = available
        self.calls: list[tuple[list[str], bool, bool, Path]] = []
        self.cwd_seen_during_calls: list[Path] = []

    async def check_available(self) -> bool:
        return self.available

    async def install(
        self,
        specifiers: Sequence[str],
        verbose: bool = False,
        is_dev: bool = False,
        cwd: str | Path | None = None,
    ) -> None:
        index = len(self.calls)
        cwd_path = Path(cwd) if cwd is not None else Path.cwd()
        self.calls.append((list(specifiers), verbose, is_dev, cwd_path))
        self.cwd_seen_during_calls.append(Path.cwd())

        if index in self.fail_on:
            flag = "--save-dev" if is_dev else "--save"
            raise InstallationFailure(
                " ".join(["npm", "install", flag, "--save-exact", "--loglevel", "error", *specifiers]),
                exit_code=1,
            )

        if index == 0:
            write_template_package(
                cwd_path / "node_modules" / self.template_name,
                self.template_metadata,
                self.template_files,
            )
            return

        (cwd_path / "node_modules").mkdir(exist_ok=True)
        manifest_path = cwd_path / "package.json"
        manifest = json.loads(manifest_path.read_text(encoding="utf-8"))
        section = manifest.setdefault("devDependencies" if is_dev else "dependencies", {})
        for spec in specifiers:
            name = specifier_name(spec)
            section[name] = spec[len(name) + 1:] if len(spec) > len(name) else "1.0.0"
        manifest_path.write_text(json.dumps(manifest, indent=2) + "\n", encoding="utf-8")


class FakeResolver:
    """Resolves every template to a fixed package."""

    def __init__(self, package: TemplatePackage | None = None, error: Exception | None = None):
        self.package = package or TemplatePackage(
            specifier="cjl-template-lib", name="cjl-template-lib"
        )
        self.error = error
        self.calls: list[tuple[str | None, Path]] = []

    async def resolve(self, template: str | None, original_directory: str | Path) -> TemplatePackage:
        self.calls.append((template, Path(original_directory)))
        if self.error is not None:
            raise self.error
        return self.package


@pytest.fixture
def fake_installer() -> Callable[..., FakeInstaller]:
    """Factory for ``FakeInstaller`` instances."""
    return FakeInstaller


@pytest.fixture
def fake_resolver() -> FakeResolver:
    return FakeResolver()


# ---------------------------------------------------------------------------
# Child processes
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_subprocess() -> Callable[..., AsyncMock]:
    """Factory for a finished npm process to return from a patched
    ``asyncio.create_subprocess_exec``."""

    def factory(stdout: str = "", returncode: int = 0) -> AsyncMock:
        proc = AsyncMock()
        proc.returncode = returncode
        proc.communicate.return_value = (stdout.encode("utf-8"), b"")
        proc.kill = MagicMock()
        return proc

    return factory
