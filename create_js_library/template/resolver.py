"""Template name resolution.

Maps whatever the user passed as ``--template`` to an installable npm
specifier plus the package name that npm will install it under.  Accepted
forms:

* nothing                      -> the default ``cjl-template`` package
* ``lib`` / ``@scope/lib@1.2``  -> ``cjl-template-lib`` / ``@scope/cjl-template-lib@1.2``
* ``cjl-template-lib``          -> used as-is
* ``@scope``                    -> ``@scope/cjl-template``
* ``file:../my-template``       -> a local directory or tarball
* ``./my-template.tgz``         -> a local tarball, resolved like ``file:``
* ``https://.../t.tgz``         -> a remote tarball
* ``git+https://.../t.git``     -> a git repository
"""

from __future__ import annotations

import io
import json
import re
import tarfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import httpx
from rich.markup import escape

from ..errors import TemplateResolutionError
from ..utils import console

_PACKAGE_RE = re.compile(r"^(@[^/]+/)?([^@]+)?(@.+)?$")
_TARBALL_RE = re.compile(r"^.+\.(tgz|tar\.gz)$")
_GIT_NAME_RE = re.compile(r"([^/]+)\.git(#.*)?$")


@dataclass(frozen=True)
class TemplatePackage:
    """A template package ready to be installed."""

    specifier: str
    name: str
    version: str | None = None


def _read_tarball_manifest(data: bytes, source: str) -> dict[str, Any]:
    """Return the ``package.json`` found at the top level of an npm tarball."""
    try:
        with tarfile.open(fileobj=io.BytesIO(data), mode="r:*") as archive:
            for member in archive.getmembers():
                parts = member.name.strip("./").split("/")
                if member.isfile() and len(parts) == 2 and parts[1] == "package.json":
                    fh = archive.extractfile(member)
                    if fh is not None:
                        return json.loads(fh.read().decode("utf-8"))
    except (tarfile.TarError, json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise TemplateResolutionError(
            f"Cannot read package.json from {source}: {exc}", template=source
        ) from exc
    raise TemplateResolutionError(f"No package.json found in {source}", template=source)


class TemplateResolver:
    """Turns a user-supplied template reference into a ``TemplatePackage``."""

    def __init__(self, prefix: str = "cjl-template", http_timeout: float = 60.0) -> None:
        self.prefix = prefix
        self.http_timeout = http_timeout

    # -- Public API --------------------------------------------------------

    async def resolve(
        self, template: str | None, original_directory: str | Path
    ) -> TemplatePackage:
        """Resolve *template* relative to *original_directory*.

        Raises:
            TemplateResolutionError: If the reference is malformed or the
                package name cannot be determined.
        """
        specifier = self.install_specifier(template, original_directory)

        if _TARBALL_RE.match(specifier):
            manifest = await self._tarball_manifest(specifier)
            return self._from_manifest(specifier, manifest)

        if specifier.startswith("git+"):
            match = _GIT_NAME_RE.search(specifier)
            if not match:
                raise TemplateResolutionError(
                    f"Cannot determine package name from {specifier}", template=specifier
                )
            return TemplatePackage(specifier=specifier, name=match.group(1))

        if specifier.startswith("file:"):
            manifest_path = Path(specifier[len("file:"):]) / "package.json"
            try:
                manifest = json.loads(manifest_path.read_text(encoding="utf-8"))
            except (OSError, json.JSONDecodeError) as exc:
                raise TemplateResolutionError(
                    f"Cannot read {manifest_path}: {exc}", template=specifier
                ) from exc
            return self._from_manifest(specifier, manifest)

        if "://" in specifier:
            raise TemplateResolutionError(
                f"Cannot determine package name from {specifier}", template=specifier
            )

        name, version = self._split_version(specifier)
        return TemplatePackage(specifier=specifier, name=name, version=version)

    def install_specifier(self, template: str | None, original_directory: str | Path) -> str:
        """Return the npm specifier to install for *template*."""
        if not template:
            return self.prefix

        if template.startswith("file:"):
            local = Path(original_directory) / template[len("file:"):]
            return f"file:{local.resolve()}"

        if "://" in template:
            return template

        if _TARBALL_RE.match(template):
            local = Path(original_directory) / template
            return f"file:{local.resolve()}"

        match = _PACKAGE_RE.match(template)
        if not match:
            raise TemplateResolutionError(
                f"Invalid template name: {template}", template=template
            )
        scope = match.group(1) or ""
        name = match.group(2) or ""
        version = match.group(3) or ""

        if name == self.prefix or name.startswith(f"{self.prefix}-"):
            return f"{scope}{name}{version}"
        if version and not scope and not name:
            # "@scope" alone selects that scope's default template
            return f"{version}/{self.prefix}"
        return f"{scope}{self.prefix}-{name}{version}"

    # -- Helpers -----------------------------------------------------------

    @staticmethod
    def _split_version(specifier: str) -> tuple[str, str | None]:
        head, sep, version = specifier[1:].partition("@")
        if not sep:
            return specifier, None
        return specifier[0] + head, version or None

    @staticmethod
    def _from_manifest(specifier: str, manifest: dict[str, Any]) -> TemplatePackage:
        name = manifest.get("name")
        if not isinstance(name, str) or not name:
            raise TemplateResolutionError(
                f"Template at {specifier} has no package name", template=specifier
            )
        version = manifest.get("version")
        return TemplatePackage(
            specifier=specifier,
            name=name,
            version=version if isinstance(version, str) else None,
        )

    async def _tarball_manifest(self, specifier: str) -> dict[str, Any]:
        if "://" not in specifier:
            local = Path(specifier[len("file:"):] if specifier.startswith("file:") else specifier)
            try:
                return _read_tarball_manifest(local.read_bytes(), specifier)
            except OSError as exc:
                raise TemplateResolutionError(
                    f"Cannot read {local}: {exc}", template=specifier
                ) from exc

        console.print(f"  [dim]Downloading {escape(specifier)}[/dim]")
        try:
            async with httpx.AsyncClient(
                timeout=self.http_timeout, follow_redirects=True
            ) as client:
                response = await client.get(specifier)
                response.raise_for_status()
        except httpx.HTTPError as exc:
            raise TemplateResolutionError(
                f"Cannot download {specifier}: {exc}", template=specifier
            ) from exc
        return _read_tarball_manifest(response.content, specifier)
