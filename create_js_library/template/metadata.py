"""Template metadata model and loader.

An installed template package declares what it adds to a new library in a
``template.json`` file at its root::

    {
      "package": {
        "dependencies": {"lodash": "4.17.21"},
        "devDependencies": {"eslint": "8.57.0"},
        "scripts": {"build": "rollup -c", "test": "jest"}
      }
    }

The file is validated before use.  Missing sections are treated as empty, but
a section of the wrong shape is rejected instead of being ignored.
"""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..errors import TemplateLoadFailure
from ..installer import format_specifier


class TemplatePackageSection(BaseModel):
    """The ``package`` section merged into the consumer's manifest."""

    model_config = ConfigDict(extra="allow", frozen=True, populate_by_name=True)

    dependencies: dict[str, str] = Field(default_factory=dict)
    dev_dependencies: dict[str, str] = Field(default_factory=dict, alias="devDependencies")
    # None means "not declared", which is different from an empty mapping.
    scripts: dict[str, str] | None = None


class TemplateMetadata(BaseModel):
    """Validated contents of a template's ``template.json``."""

    model_config = ConfigDict(extra="allow", frozen=True)

    package: TemplatePackageSection = Field(default_factory=TemplatePackageSection)

    @property
    def dependencies(self) -> dict[str, str]:
        return self.package.dependencies

    @property
    def dev_dependencies(self) -> dict[str, str]:
        return self.package.dev_dependencies

    @property
    def scripts(self) -> dict[str, str] | None:
        return self.package.scripts

    def dependency_specifiers(self) -> list[str]:
        """Declared runtime dependencies as ``name@version`` strings."""
        return [format_specifier(name, version) for name, version in self.dependencies.items()]

    def dev_dependency_specifiers(self) -> list[str]:
        """Declared dev dependencies as ``name@version`` strings."""
        return [
            format_specifier(name, version) for name, version in self.dev_dependencies.items()
        ]


def load_template_metadata(
    package_path: str | Path,
    metadata_file: str = "template.json",
) -> TemplateMetadata:
    """Load the metadata of a template installed at *package_path*.

    Raises:
        TemplateLoadFailure: If the package or its metadata file is missing,
            is not valid JSON, or does not match the expected shape.
    """
    package_dir = Path(package_path)
    if not package_dir.is_dir():
        raise TemplateLoadFailure(
            f"Template package not found at {package_dir}", path=package_dir
        )

    metadata_path = package_dir / metadata_file
    try:
        raw = metadata_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise TemplateLoadFailure(
            f"Template package at {package_dir} has no {metadata_file}",
            path=metadata_path,
        )
    except OSError as exc:
        raise TemplateLoadFailure(
            f"Cannot read {metadata_path}: {exc}", path=metadata_path
        ) from exc

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise TemplateLoadFailure(
            f"{metadata_path} is not valid JSON: {exc}", path=metadata_path
        ) from exc

    try:
        return TemplateMetadata.model_validate(data)
    except ValidationError as exc:
        raise TemplateLoadFailure(
            f"{metadata_path} has an invalid shape:\n{exc}", path=metadata_path
        ) from exc
