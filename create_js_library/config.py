"""create-js-library configuration.

Centralised, typed configuration for the bootstrap run. All settings use
Pydantic v2 models so they can be validated at construction time and loaded
from JSON or environment variables without boiler-plate.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field


class Config(BaseModel):
    """Global create-js-library configuration.

    Holds the package-manager invocation, the fixed dependency sets added to
    every library, and the names of the files and directories the bootstrap
    creates inside the target root.  Instances are typically created once by
    the CLI entry point and passed to ``Bootstrapper``.
    """

    package_manager: str = Field(default="npm", description="Package manager binary")
    verbose: bool = Field(default=False, description="Pass --verbose to the installer")

    template_prefix: str = Field(
        default="cjl-template",
        description="Package name of the default template and prefix of named ones",
    )
    test_runner: str = Field(default="jest", description="Always installed as a dev dependency")
    typed_variant_marker: str = Field(
        default="typescript",
        description="Substring of the template name that selects the typed tooling",
    )
    typed_tooling: list[str] = Field(
        default_factory=lambda: ["@types/node", "@types/jest", "typescript"]
    )

    scratch_dir: str = Field(default="tmp-template")
    template_dir: str = Field(default="template")
    metadata_file: str = Field(default="template.json")
    manifest_file: str = Field(default="package.json")
    dependency_store: str = Field(default="node_modules")

    # ------------------------------------------------------------------
    # Derived values
    # ------------------------------------------------------------------

    @property
    def known_artifacts(self) -> tuple[str, ...]:
        """Entries under the target root that rollback is allowed to delete."""
        return (self.manifest_file, self.dependency_store)

    def scratch_path(self, root: Path) -> Path:
        """Scratch workspace used to install the template package."""
        return root / self.scratch_dir

    def manifest_path(self, root: Path) -> Path:
        return root / self.manifest_file

    def installed_package_path(self, base: Path, package_name: str) -> Path:
        """Where the installer places *package_name* when run from *base*."""
        return base.joinpath(self.dependency_store, *package_name.split("/"))

    def is_typed_variant(self, template: str | None) -> bool:
        """Return ``True`` when the raw template name asks for typed tooling.

        This is a plain substring test on whatever the user typed, so a
        template named ``my-typescript-free-kit`` also matches.
        """
        return self.typed_variant_marker in (template or "")

    # ------------------------------------------------------------------
    # Loading helpers
    # ------------------------------------------------------------------

    @classmethod
    def load(cls, path: Path) -> "Config":
        """Load a previously-saved configuration from JSON.

        Args:
            path: The JSON file to read.

        Returns:
            A validated ``Config`` instance.
        """
        raw = Path(path).read_text(encoding="utf-8")
        return cls.model_validate_json(raw)

    @classmethod
    def from_env(cls) -> "Config":
        """Build a ``Config`` from environment variables.

        Recognised variables (all optional):
            CJL_PACKAGE_MANAGER, CJL_VERBOSE, CJL_TEMPLATE_PREFIX,
            CJL_TEST_RUNNER, CJL_TYPED_MARKER, CJL_TYPED_TOOLING.
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("CJL_PACKAGE_MANAGER"):
            kwargs["package_manager"] = os.environ["CJL_PACKAGE_MANAGER"]
        if os.environ.get("CJL_VERBOSE"):
            kwargs["verbose"] = os.environ["CJL_VERBOSE"].strip().lower() in ("1", "true", "yes")
        if os.environ.get("CJL_TEMPLATE_PREFIX"):
            kwargs["template_prefix"] = os.environ["CJL_TEMPLATE_PREFIX"]
        if os.environ.get("CJL_TEST_RUNNER"):
            kwargs["test_runner"] = os.environ["CJL_TEST_RUNNER"]
        if os.environ.get("CJL_TYPED_MARKER"):
            kwargs["typed_variant_marker"] = os.environ["CJL_TYPED_MARKER"]
        if os.environ.get("CJL_TYPED_TOOLING"):
            kwargs["typed_tooling"] = [
                p.strip() for p in os.environ["CJL_TYPED_TOOLING"].split(",") if p.strip()
            ]

        return cls(**kwargs)
