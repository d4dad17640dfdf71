"""create-js-library bootstrap orchestrator.

Turns a freshly created directory holding a bare ``package.json`` into a
library based on a template package:

1. Resolve the template name to an npm package.
2. Install the template package into a scratch workspace.
3. Load the template's ``template.json``.
4. Install the template's dependencies, then its dev dependencies.
5. Merge the template's scripts into ``package.json``.
6. Copy the template's ``template/`` tree into the library.

Every step runs strictly after the previous one.  Once the template package
is installed, any failure rolls back the generated ``package.json`` and
``node_modules`` (and the directory itself if nothing else is left).

Usage::

    python -m create_js_library.bootstrap my-lib
    python -m create_js_library.bootstrap my-lib --template typescript --verbose
"""

from __future__ import annotations

import asyncio
import sys
import time
from enum import Enum
from pathlib import Path

from rich.markup import escape
from rich.panel import Panel

from .config import Config
from .errors import (
    FilesystemFailure,
    InstallationFailure,
    ProjectSetupError,
    TemplateResolutionError,
)
from .installer import PackageInstaller, specifier_name
from .manifest import merge_into
from .materializer import materialize
from .project import prepare_project
from .rollback import ArtifactLedger
from .template import (
    ScratchWorkspace,
    TemplateMetadata,
    TemplatePackage,
    TemplateResolver,
    load_template_metadata,
)
from .utils import (
    console,
    format_duration,
    print_error,
    print_phase_header,
    print_success,
    print_summary_table,
)


class Stage(str, Enum):
    """States of a bootstrap run, in the order they are entered."""

    RESOLVING_TEMPLATE = "resolving-template"
    INSTALLING_TEMPLATE_PACKAGE = "installing-template-package"
    LOADING_TEMPLATE_METADATA = "loading-template-metadata"
    INSTALLING_DEPENDENCIES = "installing-dependencies"
    INSTALLING_DEV_DEPENDENCIES = "installing-dev-dependencies"
    MERGING_MANIFEST = "merging-manifest"
    MATERIALIZING_FILES = "materializing-files"
    DONE = "done"
    ROLLING_BACK = "rolling-back"
    ABORTED = "aborted"


class Bootstrapper:
    """Drives a single bootstrap run for one target directory.

    Attributes:
        config: Global configuration.
        root: The library directory; must already hold ``package.json``.
        stage: The state the run is currently in.
        history: Every state entered so far, in order.
        ledger: Generated artifacts that rollback may delete.
    """

    def __init__(
        self,
        config: Config,
        root: str | Path,
        app_name: str | None = None,
        template: str | None = None,
        original_directory: str | Path | None = None,
        installer: PackageInstaller | None = None,
        resolver: TemplateResolver | None = None,
    ) -> None:
        self.config = config
        self.root = Path(root).resolve()
        self.app_name = app_name or self.root.name
        self.template = template
        self.original_directory = Path(original_directory or self.root.parent)
        self.installer = installer or PackageInstaller(config.package_manager)
        self.resolver = resolver or TemplateResolver(prefix=config.template_prefix)

        self.stage = Stage.RESOLVING_TEMPLATE
        self.history: list[Stage] = []
        self.ledger = ArtifactLedger(self.root, config.known_artifacts)
        self.files_written: list[Path] = []
        self.deleted: list[str] = []

    # ------------------------------------------------------------------
    # Dependency sets
    # ------------------------------------------------------------------

    def dependency_specifiers(self, metadata: TemplateMetadata) -> list[str]:
        """Runtime dependencies to install: exactly what the template declares."""
        return metadata.dependency_specifiers()

    def dev_dependency_specifiers(self, metadata: TemplateMetadata) -> list[str]:
        """Dev dependencies to install.

        Always starts with the test runner, followed by the template's
        declared dev dependencies.  Typed templates also get the typed
        tooling, each package added once even if the template already
        declares it.
        """
        specifiers = [self.config.test_runner, *metadata.dev_dependency_specifiers()]
        if self.config.is_typed_variant(self.template):
            present = {specifier_name(s) for s in specifiers}
            for tool in self.config.typed_tooling:
                if specifier_name(tool) not in present:
                    specifiers.append(tool)
                    present.add(specifier_name(tool))
        return specifiers

    # ------------------------------------------------------------------
    # Run
    # ------------------------------------------------------------------

    async def run(self) -> int:
        """Execute the bootstrap.

        Returns:
            The process exit status: ``0`` on success, ``1`` on failure.
        """
        started = time.monotonic()

        if not await self._preflight():
            return 1

        console.print("Installing packages. This might take a couple of minutes.")

        self._enter(Stage.RESOLVING_TEMPLATE)
        try:
            package = await self.resolver.resolve(self.template, self.original_directory)
        except TemplateResolutionError as exc:
            print_error("Fail to get template package:")
            console.print(escape(str(exc)))
            return 1

        self.ledger.record(self.config.manifest_file)

        failure: Exception | None = None
        workspace = ScratchWorkspace(
            self.config.scratch_path(self.root), self.config.manifest_path(self.root)
        )
        try:
            async with workspace:
                if not await self._install_template(package, workspace):
                    return 1
                package_path = self.config.installed_package_path(workspace.path, package.name)
                try:
                    await self._install_and_merge(package_path)
                except Exception as exc:
                    failure = exc
        except FilesystemFailure as exc:
            # the scratch workspace itself could not be created
            print_error("Fail to get template package:")
            console.print(escape(str(exc)))
            return 1

        if failure is not None:
            self._report_failure(failure)
            await self._rollback()
            return 1

        self._enter(Stage.DONE)
        self._print_summary(package, time.monotonic() - started)
        return 0

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    async def _preflight(self) -> bool:
        manifest = self.config.manifest_path(self.root)
        if not manifest.is_file():
            print_error(f"No {self.config.manifest_file} found in {self.root}")
            return False
        return await self.installer.check_available()

    async def _install_template(
        self, package: TemplatePackage, workspace: ScratchWorkspace
    ) -> bool:
        """Install the template package into the scratch workspace.

        A failure here is reported and ends the run without rollback.
        """
        print_phase_header("Getting template")
        self._enter(Stage.INSTALLING_TEMPLATE_PACKAGE)
        try:
            await self.installer.install(
                [package.specifier],
                verbose=self.config.verbose,
                is_dev=False,
                cwd=workspace.path,
            )
        except InstallationFailure as exc:
            print_error("Fail to get template package:")
            console.print(escape(str(exc)))
            return False
        workspace.release_manifest()
        return True

    async def _install_and_merge(self, package_path: Path) -> None:
        self._enter(Stage.LOADING_TEMPLATE_METADATA)
        metadata = await asyncio.to_thread(
            load_template_metadata, package_path, self.config.metadata_file
        )
        dependencies = self.dependency_specifiers(metadata)
        dev_dependencies = self.dev_dependency_specifiers(metadata)

        print_phase_header("Installing dependencies")
        self.ledger.record(self.config.dependency_store)

        self._enter(Stage.INSTALLING_DEPENDENCIES)
        await self.installer.install(
            dependencies, verbose=self.config.verbose, is_dev=False, cwd=self.root
        )
        self._enter(Stage.INSTALLING_DEV_DEPENDENCIES)
        await self.installer.install(
            dev_dependencies, verbose=self.config.verbose, is_dev=True, cwd=self.root
        )

        self._enter(Stage.MERGING_MANIFEST)
        await asyncio.to_thread(merge_into, self.config.manifest_path(self.root), metadata)

        print_phase_header("Creating files from template")
        self._enter(Stage.MATERIALIZING_FILES)
        self.files_written = await asyncio.to_thread(
            materialize, package_path, self.root, self.config.template_dir
        )

    async def _rollback(self) -> None:
        self._enter(Stage.ROLLING_BACK)
        self.deleted = await asyncio.to_thread(self.ledger.rollback, self.app_name)
        console.print("Done.")
        self._enter(Stage.ABORTED)

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    def _enter(self, stage: Stage) -> None:
        self.stage = stage
        self.history.append(stage)

    def _report_failure(self, exc: Exception) -> None:
        console.print()
        console.print("Aborting installation.")
        if isinstance(exc, InstallationFailure):
            console.print(f"  [cyan]{escape(exc.command)}[/cyan] has failed.")
        else:
            console.print("[red]Unexpected error. Please report it as a bug:[/red]")
            console.print(f"{type(exc).__name__}: {escape(str(exc))}")
        console.print()

    def _print_summary(self, package: TemplatePackage, elapsed: float) -> None:
        print_summary_table(
            {
                "Library": self.app_name,
                "Location": str(self.root),
                "Template": package.specifier,
                "Files created": str(len(self.files_written)),
                "Duration": format_duration(elapsed),
            },
            title="Bootstrap Summary",
        )
        print_success(f"Success! Created {self.app_name} at {self.root}")


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for ``create-js-library``."""
    import argparse

    parser = argparse.ArgumentParser(
        prog="create-js-library",
        description="Bootstrap a new JavaScript library from a template package",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  create-js-library my-lib\n"
            "  create-js-library my-lib --template typescript\n"
            "  create-js-library my-lib --template file:../my-template --verbose\n"
        ),
    )
    parser.add_argument("project_directory", help="Name of the library to create")
    parser.add_argument(
        "--template",
        default=None,
        help="Template name, file: path, tarball or git URL (default: cjl-template)",
    )
    parser.add_argument("--verbose", action="store_true", help="Print npm's verbose logs")
    parser.add_argument(
        "--npm",
        dest="package_manager",
        default=None,
        help="Package manager binary to run (default: npm)",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="JSON configuration file (defaults come from CJL_* environment variables)",
    )

    args = parser.parse_args(argv)

    if args.config:
        config_path = Path(args.config)
        if not config_path.exists():
            console.print(f"[bold red]Error:[/bold red] Config file not found: {config_path}")
            sys.exit(1)
        config = Config.load(config_path)
    else:
        config = Config.from_env()
    if args.verbose:
        config.verbose = True
    if args.package_manager:
        config.package_manager = args.package_manager

    original_directory = Path.cwd()
    try:
        root = prepare_project(args.project_directory, original_directory, config)
    except ProjectSetupError as exc:
        console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}")
        sys.exit(1)

    console.print(
        Panel(
            f"Creating a new JavaScript library in [green]{escape(str(root))}[/green]",
            title="[bold]create-js-library[/bold]",
            border_style="bright_cyan",
        )
    )

    bootstrapper = Bootstrapper(
        config,
        root,
        app_name=args.project_directory,
        template=args.template,
        original_directory=original_directory,
    )
    code = asyncio.run(bootstrapper.run())
    if code != 0:
        sys.exit(code)


if __name__ == "__main__":
    main()
