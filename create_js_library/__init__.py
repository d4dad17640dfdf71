"""create-js-library -- bootstrap JavaScript libraries from npm template packages.

Quick usage::

    from create_js_library import Bootstrapper, Config, prepare_project

    config = Config()
    root = prepare_project("my-lib", ".", config)
    exit_code = await Bootstrapper(config, root, template="typescript").run()
"""

from create_js_library.bootstrap import Bootstrapper, Stage
from create_js_library.config import Config
from create_js_library.errors import (
    CreateLibraryError,
    FilesystemFailure,
    InstallationFailure,
    ProjectSetupError,
    TemplateLoadFailure,
    TemplateResolutionError,
)
from create_js_library.installer import PackageInstaller
from create_js_library.project import prepare_project

__version__ = "0.1.0"

__all__ = [
    "Bootstrapper",
    "Stage",
    "Config",
    "PackageInstaller",
    "prepare_project",
    "CreateLibraryError",
    "InstallationFailure",
    "TemplateLoadFailure",
    "FilesystemFailure",
    "TemplateResolutionError",
    "ProjectSetupError",
]
