"""Template package handling.

Key classes:
    TemplateResolver  - Template name -> installable npm specifier
    ScratchWorkspace  - Isolated directory the template package is installed into
    TemplateMetadata  - Validated ``template.json`` contents
"""

from .metadata import TemplateMetadata, TemplatePackageSection, load_template_metadata
from .resolver import TemplatePackage, TemplateResolver
from .workspace import ScratchWorkspace

__all__ = [
    "TemplateResolver",
    "TemplatePackage",
    "ScratchWorkspace",
    "TemplateMetadata",
    "TemplatePackageSection",
    "load_template_metadata",
]
