"""module-bom: provision cyclonedx-bom and generate application bills of materials."""

from module_bom.build import Build
from module_bom.config import __version__
from module_bom.logging import get_logger
from module_bom.models import BOMEntry, BuildContext, BuildResult, Dependency, Layer, Layers

__all__ = [
    "__version__",
    "BOMEntry",
    "Build",
    "BuildContext",
    "BuildResult",
    "Dependency",
    "Layer",
    "Layers",
    "get_logger",
]
