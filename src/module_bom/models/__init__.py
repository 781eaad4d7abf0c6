from module_bom.models.bom import BOMEntry, BuildResult
from module_bom.models.context import BuildContext, BuildpackInfo
from module_bom.models.dependency import Dependency
from module_bom.models.layer import Layer, Layers

__all__ = [
    "BOMEntry",
    "BuildContext",
    "BuildResult",
    "BuildpackInfo",
    "Dependency",
    "Layer",
    "Layers",
]
