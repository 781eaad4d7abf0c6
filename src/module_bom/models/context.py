"""Build context model."""

from dataclasses import dataclass
from pathlib import Path

from module_bom.models.layer import Layers


@dataclass
class BuildpackInfo:
    """Name and version of the running buildpack."""

    name: str = ""
    version: str = ""


@dataclass
class BuildContext:
    """Everything a build needs to know about where it runs."""

    cnb_path: Path
    """Root of the buildpack (contains buildpack.toml)"""

    platform_path: Path
    """Platform directory provided by the lifecycle"""

    layers: Layers
    """Layers directory for this build"""

    stack: str
    """Stack identifier the build runs on"""

    working_dir: Path
    """Application source directory"""

    buildpack_info: BuildpackInfo
