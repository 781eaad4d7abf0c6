"""Bill of materials models."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from module_bom.models.layer import Layer


@dataclass
class BOMEntry:
    """A single component in a bill of materials.

    The metadata bag carries component details such as `version`, `purl`
    and `licenses`. Uniqueness is not enforced.
    """

    name: str
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def version(self) -> str | None:
        return self.metadata.get("version")

    @property
    def purl(self) -> str | None:
        return self.metadata.get("purl")

    @property
    def licenses(self) -> list[str]:
        return list(self.metadata.get("licenses", []))

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain dict suitable for TOML serialization."""
        return {"name": self.name, "metadata": dict(self.metadata)}


@dataclass
class BuildResult:
    """Result of a build, handed back to the host build system."""

    layers: list[Layer] = field(default_factory=list)
    """Layers contributed by the build"""

    build_bom: list[BOMEntry] = field(default_factory=list)
    """Build-time BOM: tool provenance followed by every discovered component"""

    launch_bom: list[BOMEntry] = field(default_factory=list)
    """Launch-time BOM: discovered components only"""
