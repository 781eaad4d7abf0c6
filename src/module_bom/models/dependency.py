"""Dependency descriptor model."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Dependency:
    """A concrete dependency resolved from the buildpack catalog.

    Immutable once resolved. Consumed by the provisioner and by BOM entry
    generation.
    """

    id: str
    """Dependency identifier (e.g., 'cyclonedx-node-module')"""

    version: str
    """Resolved version"""

    sha256: str
    """SHA-256 checksum of the dependency archive"""

    uri: str
    """Where the dependency archive is downloaded from"""

    name: str = ""
    """Human-readable name"""

    stacks: tuple[str, ...] = field(default_factory=tuple)
    """Stacks (platforms) the dependency supports"""

    licenses: tuple[str, ...] = field(default_factory=tuple)
    """License identifiers declared for the dependency"""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Dependency:
        """Create a Dependency from a `[[metadata.dependencies]]` table.

        Licenses may be plain strings or tables with a `type` key.
        """
        licenses = []
        for license in data.get("licenses", []):
            if isinstance(license, dict):
                license = license.get("type", "")
            if license:
                licenses.append(str(license))

        return cls(
            id=data["id"],
            version=str(data["version"]),
            sha256=data.get("sha256", ""),
            uri=data.get("uri", ""),
            name=data.get("name", ""),
            stacks=tuple(data.get("stacks", [])),
            licenses=tuple(licenses),
        )

    def supports_stack(self, stack: str) -> bool:
        """Check whether the dependency can be installed on a stack."""
        return stack in self.stacks or "*" in self.stacks
