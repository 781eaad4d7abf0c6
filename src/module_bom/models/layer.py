"""Layer models.

A layer is a directory under the build's layers directory, described by a
sibling `<name>.toml` file. The `[metadata]` table of that file is the only
record of what the layer holds, and survives between builds when the layer
is marked cacheable.
"""

from __future__ import annotations

import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import tomlkit


@dataclass
class Layer:
    """A single layer directory and its lifecycle flags."""

    name: str
    path: Path

    build: bool = False
    """Contents are available to subsequent buildpacks"""

    launch: bool = False
    """Contents are included in the application image"""

    cache: bool = False
    """Contents are restored on the next build"""

    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def toml_path(self) -> Path:
        return self.path.parent / f"{self.name}.toml"

    @property
    def bin_dir(self) -> Path:
        """Directory holding the executables installed into the layer."""
        return self.path / "bin"

    def reset(self) -> Layer:
        """Wipe the layer contents, metadata and flags.

        The `<name>.toml` file is removed too, so an interrupted reset never
        leaves old metadata describing an empty directory.

        Returns:
            The layer itself, now empty
        """
        if self.path.exists():
            shutil.rmtree(self.path)
        self.path.mkdir(parents=True)
        self.toml_path.unlink(missing_ok=True)

        self.build = False
        self.launch = False
        self.cache = False
        self.metadata = {}
        return self

    def to_toml(self) -> str:
        """Render the layer description written to `<name>.toml`."""
        doc = tomlkit.document()

        types = tomlkit.table()
        types["build"] = self.build
        types["launch"] = self.launch
        types["cache"] = self.cache
        doc["types"] = types

        if self.metadata:
            doc["metadata"] = self.metadata

        return tomlkit.dumps(doc)


class Layers:
    """The layers directory of a build."""

    def __init__(self, path: Path):
        self.path = path

    def get(self, name: str) -> Layer:
        """Get a layer by name, loading metadata left by a previous build.

        Creating the directory is idempotent; existing contents are kept.

        Args:
            name: Layer name

        Returns:
            Layer with metadata from `<name>.toml` if present
        """
        layer = Layer(name=name, path=self.path / name)
        layer.path.mkdir(parents=True, exist_ok=True)

        if layer.toml_path.exists():
            data = tomlkit.parse(layer.toml_path.read_text()).unwrap()
            layer.metadata = dict(data.get("metadata", {}))

        return layer
