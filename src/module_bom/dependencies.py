"""Dependency resolution, delivery and BOM generation.

Dependencies are declared in the buildpack's buildpack.toml:

    [metadata.default-versions]
    cyclonedx-node-module = "3.*"

    [[metadata.dependencies]]
    id = "cyclonedx-node-module"
    name = "CycloneDX Node.js Module"
    version = "3.10.6"
    sha256 = "..."
    uri = "https://example.com/cyclonedx-node-module-3.10.6.tgz"
    stacks = ["io.buildpacks.stacks.bionic"]

Archives are fetched with httpx unless the buildpack vendors them under
`dependencies/<sha256>/`, verified against their checksum and installed
into a layer directory.
"""

from __future__ import annotations

import fnmatch
import hashlib
import io
import re
import tarfile
from pathlib import Path
from typing import Protocol
from urllib.parse import unquote, urlparse

import httpx
import tomlkit
from packageurl import PackageURL
from tomlkit.exceptions import TOMLKitError

from module_bom.config import DOWNLOAD_TIMEOUT_SECONDS, OFFLINE_DEPENDENCIES_DIR
from module_bom.errors import ProvisionError, ResolutionError
from module_bom.logging import get_logger
from module_bom.models.bom import BOMEntry
from module_bom.models.dependency import Dependency

logger = get_logger(__name__)

ARCHIVE_SUFFIXES = (".tgz", ".tar.gz", ".tar.xz", ".txz", ".tar.bz2", ".tar")


class DependencyManager(Protocol):
    """Resolves, installs and describes buildpack dependencies."""

    def resolve(self, path: Path, id: str, version: str, stack: str) -> Dependency: ...

    def deliver(
        self, dependency: Dependency, cnb_path: Path, layer_path: Path, platform_path: Path
    ) -> None: ...

    def generate_bill_of_materials(self, *dependencies: Dependency) -> list[BOMEntry]: ...


def version_key(version: str) -> tuple:
    """Sort key ordering dotted versions numerically (1.10.0 > 1.9.2)."""
    key = []
    for part in re.split(r"[.\-+]", version):
        key.append((1, int(part), "") if part.isdigit() else (0, 0, part))
    return tuple(key)


def matches_constraint(version: str, constraint: str) -> bool:
    """Check a version against a constraint.

    `*` matches everything, wildcard constraints such as `1.2.*` match by
    pattern, anything else must match exactly.
    """
    if constraint in ("", "*"):
        return True
    if "*" in constraint:
        return fnmatch.fnmatchcase(version, constraint)
    return version == constraint


class DependencyService:
    """Works with the dependencies declared in a buildpack.toml."""

    def __init__(self, timeout: int = DOWNLOAD_TIMEOUT_SECONDS):
        self.timeout = timeout

    def resolve(self, path: Path, id: str, version: str, stack: str) -> Dependency:
        """Pick the highest version of a dependency compatible with a stack.

        Args:
            path: Path to buildpack.toml
            id: Dependency id
            version: Version constraint (`*` uses the default version if declared)
            stack: Stack the build runs on

        Returns:
            The resolved Dependency

        Raises:
            ResolutionError: If the catalog cannot be read or nothing matches
        """
        try:
            data = tomlkit.parse(path.read_text()).unwrap()
        except (OSError, TOMLKitError) as e:
            raise ResolutionError(f"failed to parse {path.name}", e) from e

        metadata = data.get("metadata", {})
        if version in ("", "*"):
            version = metadata.get("default-versions", {}).get(id, version)

        try:
            candidates = [
                Dependency.from_dict(entry)
                for entry in metadata.get("dependencies", [])
                if entry.get("id") == id
            ]
        except (KeyError, AttributeError) as e:
            raise ResolutionError(f"failed to parse {path.name}", e) from e

        compatible = [
            dependency
            for dependency in candidates
            if dependency.supports_stack(stack) and matches_constraint(dependency.version, version)
        ]

        if not compatible:
            supported = ", ".join(sorted({d.version for d in candidates}, key=version_key))
            raise ResolutionError(
                f"failed to satisfy {id!r} dependency version constraint {version!r}",
                f"no compatible versions on {stack!r} stack. Supported versions are: [{supported}]",
            )

        return max(compatible, key=lambda d: version_key(d.version))

    def deliver(
        self, dependency: Dependency, cnb_path: Path, layer_path: Path, platform_path: Path
    ) -> None:
        """Fetch a dependency, verify its checksum and install it into a layer.

        Args:
            dependency: Dependency to install
            cnb_path: Buildpack root (checked for vendored archives)
            layer_path: Layer directory to install into
            platform_path: Platform directory provided by the lifecycle

        Raises:
            ProvisionError: If fetching, verification or installation fails
        """
        logger.debug(f"Platform directory: {platform_path}")
        filename = Path(unquote(urlparse(dependency.uri).path)).name or dependency.id

        payload = self._fetch(dependency, cnb_path / OFFLINE_DEPENDENCIES_DIR / dependency.sha256 / filename)

        checksum = hashlib.sha256(payload).hexdigest()
        if checksum != dependency.sha256:
            raise ProvisionError(
                "checksum does not match",
                f"expected {dependency.sha256}, got {checksum}",
            )

        try:
            if filename.endswith(ARCHIVE_SUFFIXES):
                with tarfile.open(fileobj=io.BytesIO(payload)) as archive:
                    archive.extractall(layer_path, filter="data")
            else:
                bin_dir = layer_path / "bin"
                bin_dir.mkdir(parents=True, exist_ok=True)
                target = bin_dir / filename
                target.write_bytes(payload)
                target.chmod(0o755)
        except (OSError, tarfile.TarError) as e:
            raise ProvisionError(f"failed to install {dependency.id}", e) from e

    def _fetch(self, dependency: Dependency, offline_path: Path) -> bytes:
        """Read a dependency archive from the buildpack, disk or network."""
        try:
            if offline_path.exists():
                logger.debug(f"Using vendored dependency: {offline_path}")
                return offline_path.read_bytes()

            parsed = urlparse(dependency.uri)
            if parsed.scheme in ("", "file"):
                return Path(unquote(parsed.path)).read_bytes()

            logger.info(f"Downloading {dependency.uri}")
            response = httpx.get(dependency.uri, follow_redirects=True, timeout=self.timeout)
            response.raise_for_status()
            return response.content
        except (OSError, httpx.HTTPError) as e:
            raise ProvisionError(f"failed to fetch {dependency.id}", e) from e

    def generate_bill_of_materials(self, *dependencies: Dependency) -> list[BOMEntry]:
        """Describe dependencies as BOM entries.

        Derived from the descriptors only; nothing is executed.
        """
        entries = []
        for dependency in dependencies:
            purl = PackageURL(
                type="generic",
                name=dependency.id,
                version=dependency.version,
                qualifiers={
                    "checksum": f"sha256:{dependency.sha256}",
                    "download_url": dependency.uri,
                },
            )

            metadata = {
                "name": dependency.name,
                "version": dependency.version,
                "sha256": dependency.sha256,
                "stacks": list(dependency.stacks),
                "uri": dependency.uri,
                "purl": purl.to_string(),
            }
            if dependency.licenses:
                metadata["licenses"] = list(dependency.licenses)

            entries.append(BOMEntry(name=dependency.id, metadata=metadata))

        return entries
