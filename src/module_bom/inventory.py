"""Cached tool layer management.

The layer metadata records the checksum of the dependency it holds. A layer
whose recorded checksum matches the resolved dependency is reused as-is;
anything else is wiped and provisioned again.
"""

from __future__ import annotations

from module_bom.clock import Clock
from module_bom.config import BUILT_AT_KEY, DEPENDENCY_SHA_KEY, LAYER_NAME
from module_bom.dependencies import DependencyManager
from module_bom.errors import ProvisionError
from module_bom.logging import get_logger
from module_bom.models.context import BuildContext
from module_bom.models.dependency import Dependency
from module_bom.models.layer import Layer

logger = get_logger(__name__)


def is_stale(layer: Layer, dependency: Dependency) -> bool:
    """Check whether a layer holds something other than the given dependency."""
    cached_sha = layer.metadata.get(DEPENDENCY_SHA_KEY)
    return not isinstance(cached_sha, str) or cached_sha != dependency.sha256


class ArtifactInventory:
    """Provides the layer holding a provisioned dependency for one build."""

    def __init__(
        self,
        context: BuildContext,
        dependency_manager: DependencyManager,
        clock: Clock,
        layer_name: str = LAYER_NAME,
    ):
        self.context = context
        self.dependency_manager = dependency_manager
        self.clock = clock
        self.layer_name = layer_name

    def obtain(self, dependency: Dependency) -> Layer:
        """Get the layer for a dependency, provisioning it if the cache is stale.

        Args:
            dependency: Resolved dependency the layer must hold

        Returns:
            Cacheable layer whose contents match dependency.sha256

        Raises:
            ProvisionError: If resetting or provisioning the layer fails
        """
        try:
            layer = self.context.layers.get(self.layer_name)
        except Exception as e:
            raise ProvisionError(f"failed to open layer {self.layer_name}", e) from e

        if not is_stale(layer, dependency):
            logger.info(f"Reusing cached layer {layer.path}")
            layer.cache = True
            return layer

        logger.info(f"Installing {dependency.name or dependency.id} {dependency.version}")
        try:
            layer.reset()
            duration, _ = self.clock.measure(
                lambda: self.dependency_manager.deliver(
                    dependency,
                    self.context.cnb_path,
                    layer.path,
                    self.context.platform_path,
                )
            )
        except ProvisionError:
            raise
        except Exception as e:
            raise ProvisionError(f"failed to install {dependency.id}", e) from e

        logger.info(f"Completed in {duration:.3f}s")

        layer.metadata = {
            DEPENDENCY_SHA_KEY: dependency.sha256,
            BUILT_AT_KEY: self.clock.now().isoformat(),
        }
        layer.cache = True
        return layer
