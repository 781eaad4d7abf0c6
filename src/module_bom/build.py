"""Build step of the buildpack.

Resolves the analysis tool, makes sure its layer is provisioned, runs it
against the application and returns the build and launch BOMs.
"""

from __future__ import annotations

from collections.abc import Mapping

from module_bom.clock import Clock
from module_bom.config import BUILDPACK_TOML, DEFAULT_VERSION, LAYER_NAME, TOOL_ID
from module_bom.dependencies import DependencyManager
from module_bom.errors import ResolutionError
from module_bom.executable import ExecutionContext
from module_bom.extractor import ModuleBOMGenerator
from module_bom.inventory import ArtifactInventory
from module_bom.logging import get_logger
from module_bom.models.bom import BuildResult
from module_bom.models.context import BuildContext

logger = get_logger(__name__)


class Build:
    """Callable build step.

    Usage:
        build = Build(DependencyService(), ModuleBOM(Executable("cyclonedx-bom")), Clock())
        result = build(context)
    """

    def __init__(
        self,
        dependency_manager: DependencyManager,
        module_bom: ModuleBOMGenerator,
        clock: Clock,
        environ: Mapping[str, str] | None = None,
    ):
        self.dependency_manager = dependency_manager
        self.module_bom = module_bom
        self.clock = clock
        self.environ = environ

    def __call__(self, context: BuildContext) -> BuildResult:
        """Run the build.

        Args:
            context: Build context from the lifecycle

        Returns:
            BuildResult with the tool layer, build BOM and launch BOM

        Raises:
            ModuleBOMError: On any failure; no partial result is returned
        """
        logger.info(f"{context.buildpack_info.name} {context.buildpack_info.version}".strip())
        logger.info("Resolving CycloneDX Node.js Module version")

        try:
            dependency = self.dependency_manager.resolve(
                context.cnb_path / BUILDPACK_TOML,
                TOOL_ID,
                DEFAULT_VERSION,
                context.stack,
            )
        except ResolutionError:
            raise
        except Exception as e:
            raise ResolutionError(f"failed to resolve {TOOL_ID}", e) from e

        logger.info(f"Selected {dependency.name or dependency.id} version {dependency.version}")

        inventory = ArtifactInventory(context, self.dependency_manager, self.clock, LAYER_NAME)
        layer = inventory.obtain(dependency)
        layer.cache = True

        logger.info("Configuring environment")
        execution_context = ExecutionContext.from_environ(self.environ)
        execution_context.append_path(layer.bin_dir)
        logger.debug(f"PATH -> {execution_context.path}")

        tool_bom = self.dependency_manager.generate_bill_of_materials(dependency)
        module_bom = self.module_bom.generate(context.working_dir, execution_context)

        return BuildResult(
            layers=[layer],
            build_bom=[*tool_bom, *module_bom],
            launch_bom=list(module_bom),
        )
