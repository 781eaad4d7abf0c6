"""Glue between the buildpack lifecycle and the build step.

Reads the build context from the lifecycle's environment and writes the
build result back as the TOML files the lifecycle expects:

    <layers>/<layer>.toml   layer types and metadata
    <layers>/build.toml     build-time BOM
    <layers>/launch.toml    launch-time BOM
"""

from __future__ import annotations

import os
from collections.abc import Callable, Mapping
from pathlib import Path

import tomlkit
from tomlkit.exceptions import TOMLKitError

from module_bom.config import BUILDPACK_TOML, CNB_BUILDPACK_DIR_ENV, CNB_STACK_ID_ENV
from module_bom.errors import ResultWriteError
from module_bom.logging import get_logger
from module_bom.models.bom import BOMEntry, BuildResult
from module_bom.models.context import BuildContext, BuildpackInfo
from module_bom.models.layer import Layers

logger = get_logger(__name__)


def read_buildpack_info(cnb_path: Path) -> BuildpackInfo:
    """Read the `[buildpack]` table of buildpack.toml, if there is one."""
    path = cnb_path / BUILDPACK_TOML
    try:
        data = tomlkit.parse(path.read_text()).unwrap()
    except (OSError, TOMLKitError) as e:
        logger.debug(f"No buildpack info from {path}: {e}")
        return BuildpackInfo()

    buildpack = data.get("buildpack", {})
    return BuildpackInfo(name=buildpack.get("name", ""), version=buildpack.get("version", ""))


def context_from_environment(
    layers_dir: Path,
    platform_dir: Path,
    working_dir: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> BuildContext:
    """Build a BuildContext from lifecycle arguments and environment.

    Args:
        layers_dir: Layers directory passed by the lifecycle
        platform_dir: Platform directory passed by the lifecycle
        working_dir: Application directory (defaults to the current directory)
        environ: Environment to read CNB_* variables from (defaults to os.environ)

    Returns:
        BuildContext for this build
    """
    environ = os.environ if environ is None else environ
    cnb_path = Path(environ.get(CNB_BUILDPACK_DIR_ENV, ".")).resolve()

    return BuildContext(
        cnb_path=cnb_path,
        platform_path=platform_dir,
        layers=Layers(layers_dir),
        stack=environ.get(CNB_STACK_ID_ENV, ""),
        working_dir=working_dir or Path.cwd(),
        buildpack_info=read_buildpack_info(cnb_path),
    )


def render_bom(entries: list[BOMEntry]) -> str:
    """Render BOM entries as `[[bom]]` tables."""
    doc = tomlkit.document()
    if entries:
        bom = tomlkit.aot()
        for entry in entries:
            table = tomlkit.table()
            table["name"] = entry.name
            if entry.metadata:
                metadata = tomlkit.inline_table()
                metadata.update(entry.metadata)
                table["metadata"] = metadata
            bom.append(table)
        doc["bom"] = bom
    return tomlkit.dumps(doc)


def write_result(context: BuildContext, result: BuildResult) -> None:
    """Write a build result into the layers directory.

    Args:
        context: Build context the result belongs to
        result: Result returned by the build step

    Raises:
        ResultWriteError: If a file cannot be rendered or written
    """
    layers_dir = context.layers.path
    try:
        layers_dir.mkdir(parents=True, exist_ok=True)

        for layer in result.layers:
            layer.toml_path.write_text(layer.to_toml())
            logger.debug(f"Wrote {layer.toml_path}")

        (layers_dir / "build.toml").write_text(render_bom(result.build_bom))
        (layers_dir / "launch.toml").write_text(render_bom(result.launch_bom))
    except (OSError, TOMLKitError) as e:
        raise ResultWriteError(f"failed to write result to {layers_dir}", e) from e


def run(build: Callable[[BuildContext], BuildResult], context: BuildContext) -> BuildResult:
    """Run a build step and write its result for the lifecycle."""
    result = build(context)
    write_result(context, result)
    return result


def write_plan(plan_path: Path) -> None:
    """Write an empty build plan; detection passes unconditionally."""
    try:
        plan_path.parent.mkdir(parents=True, exist_ok=True)
        plan_path.write_text(tomlkit.dumps(tomlkit.document()))
    except OSError as e:
        raise ResultWriteError(f"failed to write build plan to {plan_path}", e) from e
