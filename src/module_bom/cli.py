"""Command-line interface for module-bom."""

from pathlib import Path

import click

from module_bom.build import Build
from module_bom.clock import Clock
from module_bom.config import TOOL_EXECUTABLE, __version__
from module_bom.console import error, print_summary
from module_bom.dependencies import DependencyService
from module_bom.errors import ModuleBOMError
from module_bom.executable import Executable
from module_bom.extractor import ModuleBOM
from module_bom.lifecycle import context_from_environment, run, write_plan
from module_bom.logging import get_logger, setup_logging

logger = get_logger(__name__)


@click.group()
@click.version_option(__version__, prog_name="module-bom")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug output")
@click.option("-q", "--quiet", is_flag=True, help="Show warnings and errors only")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    default=None,
    help="Set log level explicitly",
)
def cli(verbose, quiet, log_level):
    """Provision cyclonedx-bom and generate the application's bill of materials."""
    if verbose and quiet:
        raise click.UsageError("--verbose and --quiet are mutually exclusive")
    setup_logging(verbose=verbose, quiet=quiet, log_level=log_level)


@cli.command(name="detect")
@click.argument("platform_dir", required=False, type=click.Path(file_okay=False, path_type=Path))  # type: ignore[type-var]
@click.argument("plan_path", required=False, type=click.Path(dir_okay=False, path_type=Path))  # type: ignore[type-var]
def detect(platform_dir, plan_path):
    """Run the detect step. Every application passes."""
    if plan_path:
        try:
            write_plan(plan_path)
        except ModuleBOMError as e:
            error(str(e))
            raise SystemExit(1) from e

    logger.info("Detection passed")


@cli.command(name="build")
@click.argument("layers_dir", type=click.Path(file_okay=False, path_type=Path))  # type: ignore[type-var]
@click.argument("platform_dir", type=click.Path(file_okay=False, path_type=Path))  # type: ignore[type-var]
@click.argument("plan_path", required=False, type=click.Path(dir_okay=False, path_type=Path))  # type: ignore[type-var]
@click.option(
    "-w",
    "--working-dir",
    type=click.Path(exists=True, file_okay=False, path_type=Path),  # type: ignore[type-var]
    default=None,
    help="Application directory (default: current directory)",
)
def build(layers_dir, platform_dir, plan_path, working_dir):
    """Run the build step against LAYERS_DIR and PLATFORM_DIR."""
    if plan_path:
        logger.debug(f"Build plan: {plan_path}")

    context = context_from_environment(layers_dir, platform_dir, working_dir=working_dir)
    build_step = Build(
        DependencyService(),
        ModuleBOM(Executable(TOOL_EXECUTABLE)),
        Clock(),
    )

    try:
        result = run(build_step, context)
    except ModuleBOMError as e:
        error(str(e))
        raise SystemExit(1) from e

    print_summary(result)


def main():
    """Entry point for module-bom command."""
    cli()


if __name__ == "__main__":
    main()
