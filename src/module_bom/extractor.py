"""Module BOM extraction.

Runs cyclonedx-bom against the application, reads the CycloneDX report it
writes and maps each component into a BOMEntry. The report is removed once
it has been decoded.
"""

from __future__ import annotations

import io
import json
from pathlib import Path
from typing import Any, Protocol

from module_bom.config import REPORT_FILENAME, TOOL_ARGS, TOOL_EXECUTABLE
from module_bom.errors import (
    CleanupError,
    ReportFormatError,
    ReportNotFoundError,
    ToolExecutionError,
)
from module_bom.executable import Execution, ExecutionContext, ToolExecutable
from module_bom.logging import get_logger
from module_bom.models.bom import BOMEntry

logger = get_logger(__name__)


class ModuleBOMGenerator(Protocol):
    """Anything that can produce BOM entries for an application directory."""

    def generate(
        self, working_dir: Path, context: ExecutionContext | None = None
    ) -> list[BOMEntry]: ...


def _string_field(data: dict, key: str) -> str:
    """Read a string field, treating a missing key or null as empty."""
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ReportFormatError(f"failed to decode {REPORT_FILENAME}", f"'{key}' is not a string")
    return value


def parse_components(report: Any) -> list[BOMEntry]:
    """Map the components of a decoded CycloneDX report to BOM entries.

    Order is preserved and duplicates are kept.

    Args:
        report: Decoded JSON document

    Returns:
        One BOMEntry per component

    Raises:
        ReportFormatError: If the document does not have the expected shape
    """
    if not isinstance(report, dict):
        raise ReportFormatError(f"failed to decode {REPORT_FILENAME}", "expected a JSON object")

    components = report.get("components")
    if components is None:
        return []
    if not isinstance(components, list):
        raise ReportFormatError(f"failed to decode {REPORT_FILENAME}", "'components' is not a list")

    entries = []
    for component in components:
        try:
            licenses = [
                _string_field(entry.get("license") or {}, "id")
                for entry in component.get("licenses") or []
            ]
            entries.append(
                BOMEntry(
                    name=_string_field(component, "name"),
                    metadata={
                        "version": _string_field(component, "version"),
                        "purl": _string_field(component, "purl"),
                        "licenses": licenses,
                    },
                )
            )
        except AttributeError as e:
            raise ReportFormatError(f"failed to decode {REPORT_FILENAME}", e) from e

    return entries


class ModuleBOM:
    """Generates the launch BOM of an application using cyclonedx-bom."""

    def __init__(self, executable: ToolExecutable):
        self.executable = executable

    def generate(self, working_dir: Path, context: ExecutionContext | None = None) -> list[BOMEntry]:
        """Run the tool in working_dir and return the components it found.

        Args:
            working_dir: Application directory the tool is run in
            context: Execution context used to locate the tool

        Returns:
            BOM entries in report order (empty if the tool found nothing)

        Raises:
            ToolExecutionError: If the tool cannot be run or exits non-zero
            ReportNotFoundError: If the report cannot be opened
            ReportFormatError: If the report cannot be decoded
            CleanupError: If the report cannot be removed
        """
        buffer = io.StringIO()
        logger.info(f"Running '{TOOL_EXECUTABLE} {' '.join(TOOL_ARGS)}'")

        try:
            self.executable.execute(
                Execution(
                    args=list(TOOL_ARGS),
                    dir=working_dir,
                    stdout=buffer,
                    stderr=buffer,
                    context=context,
                )
            )
        except Exception as e:
            if buffer.getvalue():
                logger.error(buffer.getvalue())
            raise ToolExecutionError(f"failed to run {TOOL_EXECUTABLE}", e) from e

        if buffer.getvalue():
            logger.debug(buffer.getvalue())

        report_path = working_dir / REPORT_FILENAME
        try:
            with open(report_path) as f:
                try:
                    report = json.load(f)
                except (json.JSONDecodeError, UnicodeDecodeError) as e:
                    raise ReportFormatError(f"failed to decode {REPORT_FILENAME}", e) from e
        except OSError as e:
            raise ReportNotFoundError(f"failed to open {REPORT_FILENAME}", e) from e

        entries = parse_components(report)

        try:
            report_path.unlink()
        except OSError as e:
            raise CleanupError(f"failed to remove {REPORT_FILENAME}", e) from e

        return entries
