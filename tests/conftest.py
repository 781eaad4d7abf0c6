"""Pytest configuration and fixtures for module-bom tests."""

import json
import logging
import subprocess
from datetime import datetime, timezone
from pathlib import Path

import pytest

from module_bom.clock import Clock
from module_bom.models.bom import BOMEntry
from module_bom.models.context import BuildContext, BuildpackInfo
from module_bom.models.dependency import Dependency
from module_bom.models.layer import Layers


@pytest.fixture(autouse=True)
def reset_logging():
    """Reset logging configuration after each test.

    This ensures that tests which call setup_logging() don't affect
    other tests that rely on caplog fixture for log capture.
    """
    yield

    logger = logging.getLogger("module_bom")
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


class FakeDependencyManager:
    """Records calls and returns canned results."""

    def __init__(self, dependency: Dependency, bom: list[BOMEntry] | None = None):
        self.dependency = dependency
        self.bom = bom or []
        self.resolve_error: Exception | None = None
        self.deliver_error: Exception | None = None
        self.resolve_calls: list[tuple] = []
        self.deliver_calls: list[tuple] = []
        self.bom_calls: list[tuple] = []

    def resolve(self, path, id, version, stack):
        self.resolve_calls.append((path, id, version, stack))
        if self.resolve_error:
            raise self.resolve_error
        return self.dependency

    def deliver(self, dependency, cnb_path, layer_path, platform_path):
        self.deliver_calls.append((dependency, cnb_path, layer_path, platform_path))
        if self.deliver_error:
            raise self.deliver_error
        bin_dir = Path(layer_path) / "bin"
        bin_dir.mkdir(parents=True, exist_ok=True)
        (bin_dir / "cyclonedx-bom").write_text("#!/bin/sh\n")

    def generate_bill_of_materials(self, *dependencies):
        self.bom_calls.append(dependencies)
        return list(self.bom)


class FakeModuleBOM:
    """Returns canned entries and records the directory it was asked about."""

    def __init__(self, entries: list[BOMEntry] | None = None):
        self.entries = entries or []
        self.error: Exception | None = None
        self.calls: list[tuple] = []

    def generate(self, working_dir, context=None):
        self.calls.append((working_dir, context))
        if self.error:
            raise self.error
        return list(self.entries)


class FakeExecutable:
    """Writes a report into the execution directory instead of running a tool."""

    def __init__(self, report: dict | str | None = None, output: str = ""):
        self.report = report
        self.output = output
        self.returncode = 0
        self.executions = []

    def execute(self, execution):
        self.executions.append(execution)
        if execution.stdout is not None and self.output:
            execution.stdout.write(self.output)
        if self.returncode != 0:
            raise subprocess.CalledProcessError(self.returncode, ["cyclonedx-bom"])
        if self.report is not None:
            content = self.report if isinstance(self.report, str) else json.dumps(self.report)
            (Path(execution.dir) / "bom.json").write_text(content)


@pytest.fixture
def dependency():
    return Dependency(
        id="cyclonedx-node-module",
        name="cyclonedx-node-module-dependency-name",
        version="cyclonedx-node-module-dependency-version",
        sha256="cyclonedx-node-module-dependency-sha",
        uri="cyclonedx-node-module-dependency-uri",
        stacks=("some-stack",),
    )


@pytest.fixture
def tool_entry():
    return BOMEntry(
        name="cyclonedx-node-module",
        metadata={
            "version": "cyclonedx-node-module-dependency-version",
            "name": "cyclonedx-node-module-dependency-name",
            "sha256": "cyclonedx-node-module-dependency-sha",
            "stacks": ["some-stack"],
            "uri": "cyclonedx-node-module-dependency-uri",
        },
    )


@pytest.fixture
def dependency_manager(dependency, tool_entry):
    return FakeDependencyManager(dependency, bom=[tool_entry])


@pytest.fixture
def timestamp():
    return datetime(2024, 5, 1, 12, 30, 45, 123456, tzinfo=timezone.utc)


@pytest.fixture
def clock(timestamp):
    return Clock(now=lambda: timestamp)


@pytest.fixture
def build_context(tmp_path: Path):
    layers_dir = tmp_path / "layers"
    cnb_dir = tmp_path / "cnb"
    working_dir = tmp_path / "working-dir"
    for directory in (layers_dir, cnb_dir, working_dir):
        directory.mkdir()

    return BuildContext(
        cnb_path=cnb_dir,
        platform_path=Path("platform"),
        layers=Layers(layers_dir),
        stack="some-stack",
        working_dir=working_dir,
        buildpack_info=BuildpackInfo(name="Some Buildpack", version="some-version"),
    )


@pytest.fixture
def module_bom():
    return FakeModuleBOM()


@pytest.fixture
def executable():
    return FakeExecutable()
