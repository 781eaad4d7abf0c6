"""Tests for lifecycle input and output."""

from pathlib import Path

import pytest
import tomlkit

from module_bom.errors import ResultWriteError
from module_bom.lifecycle import (
    context_from_environment,
    read_buildpack_info,
    render_bom,
    run,
    write_plan,
    write_result,
)
from module_bom.models.bom import BOMEntry, BuildResult
from module_bom.models.layer import Layer


class TestContextFromEnvironment:
    def test_reads_cnb_variables(self, tmp_path: Path):
        cnb_dir = tmp_path / "cnb"
        cnb_dir.mkdir()
        (cnb_dir / "buildpack.toml").write_text(
            '[buildpack]\nid = "x"\nname = "Node Module BOM"\nversion = "1.2.3"\n'
        )

        context = context_from_environment(
            tmp_path / "layers",
            tmp_path / "platform",
            working_dir=tmp_path / "app",
            environ={"CNB_BUILDPACK_DIR": str(cnb_dir), "CNB_STACK_ID": "some-stack"},
        )

        assert context.cnb_path == cnb_dir.resolve()
        assert context.stack == "some-stack"
        assert context.layers.path == tmp_path / "layers"
        assert context.platform_path == tmp_path / "platform"
        assert context.working_dir == tmp_path / "app"
        assert context.buildpack_info.name == "Node Module BOM"
        assert context.buildpack_info.version == "1.2.3"

    def test_defaults_to_current_directory(self, tmp_path: Path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        context = context_from_environment(tmp_path / "layers", tmp_path / "platform", environ={})

        assert context.working_dir == tmp_path
        assert context.stack == ""

    def test_missing_buildpack_toml(self, tmp_path: Path):
        info = read_buildpack_info(tmp_path)

        assert info.name == ""
        assert info.version == ""


class TestRenderBOM:
    def test_render_entries(self):
        entries = [
            BOMEntry(name="leftpad", metadata={"version": "1.0", "licenses": ["MIT"]}),
            BOMEntry(name="rightpad", metadata={"version": "2.0", "licenses": []}),
        ]

        data = tomlkit.parse(render_bom(entries)).unwrap()

        assert data == {
            "bom": [
                {"name": "leftpad", "metadata": {"version": "1.0", "licenses": ["MIT"]}},
                {"name": "rightpad", "metadata": {"version": "2.0", "licenses": []}},
            ]
        }

    def test_render_empty(self):
        assert tomlkit.parse(render_bom([])).unwrap() == {}


class TestWriteResult:
    def test_writes_layer_and_bom_files(self, build_context):
        layer = Layer(
            name="cyclonedx-node-module",
            path=build_context.layers.path / "cyclonedx-node-module",
            cache=True,
            metadata={"dependency-sha": "abc"},
        )
        tool = BOMEntry(name="cyclonedx-node-module", metadata={"version": "3.10.6"})
        leftpad = BOMEntry(name="leftpad", metadata={"version": "1.0"})

        write_result(
            build_context,
            BuildResult(layers=[layer], build_bom=[tool, leftpad], launch_bom=[leftpad]),
        )

        layers_dir = build_context.layers.path
        layer_toml = tomlkit.parse((layers_dir / "cyclonedx-node-module.toml").read_text()).unwrap()
        assert layer_toml["types"]["cache"] is True
        assert layer_toml["metadata"] == {"dependency-sha": "abc"}

        build_toml = tomlkit.parse((layers_dir / "build.toml").read_text()).unwrap()
        assert [e["name"] for e in build_toml["bom"]] == ["cyclonedx-node-module", "leftpad"]

        launch_toml = tomlkit.parse((layers_dir / "launch.toml").read_text()).unwrap()
        assert [e["name"] for e in launch_toml["bom"]] == ["leftpad"]

    def test_written_metadata_is_read_back(self, build_context):
        layer = build_context.layers.get("tool")
        layer.metadata = {"dependency-sha": "abc", "built_at": "2024-01-01T00:00:00+00:00"}
        layer.cache = True

        write_result(build_context, BuildResult(layers=[layer]))

        assert build_context.layers.get("tool").metadata == layer.metadata

    def test_unwritable_layers_dir(self, tmp_path: Path, build_context):
        build_context.layers.path = tmp_path / "blocked"
        build_context.layers.path.write_text("")

        with pytest.raises(ResultWriteError, match="failed to write result") as exc_info:
            write_result(build_context, BuildResult())

        assert isinstance(exc_info.value.__cause__, OSError)

    def test_unrenderable_metadata(self, build_context):
        entry = BOMEntry(name="x", metadata={"version": None})

        with pytest.raises(ResultWriteError):
            write_result(build_context, BuildResult(launch_bom=[entry]))

    def test_entries_from_null_report_fields_render(self, build_context):
        entry = BOMEntry(name="x", metadata={"version": "", "purl": "pkg:npm/x", "licenses": [""]})

        write_result(build_context, BuildResult(build_bom=[entry], launch_bom=[entry]))

        launch_toml = tomlkit.parse((build_context.layers.path / "launch.toml").read_text()).unwrap()
        assert launch_toml["bom"][0]["metadata"]["version"] == ""


class TestWritePlan:
    def test_writes_empty_plan(self, tmp_path: Path):
        plan_path = tmp_path / "plan" / "plan.toml"

        write_plan(plan_path)

        assert tomlkit.parse(plan_path.read_text()).unwrap() == {}

    def test_unwritable_plan(self, tmp_path: Path):
        (tmp_path / "plan").write_text("")

        with pytest.raises(ResultWriteError, match="failed to write build plan"):
            write_plan(tmp_path / "plan" / "plan.toml")


class TestRun:
    def test_runs_build_and_writes_result(self, build_context):
        result = BuildResult(launch_bom=[BOMEntry(name="leftpad")])
        calls = []

        def build(context):
            calls.append(context)
            return result

        assert run(build, build_context) is result
        assert calls == [build_context]
        assert (build_context.layers.path / "launch.toml").exists()
