"""Tests for the plan / apply emission protocol."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from ofnode.config import ProjectConfig
from ofnode.emitters import (
    DockerfileEmitter,
    FunctionManifestEmitter,
    GenerationError,
    HandlerEmitter,
    TemplateDescriptorEmitter,
    _FileEmitter,
    apply_plan,
    default_emitters,
    plan_artifacts,
    scan_existing,
)
from ofnode.models import ArtifactKind, GuardPolicy, WriteAction

_ALL_PATHS = {
    "package.json",
    "function/package.json",
    "template.yml",
    ".dockerignore",
    "index.js",
    "Dockerfile",
    "function/handler.js",
}


def _config(**overrides: object) -> ProjectConfig:
    return ProjectConfig(name="demo", **overrides)  # type: ignore[arg-type]


class TestPlanArtifacts:
    def test_registration_order(self) -> None:
        plan = plan_artifacts(_config(), frozenset())
        assert [a.kind for a in plan.artifacts] == [
            ArtifactKind.ROOT_MANIFEST,
            ArtifactKind.MANIFEST,
            ArtifactKind.TEMPLATE,
            ArtifactKind.IGNORE,
            ArtifactKind.BOOTSTRAP,
            ArtifactKind.DOCKERFILE,
            ArtifactKind.HANDLER,
        ]

    def test_fresh_directory_writes_everything(self) -> None:
        plan = plan_artifacts(_config(), frozenset())
        assert {a.path for a in plan.written()} == _ALL_PATHS
        assert plan.skipped() == []
        assert all(a.content for a in plan.artifacts)

    def test_populated_directory_keeps_guarded_files(self) -> None:
        plan = plan_artifacts(_config(), frozenset(_ALL_PATHS))
        assert {a.path for a in plan.skipped()} == {
            "package.json",
            "function/package.json",
            "index.js",
            "Dockerfile",
            "function/handler.js",
        }
        assert {a.path for a in plan.written()} == {"template.yml", ".dockerignore"}

    def test_skip_carries_no_content(self) -> None:
        plan = plan_artifacts(_config(), frozenset({"Dockerfile"}))
        dockerfile = plan.by_kind(ArtifactKind.DOCKERFILE)
        assert dockerfile.action is WriteAction.SKIP
        assert dockerfile.content == ""
        assert dockerfile.reason == "already exists"

    def test_unrelated_files_do_not_suppress_generation(self) -> None:
        existing = frozenset({"README.md", "Dockerfile.dev", "function/util.js", "other.js"})
        plan = plan_artifacts(_config(), existing)
        assert plan.skipped() == []

    def test_handler_guard_uses_configured_name(self) -> None:
        config = _config(func_dir="fn", func_handler="index.js")
        plan = plan_artifacts(config, frozenset({"function/handler.js"}))
        handler = plan.by_kind(ArtifactKind.HANDLER)
        assert handler.path == "fn/index.js"
        assert handler.action is WriteAction.WRITE

    def test_always_write_reports_regeneration(self) -> None:
        plan = plan_artifacts(_config(), frozenset({"template.yml"}))
        template = plan.by_kind(ArtifactKind.TEMPLATE)
        assert template.action is WriteAction.WRITE
        assert template.reason == "regenerated"

    def test_manifest_merge_when_enabled(self) -> None:
        config = _config(merge_function_deps=True, function_deps=("koa@2.1.3",))
        plan = plan_artifacts(config, frozenset({"function/package.json"}))
        manifest = plan.by_kind(ArtifactKind.MANIFEST)
        assert manifest.action is WriteAction.MERGE
        assert json.loads(manifest.content)["dependencies"] == {"koa": "2.1.3"}

    def test_manifest_merge_flag_ignored_for_missing_file(self) -> None:
        plan = plan_artifacts(_config(merge_function_deps=True), frozenset())
        assert plan.by_kind(ArtifactKind.MANIFEST).action is WriteAction.WRITE

    def test_custom_emitter_list(self) -> None:
        plan = plan_artifacts(_config(), frozenset(), [DockerfileEmitter()])
        assert [a.kind for a in plan.artifacts] == [ArtifactKind.DOCKERFILE]

    def test_guard_policies(self) -> None:
        assert TemplateDescriptorEmitter.guard is GuardPolicy.ALWAYS_WRITE
        assert HandlerEmitter.guard is GuardPolicy.EXACT_PATH
        assert FunctionManifestEmitter.guard is GuardPolicy.EXACT_PATH

    def test_base_emitter_requires_path_and_render(self) -> None:
        class PathOnly(_FileEmitter):
            kind = ArtifactKind.DOCKERFILE

            def path(self, config: ProjectConfig) -> str:
                return "Dockerfile"

        with pytest.raises(TypeError):
            _FileEmitter()  # type: ignore[abstract]
        with pytest.raises(TypeError):
            PathOnly()  # type: ignore[abstract]


class TestScanExisting:
    def test_finds_only_emitter_targets(self, tmp_path: Path) -> None:
        (tmp_path / "Dockerfile").write_text("FROM alpine:3.2\n", encoding="utf-8")
        (tmp_path / "README.md").write_text("hi\n", encoding="utf-8")
        assert scan_existing(tmp_path, _config()) == frozenset({"Dockerfile"})

    def test_directories_are_not_files(self, tmp_path: Path) -> None:
        (tmp_path / "index.js").mkdir()
        assert scan_existing(tmp_path, _config(), default_emitters()) == frozenset()


class TestApplyPlan:
    def test_writes_and_reports(self, tmp_path: Path) -> None:
        plan = plan_artifacts(_config(), frozenset({"Dockerfile"}))
        report = apply_plan(plan, tmp_path)

        assert "Dockerfile" in report.skipped
        assert "function/handler.js" in report.written
        assert not (tmp_path / "Dockerfile").exists()
        assert (tmp_path / "function" / "handler.js").is_file()
        assert report.outdir == tmp_path

    def test_merge_rewrites_dependency_fields_only(self, tmp_path: Path) -> None:
        target = tmp_path / "function" / "package.json"
        target.parent.mkdir()
        target.write_text(
            json.dumps({"name": "mine", "dependencies": {"lodash": "^4", "koa": "1"}}),
            encoding="utf-8",
        )
        config = _config(merge_function_deps=True, function_deps=("koa@2.1.3",))
        plan = plan_artifacts(config, frozenset({"function/package.json"}))

        apply_plan(plan, tmp_path)

        document = json.loads(target.read_text(encoding="utf-8"))
        assert document["name"] == "mine"
        assert document["dependencies"] == {"lodash": "^4", "koa": "2.1.3"}
        assert document["devDependencies"] == {}

    def test_merge_invalid_json_raises(self, tmp_path: Path) -> None:
        target = tmp_path / "function" / "package.json"
        target.parent.mkdir()
        target.write_text("{not json", encoding="utf-8")
        plan = plan_artifacts(
            _config(merge_function_deps=True), frozenset({"function/package.json"})
        )

        with pytest.raises(GenerationError, match="Cannot merge"):
            apply_plan(plan, tmp_path)

    def test_merge_non_object_raises(self, tmp_path: Path) -> None:
        target = tmp_path / "function" / "package.json"
        target.parent.mkdir()
        target.write_text("[]", encoding="utf-8")
        plan = plan_artifacts(
            _config(merge_function_deps=True), frozenset({"function/package.json"})
        )

        with pytest.raises(GenerationError, match="JSON object"):
            apply_plan(plan, tmp_path)

    def test_write_failure_keeps_earlier_files(self, tmp_path: Path) -> None:
        # A directory where index.js should go makes that write fail.
        (tmp_path / "index.js").mkdir()
        plan = plan_artifacts(_config(), frozenset())

        with pytest.raises(GenerationError, match="index.js"):
            apply_plan(plan, tmp_path)

        assert (tmp_path / "package.json").is_file()
        assert (tmp_path / "template.yml").is_file()
        assert not (tmp_path / "Dockerfile").exists()
