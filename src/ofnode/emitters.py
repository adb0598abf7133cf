"""Conditional artifact emitters.

Emission is split in two phases:

- **plan** -- each emitter looks at the set of files already present and
  decides, without any I/O, whether its artifact is written, skipped, or
  merged.  :func:`plan_artifacts` collects those decisions in registration
  order.
- **apply** -- :func:`apply_plan` performs the writes.

Guarded artifacts are skipped only when their own target path exists, so
hand-edited files survive repeated runs while unrelated files never
suppress generation.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable, Set
from pathlib import Path

from ofnode.config import ProjectConfig
from ofnode.manifest import assemble_manifest, merge_dependencies, render_json, root_manifest
from ofnode.models import (
    ArtifactKind,
    GenerationPlan,
    GenerationReport,
    GuardPolicy,
    PlannedArtifact,
    WriteAction,
)
from ofnode.protocols import EmitterProtocol
from ofnode.templates import (
    render_bootstrap,
    render_dockerfile,
    render_dockerignore,
    render_handler,
    render_template_descriptor,
)

__all__ = [
    "BootstrapEmitter",
    "DockerfileEmitter",
    "DockerignoreEmitter",
    "FunctionManifestEmitter",
    "GenerationError",
    "HandlerEmitter",
    "RootManifestEmitter",
    "TemplateDescriptorEmitter",
    "apply_plan",
    "default_emitters",
    "plan_artifacts",
    "scan_existing",
]

log = logging.getLogger(__name__)


class GenerationError(RuntimeError):
    """Raised when an artifact cannot be written."""


# ---------------------------------------------------------------------------
# Emitters
# ---------------------------------------------------------------------------


class _FileEmitter(ABC):
    """Shared guard logic; subclasses provide ``path`` and ``render``."""

    kind: ArtifactKind
    guard: GuardPolicy = GuardPolicy.EXACT_PATH

    @abstractmethod
    def path(self, config: ProjectConfig) -> str: ...

    @abstractmethod
    def render(self, config: ProjectConfig) -> str: ...

    def plan(self, config: ProjectConfig, existing: Set[str]) -> PlannedArtifact:
        target = self.path(config)
        if self.guard is GuardPolicy.EXACT_PATH and target in existing:
            return PlannedArtifact(
                kind=self.kind,
                path=target,
                action=WriteAction.SKIP,
                reason="already exists",
            )
        reason = "regenerated" if target in existing else "created"
        return PlannedArtifact(
            kind=self.kind,
            path=target,
            action=WriteAction.WRITE,
            content=self.render(config),
            reason=reason,
        )


class RootManifestEmitter(_FileEmitter):
    """``package.json`` of the bootstrap wrapper."""

    kind = ArtifactKind.ROOT_MANIFEST

    def path(self, config: ProjectConfig) -> str:
        return "package.json"

    def render(self, config: ProjectConfig) -> str:
        return render_json(root_manifest(config))


class FunctionManifestEmitter(_FileEmitter):
    """``<funcDir>/package.json``; merged instead of skipped when asked to."""

    kind = ArtifactKind.MANIFEST

    def path(self, config: ProjectConfig) -> str:
        return f"{config.func_dir}/package.json"

    def render(self, config: ProjectConfig) -> str:
        return render_json(assemble_manifest(config).to_dict())

    def plan(self, config: ProjectConfig, existing: Set[str]) -> PlannedArtifact:
        target = self.path(config)
        if target in existing and config.merge_function_deps:
            return PlannedArtifact(
                kind=self.kind,
                path=target,
                action=WriteAction.MERGE,
                content=self.render(config),
                reason="dependencies merged",
            )
        return super().plan(config, existing)


class TemplateDescriptorEmitter(_FileEmitter):
    kind = ArtifactKind.TEMPLATE
    guard = GuardPolicy.ALWAYS_WRITE

    def path(self, config: ProjectConfig) -> str:
        return "template.yml"

    def render(self, config: ProjectConfig) -> str:
        return render_template_descriptor(config)


class DockerignoreEmitter(_FileEmitter):
    kind = ArtifactKind.IGNORE
    guard = GuardPolicy.ALWAYS_WRITE

    def path(self, config: ProjectConfig) -> str:
        return ".dockerignore"

    def render(self, config: ProjectConfig) -> str:
        return render_dockerignore(config)


class BootstrapEmitter(_FileEmitter):
    kind = ArtifactKind.BOOTSTRAP

    def path(self, config: ProjectConfig) -> str:
        return "index.js"

    def render(self, config: ProjectConfig) -> str:
        return render_bootstrap(config)


class DockerfileEmitter(_FileEmitter):
    kind = ArtifactKind.DOCKERFILE

    def path(self, config: ProjectConfig) -> str:
        return "Dockerfile"

    def render(self, config: ProjectConfig) -> str:
        return render_dockerfile(config)


class HandlerEmitter(_FileEmitter):
    kind = ArtifactKind.HANDLER

    def path(self, config: ProjectConfig) -> str:
        return config.handler_path

    def render(self, config: ProjectConfig) -> str:
        return render_handler(config)


def default_emitters() -> list[EmitterProtocol]:
    """All emitters in registration order."""
    return [
        RootManifestEmitter(),
        FunctionManifestEmitter(),
        TemplateDescriptorEmitter(),
        DockerignoreEmitter(),
        BootstrapEmitter(),
        DockerfileEmitter(),
        HandlerEmitter(),
    ]


# ---------------------------------------------------------------------------
# Plan
# ---------------------------------------------------------------------------


def plan_artifacts(
    config: ProjectConfig,
    existing: Set[str],
    emitters: Iterable[EmitterProtocol] | None = None,
) -> GenerationPlan:
    """Collect every emitter's decision.  Performs no I/O."""
    planned: list[PlannedArtifact] = []
    for emitter in default_emitters() if emitters is None else emitters:
        artifact = emitter.plan(config, existing)
        log.debug("Planned %s %s (%s)", artifact.action.value, artifact.path, artifact.reason)
        planned.append(artifact)
    return GenerationPlan(artifacts=tuple(planned))


def scan_existing(
    outdir: Path,
    config: ProjectConfig,
    emitters: Iterable[EmitterProtocol] | None = None,
) -> frozenset[str]:
    """Return the emitter target paths that already exist under *outdir*."""
    found: set[str] = set()
    for emitter in default_emitters() if emitters is None else emitters:
        target = emitter.path(config)
        if (outdir / target).is_file():
            found.add(target)
    return frozenset(found)


# ---------------------------------------------------------------------------
# Apply
# ---------------------------------------------------------------------------


def apply_plan(plan: GenerationPlan, outdir: Path) -> GenerationReport:
    """Write the planned artifacts under *outdir*.

    Stops at the first failure; anything written before it stays on disk.

    Raises:
        GenerationError: If a file cannot be read, merged, or written.
    """
    written: list[str] = []
    skipped: list[str] = []
    for artifact in plan.artifacts:
        target = outdir / artifact.path
        if artifact.action is WriteAction.SKIP:
            log.info("Skipped %s (%s)", artifact.path, artifact.reason)
            skipped.append(artifact.path)
            continue
        if artifact.action is WriteAction.MERGE:
            content = _merged_content(target, artifact)
        else:
            content = artifact.content
        _write(target, content)
        log.info("Wrote %s (%s)", artifact.path, artifact.reason)
        written.append(artifact.path)
    return GenerationReport(outdir=outdir, written=written, skipped=skipped)


def _merged_content(target: Path, artifact: PlannedArtifact) -> str:
    try:
        existing = json.loads(target.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        msg = f"Cannot merge dependencies into {target}: {exc}"
        log.error(msg)
        raise GenerationError(msg) from exc
    if not isinstance(existing, dict):
        msg = f"Cannot merge dependencies into {target}: expected a JSON object"
        log.error(msg)
        raise GenerationError(msg)
    return render_json(merge_dependencies(existing, json.loads(artifact.content)))


def _write(target: Path, content: str) -> None:
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
    except OSError as exc:
        msg = f"Failed to write {target}: {exc}"
        log.error(msg)
        raise GenerationError(msg) from exc
