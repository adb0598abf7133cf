"""Core data models for ofnode.

This module defines the typed dataclasses and enumerations shared by the
generator:

- **Manifest-related**: DependencyClass, FunctionManifest
- **Emission-related**: ArtifactKind, GuardPolicy, WriteAction, PlannedArtifact
- **Run-related**: GenerationPlan, GenerationReport
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class DependencyClass(enum.Enum):
    """Dependency grouping; the value is the manifest field it lands in."""

    RUNTIME = "dependencies"
    DEVELOPMENT = "devDependencies"
    PEER = "peerDependencies"


class ArtifactKind(enum.Enum):
    """A file produced by a generation run."""

    ROOT_MANIFEST = "root-manifest"
    MANIFEST = "manifest"
    TEMPLATE = "template"
    IGNORE = "ignore"
    BOOTSTRAP = "bootstrap"
    DOCKERFILE = "dockerfile"
    HANDLER = "handler"


class GuardPolicy(enum.Enum):
    """How an emitter treats a target that already exists."""

    EXACT_PATH = "exact-path"
    ALWAYS_WRITE = "always-write"


class WriteAction(enum.Enum):
    """What applying a planned artifact will do."""

    WRITE = "write"
    SKIP = "skip"
    MERGE = "merge"


# ---------------------------------------------------------------------------
# Manifest-related models
# ---------------------------------------------------------------------------

FUNCTION_PACKAGE_NAME = "openfaas-function"
FUNCTION_AUTHOR = "OpenFaaS Ltd"
FUNCTION_TEST_SCRIPT = 'echo "Error: no test specified" && exit 0'


def _default_scripts() -> dict[str, str]:
    return {"test": FUNCTION_TEST_SCRIPT}


@dataclass(frozen=True)
class FunctionManifest:
    """The function's own ``package.json``."""

    version: str
    description: str
    main: str
    license: str
    name: str = FUNCTION_PACKAGE_NAME
    author: str = FUNCTION_AUTHOR
    scripts: dict[str, str] = field(default_factory=_default_scripts)
    keywords: list[str] = field(default_factory=list)
    dependencies: dict[str, str] = field(default_factory=dict)
    dev_dependencies: dict[str, str] = field(default_factory=dict)
    peer_dependencies: dict[str, str] = field(default_factory=dict)

    def dependency_map(self, dep_class: DependencyClass) -> dict[str, str]:
        """Return the map owned by *dep_class*."""
        if dep_class is DependencyClass.RUNTIME:
            return self.dependencies
        if dep_class is DependencyClass.DEVELOPMENT:
            return self.dev_dependencies
        return self.peer_dependencies

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a ``package.json`` document with stable key order."""
        document: dict[str, Any] = {
            "name": self.name,
            "version": self.version,
            "description": self.description,
            "main": self.main,
            "scripts": dict(self.scripts),
            "keywords": list(self.keywords),
            "author": self.author,
            "license": self.license,
        }
        for dep_class in DependencyClass:
            document[dep_class.value] = dict(self.dependency_map(dep_class))
        return document


# ---------------------------------------------------------------------------
# Emission-related models
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PlannedArtifact:
    """One emitter's decision, computed without touching the file system."""

    kind: ArtifactKind
    path: str
    action: WriteAction
    content: str = ""
    reason: str = ""


# ---------------------------------------------------------------------------
# Run-related models
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class GenerationPlan:
    """Ordered list of planned artifacts for one generation run."""

    artifacts: tuple[PlannedArtifact, ...] = ()

    def written(self) -> list[PlannedArtifact]:
        """Artifacts that applying the plan will create or modify."""
        return [a for a in self.artifacts if a.action is not WriteAction.SKIP]

    def skipped(self) -> list[PlannedArtifact]:
        """Artifacts that applying the plan will leave untouched."""
        return [a for a in self.artifacts if a.action is WriteAction.SKIP]

    def by_kind(self, kind: ArtifactKind) -> PlannedArtifact:
        for artifact in self.artifacts:
            if artifact.kind is kind:
                return artifact
        msg = f"No planned artifact of kind '{kind.value}'"
        raise KeyError(msg)


@dataclass(frozen=True)
class GenerationReport:
    """Outcome of applying a plan."""

    outdir: Path
    written: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Exports
# ---------------------------------------------------------------------------

__all__ = [
    "FUNCTION_AUTHOR",
    "FUNCTION_PACKAGE_NAME",
    "FUNCTION_TEST_SCRIPT",
    "ArtifactKind",
    "DependencyClass",
    "FunctionManifest",
    "GenerationPlan",
    "GenerationReport",
    "GuardPolicy",
    "PlannedArtifact",
    "WriteAction",
]
