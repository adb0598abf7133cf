"""Protocols (interfaces) for artifact emitters."""

from __future__ import annotations

from collections.abc import Set
from typing import Protocol, runtime_checkable

from ofnode.config import ProjectConfig
from ofnode.models import ArtifactKind, GuardPolicy, PlannedArtifact


@runtime_checkable
class EmitterProtocol(Protocol):
    """Interface for a unit that produces exactly one generated file.

    ``plan`` must not touch the file system: it decides from *existing*, the
    set of output-relative paths already present, what applying will do.
    """

    kind: ArtifactKind
    guard: GuardPolicy

    def path(self, config: ProjectConfig) -> str:
        """Target path relative to the output root (POSIX separators)."""
        ...

    def render(self, config: ProjectConfig) -> str:
        """Full text of the artifact."""
        ...

    def plan(self, config: ProjectConfig, existing: Set[str]) -> PlannedArtifact:
        """Decide whether to write, skip, or merge."""
        ...
