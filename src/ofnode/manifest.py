"""Manifest assembly for the function and bootstrap packages."""

from __future__ import annotations

import json
from typing import Any

from ofnode.config import ProjectConfig
from ofnode.deps import parse_dependencies
from ofnode.models import DependencyClass, FunctionManifest

__all__ = [
    "BOOTSTRAP_DEPENDENCIES",
    "BOOTSTRAP_ENTRYPOINT",
    "assemble_manifest",
    "merge_dependencies",
    "render_json",
    "render_manifest",
    "root_manifest",
]

BOOTSTRAP_ENTRYPOINT = "index.js"
BOOTSTRAP_DEPENDENCIES = ("body-parser@^1.18.2", "express@^4.16.2")


def assemble_manifest(config: ProjectConfig) -> FunctionManifest:
    """Build the function manifest from *config*.

    Each dependency class is parsed on its own; a package may appear in
    several classes with different constraints.
    """
    return FunctionManifest(
        version=config.version,
        description=config.description,
        main=config.func_handler,
        license=config.license,
        dependencies=parse_dependencies(config.function_deps),
        dev_dependencies=parse_dependencies(config.function_dev_deps),
        peer_dependencies=parse_dependencies(config.function_peer_deps),
    )


def root_manifest(config: ProjectConfig) -> dict[str, Any]:
    """The bootstrap package's own ``package.json`` document."""
    return {
        "name": config.name,
        "version": config.version,
        "description": config.description,
        "main": BOOTSTRAP_ENTRYPOINT,
        "license": config.license,
        "dependencies": parse_dependencies(BOOTSTRAP_DEPENDENCIES),
    }


def merge_dependencies(existing: dict[str, Any], generated: dict[str, Any]) -> dict[str, Any]:
    """Overlay the dependency maps of *generated* onto *existing*.

    Configured entries win over existing ones of the same name; entries
    only present in *existing* are kept.  Non-dependency fields are returned
    unchanged.  *existing* itself is not modified.
    """
    merged = dict(existing)
    for dep_class in DependencyClass:
        current = existing.get(dep_class.value)
        combined: dict[str, str] = dict(current) if isinstance(current, dict) else {}
        combined.update(generated.get(dep_class.value, {}))
        merged[dep_class.value] = combined
    return merged


def render_json(document: dict[str, Any]) -> str:
    return json.dumps(document, indent=2) + "\n"


def render_manifest(manifest: FunctionManifest) -> str:
    """Serialize *manifest* to deterministic ``package.json`` text."""
    return render_json(manifest.to_dict())
