"""ofnode -- scaffold OpenFaaS Node.js function projects."""
# ruff: noqa: E402

from __future__ import annotations

__version__ = "0.1.0"

from ofnode.config import ProjectConfig, ProjectOptions, load_options, resolve_config
from ofnode.deps import parse_dependencies
from ofnode.project import OpenFaasNodeProject

__all__ = [
    "OpenFaasNodeProject",
    "ProjectConfig",
    "ProjectOptions",
    "__version__",
    "load_options",
    "parse_dependencies",
    "resolve_config",
]
