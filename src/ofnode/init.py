"""Starter config file generation.

Provides a helper to bootstrap a new ``ofnode.yaml`` with every recognized
option set to its default.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from ofnode.config import (
    DEFAULT_FUNC_DIR,
    DEFAULT_FUNC_HANDLER,
    DEFAULT_LICENSE,
    DEFAULT_VERSION,
    DEFAULT_WATCHDOG_TAG,
)

__all__ = ["DEFAULT_CONFIG_NAME", "generate_config"]

DEFAULT_CONFIG_NAME = "ofnode.yaml"


def generate_config(name: str, output: Path) -> Path:
    """Generate a starter config YAML file.

    Parameters
    ----------
    name:
        Project name written to the ``name`` key.
    output:
        Path where the YAML file will be written.

    Returns
    -------
    Path
        The resolved output path.

    Raises
    ------
    FileExistsError
        If *output* already exists.
    """
    resolved = output.resolve()
    if resolved.exists():
        msg = f"File already exists: {resolved}"
        raise FileExistsError(msg)

    data: dict[str, Any] = {
        "name": name,
        "version": DEFAULT_VERSION,
        "description": "",
        "license": DEFAULT_LICENSE,
        "funcDir": DEFAULT_FUNC_DIR,
        "funcHandler": DEFAULT_FUNC_HANDLER,
        "functionDeps": [],
        "functionDevDeps": [],
        "functionPeerDeps": [],
        "ofWatchDogDockerImageTag": DEFAULT_WATCHDOG_TAG,
        "mergeFunctionDeps": False,
    }

    resolved.parent.mkdir(parents=True, exist_ok=True)
    resolved.write_text(
        yaml.dump(data, default_flow_style=False, sort_keys=False),
        encoding="utf-8",
    )
    return resolved
