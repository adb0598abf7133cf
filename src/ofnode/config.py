"""Generator configuration.

User input arrives as :class:`ProjectOptions` (from a YAML file, CLI flags, or
both).  :func:`resolve_config` turns it into the immutable
:class:`ProjectConfig` that every emitter receives.  Defaults are applied
there and nowhere else; the caller's options are never mutated.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Any

import yaml

__all__ = [
    "DEFAULT_FUNC_DIR",
    "DEFAULT_FUNC_HANDLER",
    "DEFAULT_LICENSE",
    "DEFAULT_VERSION",
    "DEFAULT_WATCHDOG_TAG",
    "ConfigValidationError",
    "ConfigurationError",
    "ProjectConfig",
    "ProjectOptions",
    "load_options",
    "resolve_config",
    "validate_config",
]

DEFAULT_FUNC_DIR = "function"
DEFAULT_FUNC_HANDLER = "handler.js"
DEFAULT_WATCHDOG_TAG = "0.7.2"
DEFAULT_VERSION = "0.0.0"
DEFAULT_LICENSE = "Apache-2.0"

_YAML_EXTENSIONS = frozenset((".yaml", ".yml"))
_MISSING: object = object()

# Config-file key -> ProjectOptions field.
_STR_KEYS = {
    "name": "name",
    "version": "version",
    "description": "description",
    "license": "license",
    "funcDir": "func_dir",
    "funcHandler": "func_handler",
    "ofWatchDogDockerImageTag": "watchdog_image_tag",
}
_LIST_KEYS = {
    "functionDeps": "function_deps",
    "functionDevDeps": "function_dev_deps",
    "functionPeerDeps": "function_peer_deps",
}
_BOOL_KEYS = {
    "mergeFunctionDeps": "merge_function_deps",
}
_ALLOWED_KEYS = frozenset((*_STR_KEYS, *_LIST_KEYS, *_BOOL_KEYS))


class ConfigurationError(ValueError):
    """Raised when the configuration or output location cannot be used."""


class ConfigValidationError(ValueError):
    """Raised when a config file fails schema validation."""

    def __init__(self, path: Path, errors: Iterable[str]) -> None:
        self.path = path
        self.errors = [error for error in errors if error]
        details = "\n".join(f"- {error}" for error in self.errors)
        message = f"Invalid config file: {path}"
        if details:
            message = f"{message}\n{details}"
        super().__init__(message)


@dataclass(frozen=True)
class ProjectOptions:
    """Caller-supplied options.  ``None`` means "not given"."""

    name: str | None = None
    version: str | None = None
    description: str | None = None
    license: str | None = None
    func_dir: str | None = None
    func_handler: str | None = None
    function_deps: tuple[str, ...] | None = None
    function_dev_deps: tuple[str, ...] | None = None
    function_peer_deps: tuple[str, ...] | None = None
    watchdog_image_tag: str | None = None
    merge_function_deps: bool | None = None

    def merged(self, **overrides: Any) -> ProjectOptions:
        """Return a copy with every non-``None`` override applied."""
        given = {key: value for key, value in overrides.items() if value is not None}
        return dataclasses.replace(self, **given)


@dataclass(frozen=True)
class ProjectConfig:
    """Effective configuration for one generation run."""

    name: str
    version: str = DEFAULT_VERSION
    description: str = ""
    license: str = DEFAULT_LICENSE
    func_dir: str = DEFAULT_FUNC_DIR
    func_handler: str = DEFAULT_FUNC_HANDLER
    function_deps: tuple[str, ...] = ()
    function_dev_deps: tuple[str, ...] = ()
    function_peer_deps: tuple[str, ...] = ()
    watchdog_image_tag: str = DEFAULT_WATCHDOG_TAG
    merge_function_deps: bool = False

    @property
    def handler_path(self) -> str:
        """Handler location relative to the output root."""
        return f"{self.func_dir}/{self.func_handler}"

    @property
    def handler_module(self) -> str:
        """``require()`` path of the handler as seen from the bootstrap script."""
        stem = PurePosixPath(self.func_handler).stem
        return f"./{self.func_dir}/{stem}"


def resolve_config(options: ProjectOptions) -> ProjectConfig:
    """Apply defaults to *options* and validate the result."""
    if not options.name or not options.name.strip():
        msg = "A project name is required."
        raise ConfigurationError(msg)

    func_dir = options.func_dir or DEFAULT_FUNC_DIR
    config = ProjectConfig(
        name=options.name,
        version=options.version or DEFAULT_VERSION,
        description=options.description or "",
        license=options.license or DEFAULT_LICENSE,
        func_dir=PurePosixPath(func_dir.replace("\\", "/")).as_posix(),
        func_handler=options.func_handler or DEFAULT_FUNC_HANDLER,
        function_deps=tuple(options.function_deps or ()),
        function_dev_deps=tuple(options.function_dev_deps or ()),
        function_peer_deps=tuple(options.function_peer_deps or ()),
        watchdog_image_tag=options.watchdog_image_tag or DEFAULT_WATCHDOG_TAG,
        merge_function_deps=bool(options.merge_function_deps),
    )
    validate_config(config)
    return config


def validate_config(config: ProjectConfig) -> None:
    """Reject paths that would land outside the output root."""
    func_dir = PurePosixPath(config.func_dir)
    if func_dir.is_absolute() or ".." in func_dir.parts or func_dir.as_posix() == ".":
        msg = f"funcDir must be a subdirectory of the output root, got '{config.func_dir}'"
        raise ConfigurationError(msg)

    handler = config.func_handler
    if "/" in handler or "\\" in handler or handler in (".", ".."):
        msg = f"funcHandler must be a plain file name, got '{handler}'"
        raise ConfigurationError(msg)

    if not config.watchdog_image_tag.strip():
        msg = "ofWatchDogDockerImageTag must not be empty"
        raise ConfigurationError(msg)


def load_options(path: Path) -> ProjectOptions:
    """Load and validate a YAML config file."""
    resolved = path.resolve()
    if not resolved.is_file():
        msg = f"Config file not found: {resolved}"
        raise FileNotFoundError(msg)

    suffix = resolved.suffix.lower()
    if suffix not in _YAML_EXTENSIONS:
        raise ConfigValidationError(
            resolved,
            [f"Unsupported config file extension '{suffix}'. Use .yaml or .yml."],
        )

    data = _parse_yaml(resolved.read_text(encoding="utf-8"), resolved)
    if data is None:
        return ProjectOptions()
    if not isinstance(data, dict):
        raise ConfigValidationError(resolved, ["Top-level YAML document must be a mapping."])

    errors: list[str] = []
    extra = sorted(str(key) for key in data if key not in _ALLOWED_KEYS)
    if extra:
        errors.append(
            f"Unexpected keys: {', '.join(extra)}. "
            f"Allowed keys: {', '.join(sorted(_ALLOWED_KEYS))}."
        )

    values: dict[str, Any] = {}
    for key, field_name in _STR_KEYS.items():
        value = _validate_optional_str(data.get(key, _MISSING), key, errors)
        if value is not None:
            values[field_name] = value
    for key, field_name in _LIST_KEYS.items():
        items = _validate_optional_str_list(data.get(key, _MISSING), key, errors)
        if items is not None:
            values[field_name] = tuple(items)
    for key, field_name in _BOOL_KEYS.items():
        flag = data.get(key, _MISSING)
        if flag is _MISSING:
            continue
        if not isinstance(flag, bool):
            errors.append(f"{key} must be true or false")
            continue
        values[field_name] = flag

    if errors:
        raise ConfigValidationError(resolved, errors)
    return ProjectOptions(**values)


def _parse_yaml(raw: str, path: Path) -> Any:
    try:
        return yaml.safe_load(raw)
    except yaml.YAMLError as exc:
        raise ConfigValidationError(path, [f"YAML parse error: {str(exc).strip()}"]) from exc


def _validate_optional_str(value: Any, path: str, errors: list[str]) -> str | None:
    if value is _MISSING or value is None:
        return None
    if not isinstance(value, str):
        errors.append(f"{path} must be a string (quote version numbers)")
        return None
    return value


def _validate_optional_str_list(value: Any, path: str, errors: list[str]) -> list[str] | None:
    if value is _MISSING or value is None:
        return None
    if not isinstance(value, list):
        errors.append(f"{path} must be a list of strings")
        return None
    items: list[str] = []
    for index, item in enumerate(value):
        if not isinstance(item, str):
            errors.append(f"{path}[{index}] must be a string")
            continue
        if not item.strip():
            errors.append(f"{path}[{index}] must be a non-empty string")
            continue
        items.append(item)
    return items
