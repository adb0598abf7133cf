"""Project facade -- ties configuration, manifest assembly, and emitters together."""

from __future__ import annotations

import logging
from pathlib import Path

from ofnode.config import ConfigurationError, ProjectConfig, validate_config
from ofnode.emitters import apply_plan, default_emitters, plan_artifacts, scan_existing
from ofnode.manifest import assemble_manifest
from ofnode.models import FunctionManifest, GenerationPlan, GenerationReport
from ofnode.protocols import EmitterProtocol

__all__ = ["OpenFaasNodeProject"]

log = logging.getLogger(__name__)


class OpenFaasNodeProject:
    """An OpenFaaS Node.js function project rooted at *outdir*.

    Args:
        config: Effective configuration, usually from
            :func:`~ofnode.config.resolve_config`.
        outdir: Output root.  Created on :meth:`synth` if missing.

    Raises:
        ConfigurationError: If *config* would place files outside *outdir*.
    """

    def __init__(self, config: ProjectConfig, outdir: Path) -> None:
        validate_config(config)
        self._config = config
        self._outdir = outdir.resolve()
        self._manifest = assemble_manifest(config)
        self._emitters: list[EmitterProtocol] = default_emitters()

    @property
    def config(self) -> ProjectConfig:
        return self._config

    @property
    def outdir(self) -> Path:
        return self._outdir

    @property
    def function_dir(self) -> Path:
        return self._outdir / self._config.func_dir

    @property
    def manifest(self) -> FunctionManifest:
        return self._manifest

    @property
    def emitters(self) -> list[EmitterProtocol]:
        return list(self._emitters)

    def plan(self) -> GenerationPlan:
        """Describe what :meth:`synth` would do.  Writes nothing."""
        existing = scan_existing(self._outdir, self._config, self._emitters)
        return plan_artifacts(self._config, existing, self._emitters)

    def synth(self) -> GenerationReport:
        """Create the function directory, then write every planned artifact.

        Raises:
            ConfigurationError: If the function directory cannot be created.
                Nothing has been written at that point.
            GenerationError: If an artifact write fails.  Earlier writes are
                left in place.
        """
        self._ensure_function_dir()
        report = apply_plan(self.plan(), self._outdir)
        log.info(
            "Generated %d file(s), skipped %d in %s",
            len(report.written),
            len(report.skipped),
            self._outdir,
        )
        return report

    def _ensure_function_dir(self) -> None:
        target = self.function_dir
        try:
            target.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            msg = f"Cannot create function directory {target}: {exc}"
            raise ConfigurationError(msg) from exc
