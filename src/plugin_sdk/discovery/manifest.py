"""Plugin manifests: YAML files naming packages to scan and plugin classes.

A manifest is produced ahead of time (for example by a packaging step) so
that startup can skip walking whole packages::

    packages:
      - my_app.logging_plugins
    plugins:
      - my_app.appenders:KafkaAppender
"""

from __future__ import annotations

import importlib
from collections.abc import Iterator
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..core.errors import PluginRegistrationError

MANIFEST_SUFFIX = ".plugins.yaml"


class PluginManifest(BaseModel):
    """Validated contents of one manifest file."""

    model_config = ConfigDict(extra="forbid")

    packages: list[str] = Field(default_factory=list)
    plugins: list[str] = Field(default_factory=list)

    @field_validator("plugins")
    @classmethod
    def _check_references(cls, value: list[str]) -> list[str]:
        for reference in value:
            module, sep, qualname = reference.partition(":")
            if not sep or not module or not qualname:
                raise ValueError(
                    f"plugin reference must look like 'module:QualName', "
                    f"got {reference!r}"
                )
        return value


def load_manifest(path: str | Path) -> PluginManifest:
    manifest_path = Path(path)
    raw: Any = yaml.safe_load(manifest_path.read_text(encoding="utf-8"))
    if raw is None:
        return PluginManifest()
    try:
        return PluginManifest.model_validate(raw)
    except ValidationError as exc:
        raise PluginRegistrationError(
            f"invalid plugin manifest {manifest_path}: {exc}"
        ) from exc


def iter_manifests(path: str | Path) -> Iterator[PluginManifest]:
    """Yield the manifest at ``path``, or every manifest in a directory in
    file-name order."""
    target = Path(path)
    if target.is_dir():
        for item in sorted(target.glob(f"*{MANIFEST_SUFFIX}")):
            yield load_manifest(item)
        return
    yield load_manifest(target)


def resolve_reference(reference: str) -> object:
    module_name, _, qualname = reference.partition(":")
    try:
        obj: object = importlib.import_module(module_name)
        for part in qualname.split("."):
            obj = getattr(obj, part)
    except (ImportError, AttributeError) as exc:
        raise PluginRegistrationError(
            f"cannot resolve plugin reference {reference!r}: {exc}"
        ) from exc
    return obj
