from __future__ import annotations

import importlib
import logging
import os
import zipfile
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from types import ModuleType

from ..core.registry import plugin_type_of
from ..logging import get_event_logger
from .resolver import ResourceLocation, extract_path, locate, path_to_url

_LOGGER = logging.getLogger(__name__)
_EVENT_LOGGER = get_event_logger()


@dataclass(frozen=True, slots=True)
class ScanRoot:
    """One resource root of a package (a ``__path__`` entry)."""

    package: str
    location: ResourceLocation
    inner_prefix: str = ""


class PackageScanner:
    """Find plugin classes below a closed set of packages.

    Listing candidate modules touches only the filesystem and runs in
    parallel across roots. Imports run afterwards on the calling thread, in
    root order, so the resulting class order is deterministic.
    """

    def __init__(self, *, max_workers: int | None = None) -> None:
        self._max_workers = max_workers

    def scan(self, packages: Iterable[str]) -> list[type]:
        roots: list[ScanRoot] = []
        single_modules: list[str] = []
        for package in packages:
            module = self._import(package)
            if module is None:
                continue
            paths = getattr(module, "__path__", None)
            if paths is None:
                single_modules.append(package)
                continue
            for entry in paths:
                roots.append(self._root_for(package, entry))

        with ThreadPoolExecutor(max_workers=self._max_workers) as pool:
            listings = list(pool.map(self._list_modules, roots))

        module_names: list[str] = list(single_modules)
        for listing in listings:
            module_names.extend(listing)

        classes: list[type] = []
        seen: set[int] = set()
        for name in dict.fromkeys(module_names):
            module = self._import(name)
            if module is None:
                continue
            for cls in self._plugin_classes(module):
                if id(cls) not in seen:
                    seen.add(id(cls))
                    classes.append(cls)
        return classes

    @staticmethod
    def _root_for(package: str, entry: str) -> ScanRoot:
        location = locate(path_to_url(entry))
        if location.path.exists():
            return ScanRoot(package=package, location=location)
        # package living inside an archive: <archive>/<inner path>
        for parent in location.path.parents:
            if parent.is_file():
                inner = location.path.relative_to(parent).as_posix()
                return ScanRoot(
                    package=package,
                    location=ResourceLocation(
                        url=location.url, path=parent, is_archive=True
                    ),
                    inner_prefix=inner,
                )
        return ScanRoot(package=package, location=location)

    def _list_modules(self, root: ScanRoot) -> list[str]:
        location = root.location
        _LOGGER.debug(
            "Scanning for plugins in %r (package %s)",
            extract_path(location.url),
            root.package,
        )
        if not location.exists:
            _LOGGER.warning("Plugin root %s does not exist", location.path)
            return []
        if location.path.is_dir():
            return _list_directory(root.package, location.path)
        if location.is_archive:
            return _list_archive(root.package, location.path, root.inner_prefix)
        return []

    @staticmethod
    def _import(name: str) -> ModuleType | None:
        try:
            return importlib.import_module(name)
        except Exception:
            _EVENT_LOGGER.warning(
                "Could not import %s while scanning for plugins",
                name,
                logger=_LOGGER,
                exc_info=True,
            )
            return None

    @staticmethod
    def _plugin_classes(module: ModuleType) -> list[type]:
        found: list[type] = []
        for obj in vars(module).values():
            if not isinstance(obj, type) or obj.__module__ != module.__name__:
                continue
            if plugin_type_of(obj) is not None:
                found.append(obj)
        return found


def _list_directory(package: str, directory: Path) -> list[str]:
    names: list[str] = [package]
    for current, dirnames, filenames in os.walk(directory):
        current_path = Path(current)
        # only descend into regular packages
        dirnames[:] = sorted(
            d for d in dirnames
            if d != "__pycache__" and (current_path / d / "__init__.py").exists()
        )
        relative = current_path.relative_to(directory).parts
        prefix = ".".join((package, *relative))
        if relative:
            names.append(prefix)
        for filename in sorted(filenames):
            if filename.endswith(".py") and filename != "__init__.py":
                names.append(f"{prefix}.{filename[:-3]}")
    return names


def _list_archive(package: str, archive: Path, inner_prefix: str) -> list[str]:
    prefix = inner_prefix.rstrip("/") + "/" if inner_prefix else ""
    names: list[str] = [package]
    try:
        with zipfile.ZipFile(archive) as zf:
            entries = sorted(zf.namelist())
    except (OSError, zipfile.BadZipFile):
        _LOGGER.warning("Could not read entries of %s", archive, exc_info=True)
        return []
    for entry in entries:
        if not entry.startswith(prefix) or not entry.endswith(".py"):
            continue
        relative = entry[len(prefix):-3].split("/")
        if relative[-1] == "__init__":
            relative = relative[:-1]
            if not relative:
                continue
        names.append(".".join((package, *relative)))
    return names
