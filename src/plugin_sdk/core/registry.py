from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from threading import RLock
from types import MappingProxyType, ModuleType

from .errors import PluginNotFoundError, PluginRegistrationError
from .metadata import PluginType

_LOGGER = logging.getLogger(__name__)

PLUGIN_MARKER = "__plugin_type__"


def plugin_type_of(obj: object) -> PluginType | None:
    """Return the descriptor stamped on a plugin class by ``@Plugin``."""
    plugin_type = getattr(obj, PLUGIN_MARKER, None)
    if isinstance(plugin_type, PluginType) and plugin_type.plugin_class is obj:
        return plugin_type
    return None


def is_assignable(expected: object, candidate: type) -> bool:
    return isinstance(expected, type) and issubclass(candidate, expected)


@dataclass(frozen=True, slots=True)
class _CategoryIndex:
    plugins: tuple[PluginType, ...] = ()
    by_name: Mapping[str, PluginType] = field(
        default_factory=lambda: MappingProxyType({})
    )
    by_alias: Mapping[str, PluginType] = field(
        default_factory=lambda: MappingProxyType({})
    )

    @classmethod
    def build(cls, plugins: Iterable[PluginType]) -> "_CategoryIndex":
        ordered = tuple(plugins)
        by_name: dict[str, PluginType] = {}
        by_alias: dict[str, PluginType] = {}
        for plugin_type in ordered:
            # first registered wins on ties
            by_name.setdefault(plugin_type.name.lower(), plugin_type)
            for alias in plugin_type.aliases:
                by_alias.setdefault(alias.strip().lower(), plugin_type)
        return cls(
            plugins=ordered,
            by_name=MappingProxyType(by_name),
            by_alias=MappingProxyType(by_alias),
        )


@dataclass(frozen=True, slots=True)
class _RegistrySnapshot:
    """Immutable view swapped in whole by writers."""

    categories: Mapping[str, _CategoryIndex] = field(
        default_factory=lambda: MappingProxyType({})
    )
    scanned_packages: frozenset[str] = frozenset()

    def with_plugins(
        self,
        plugins: Iterable[PluginType],
        *,
        scanned: Iterable[str] = (),
    ) -> "_RegistrySnapshot":
        grouped: dict[str, list[PluginType]] = {
            name: list(index.plugins) for name, index in self.categories.items()
        }
        for plugin_type in plugins:
            grouped.setdefault(plugin_type.category.lower(), []).append(
                plugin_type
            )
        return _RegistrySnapshot(
            categories=MappingProxyType(
                {
                    name: _CategoryIndex.build(items)
                    for name, items in grouped.items()
                }
            ),
            scanned_packages=self.scanned_packages | frozenset(scanned),
        )

    def all_plugins(self) -> tuple[PluginType, ...]:
        return tuple(
            plugin_type
            for index in self.categories.values()
            for plugin_type in index.plugins
        )


class PluginRegistry:
    """Category-partitioned lookup table of plugin types.

    Readers never lock: every write builds a new snapshot and replaces the
    reference in one assignment, so a reader sees either the old or the new
    table in full.
    """

    def __init__(self, *, scan_workers: int | None = None) -> None:
        self._snapshot = _RegistrySnapshot()
        self._manual: list[PluginType] = []
        self._lock = RLock()
        self._scan_workers = scan_workers

    # registration -----------------------------------------------------

    def register(self, plugin_type: PluginType) -> PluginType:
        """Register ``plugin_type`` and return the instance actually served.

        Registering the same class under the same name twice is a no-op.
        A different class under a taken name is kept, but lookups keep
        returning the first one.
        """
        if not isinstance(plugin_type, PluginType):
            raise PluginRegistrationError(
                f"expected PluginType, got {type(plugin_type).__name__}"
            )
        with self._lock:
            existing = self._find_same(self._snapshot, plugin_type)
            if existing is not None:
                return existing
            shadowed = self._snapshot.categories.get(
                plugin_type.category.lower(), _CategoryIndex()
            ).by_name.get(plugin_type.name.lower())
            if shadowed is not None:
                _LOGGER.warning(
                    "Plugin %s in category %s is already registered to %s; "
                    "%s will not be selected by name",
                    plugin_type.name,
                    plugin_type.category,
                    shadowed.plugin_class.__qualname__,
                    plugin_type.plugin_class.__qualname__,
                )
            self._manual.append(plugin_type)
            self._snapshot = self._snapshot.with_plugins((plugin_type,))
            _LOGGER.debug("Registered %s", plugin_type.describe())
            return plugin_type

    def register_from_module(self, module: ModuleType) -> list[PluginType]:
        """Register every plugin class exported by ``module``."""
        names: Iterable[str] = getattr(module, "__all__", None) or [
            name for name in vars(module) if not name.startswith("_")
        ]
        registered: list[PluginType] = []
        for name in names:
            obj = getattr(module, name, None)
            plugin_type = plugin_type_of(obj)
            if plugin_type is None:
                _LOGGER.debug(
                    "Skipping %s.%s: not a plugin class", module.__name__, name
                )
                continue
            registered.append(self.register(plugin_type))
        return registered

    # lookup -----------------------------------------------------------

    def find(
        self,
        category: str,
        name: str,
        expected_type: type | None = None,
    ) -> PluginType | None:
        """Resolve ``name`` within ``category``.

        Precedence: canonical name, then alias, then the first plugin (in
        registration order) that opted into type fallback and whose class is
        a subclass of ``expected_type``. Name and alias matches win even when
        another plugin would also satisfy ``expected_type``.
        """
        index = self._snapshot.categories.get(category.lower())
        if index is None:
            return None
        lowered = name.lower()
        found = index.by_name.get(lowered) or index.by_alias.get(lowered)
        if found is not None:
            return found
        if expected_type is None:
            return None
        for plugin_type in index.plugins:
            if plugin_type.type_fallback and is_assignable(
                expected_type, plugin_type.plugin_class
            ):
                return plugin_type
        return None

    def get(self, category: str, name: str) -> PluginType:
        found = self.find(category, name)
        if found is not None:
            return found
        available = ", ".join(
            sorted(p.name for p in self.plugins(category))
        ) or "(none)"
        raise PluginNotFoundError(
            f"plugin not found: {name} ({category}). Available: {available}"
        )

    def plugins(self, category: str | None = None) -> tuple[PluginType, ...]:
        snapshot = self._snapshot
        if category is None:
            return snapshot.all_plugins()
        index = snapshot.categories.get(category.lower())
        return index.plugins if index is not None else ()

    def categories(self) -> tuple[str, ...]:
        return tuple(self._snapshot.categories)

    @property
    def scanned_packages(self) -> frozenset[str]:
        return self._snapshot.scanned_packages

    # discovery --------------------------------------------------------

    def scan(
        self,
        packages: Iterable[str],
        *,
        force: bool = False,
        max_workers: int | None = None,
    ) -> int:
        """Discover plugin classes below ``packages``.

        Packages already scanned are skipped unless ``force`` is set.
        ``max_workers`` overrides the registry's listing thread count.
        Returns the number of newly added plugin types.
        """
        from ..discovery.scanner import PackageScanner

        requested = [pkg.strip() for pkg in packages if pkg and pkg.strip()]
        pending = [
            pkg
            for pkg in dict.fromkeys(requested)
            if force or pkg not in self._snapshot.scanned_packages
        ]
        if not pending:
            return 0
        workers = max_workers or self._scan_workers
        classes = PackageScanner(max_workers=workers).scan(pending)
        with self._lock:
            fresh = [
                plugin_type
                for plugin_type in (plugin_type_of(cls) for cls in classes)
                if plugin_type is not None
                and self._find_same(self._snapshot, plugin_type) is None
            ]
            self._snapshot = self._snapshot.with_plugins(
                fresh, scanned=pending
            )
        _LOGGER.debug(
            "Scanned %d package(s), %d new plugin type(s)",
            len(pending),
            len(fresh),
        )
        return len(fresh)

    def reload(self) -> int:
        """Rescan every package scanned so far into a fresh snapshot.

        Manual registrations survive. Plugin types whose class and name did
        not change keep their identity, so graphs built earlier still hold
        the instances the registry serves.
        """
        from ..discovery.scanner import PackageScanner

        with self._lock:
            previous = self._snapshot
            packages = sorted(previous.scanned_packages)
            manual = list(self._manual)
        classes = PackageScanner(max_workers=self._scan_workers).scan(packages)
        with self._lock:
            rebuilt = _RegistrySnapshot().with_plugins(manual)
            fresh: list[PluginType] = []
            for cls in classes:
                plugin_type = plugin_type_of(cls)
                if plugin_type is None:
                    continue
                if self._find_same(rebuilt, plugin_type) is not None:
                    continue
                served = self._find_same(previous, plugin_type)
                fresh.append(served if served is not None else plugin_type)
            self._snapshot = rebuilt.with_plugins(fresh, scanned=packages)
            return len(self._snapshot.all_plugins())

    def load_manifest(self, path: str | Path) -> int:
        """Apply a plugin manifest file, or every manifest in a directory."""
        from ..discovery.manifest import iter_manifests, resolve_reference

        added = 0
        for manifest in iter_manifests(path):
            if manifest.packages:
                added += self.scan(manifest.packages)
            for reference in manifest.plugins:
                plugin_type = plugin_type_of(resolve_reference(reference))
                if plugin_type is None:
                    raise PluginRegistrationError(
                        f"manifest entry {reference!r} is not a plugin class"
                    )
                before = len(self._snapshot.all_plugins())
                self.register(plugin_type)
                added += len(self._snapshot.all_plugins()) - before
        return added

    def clear(self) -> None:
        with self._lock:
            self._manual.clear()
            self._snapshot = _RegistrySnapshot()

    @staticmethod
    def _find_same(
        snapshot: _RegistrySnapshot, plugin_type: PluginType
    ) -> PluginType | None:
        index = snapshot.categories.get(plugin_type.category.lower())
        if index is None:
            return None
        for candidate in index.plugins:
            if (
                candidate.plugin_class is plugin_type.plugin_class
                and candidate.name.lower() == plugin_type.name.lower()
            ):
                return candidate
        return None


_default_registry = PluginRegistry()


def get_registry() -> PluginRegistry:
    return _default_registry
