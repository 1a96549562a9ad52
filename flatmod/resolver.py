"""Flat module resolver - maps requests onto the flat dependency store.

Every version of every package is installed once under the store root. A
request is resolved by finding the requester's store root, working out which
version the requester depends on, and pointing at that version's directory.
Anything that cannot be answered with flat semantics is handed to the
wrapped legacy resolver.

Per-root state machine:
    UNKNOWN -> ENABLED   first successful flat resolution
    UNKNOWN -> DISABLED  no resolution source, or a bundled dependency
    ENABLED -> DISABLED  FlatModeViolationError
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable
from collections.abc import Sequence
from pathlib import Path

from .descriptor import DescriptorCache
from .descriptor import PackageDescriptor
from .errors import ModuleNotFoundError
from .layout import DEFAULT_LAYOUT
from .layout import StoreLayout
from .legacy import LegacyResolver
from .legacy import NestedModuleResolver
from .request import Requester
from .request import is_relative_request
from .request import parse_request
from .request import strip_version
from .resolutions import ResolutionMapProvider
from .topdir import FlatMode
from .topdir import TopDirContext
from .topdir import TopDirLocator
from .versions import VersionRegistry
from .versions import VersionSet
from .versions import latest_matching

logger = logging.getLogger(__name__)


class FlatModuleResolver:
    """Resolver context owning every cache used during flat resolution.

    Implements the same two entry points as the legacy resolver it wraps, so a
    host can use either one interchangeably. Instances are independent; two
    resolvers never share cached state.
    """

    def __init__(
        self,
        legacy: LegacyResolver | None = None,
        layout: StoreLayout = DEFAULT_LAYOUT,
        cwd: Callable[[], Path] = Path.cwd,
    ) -> None:
        self.layout = layout
        self.descriptors = DescriptorCache(layout)
        self.legacy = legacy or NestedModuleResolver(layout, self.descriptors)
        self.locator = TopDirLocator(layout, cwd)
        self.registry = VersionRegistry(self.descriptors)
        self.resolutions = ResolutionMapProvider(layout)
        self._cwd = cwd
        # Flat candidate directory -> directory the exact-path lookup searches.
        self._search_roots: dict[Path, Path] = {}

    # ----- Resolution entry points -----

    def resolve(self, request: str, requester: Requester | None = None) -> list[Path]:
        """Resolve a request to the directories to load it from.

        Args:
            request: Raw request, e.g. ``foo``, ``foo@1.x``, ``@scope/pkg/lib/a``
            requester: File making the request; None for an interactive session

        Returns:
            Candidate directories, nearest first. Empty when the module cannot be found.

        Raises:
            FlatModeViolationError: A root already resolved in flat mode lost its flat metadata
        """
        requester = requester or self.interactive_requester()

        if self.uses_legacy_lookup(request, requester):
            return self.legacy.lookup_paths(request, requester)

        module_request = parse_request(request)
        origin = requester.directory or self._cwd()
        context = self.locator.locate(origin)

        if context is not None and context.flat_mode is FlatMode.DISABLED:
            return self._defer(module_request.name, requester, "root is not flat")

        if context is None:
            logger.debug(f"[flat:resolve] {request}: no store root above {origin}")
            return []

        name = self.canonical_name(context.root, module_request.name)
        descriptor = self.nearest_descriptor(requester, origin, context)

        if descriptor is not None and descriptor.bundles(name):
            context.store_root.disable_flat_mode(f"{name} is bundled by {descriptor.name or descriptor.directory}")
            return self._defer(module_request.name, requester, "bundled dependency")

        module_dir = self.module_dir(context.root, name)
        versions = self.registry.versions_of(module_dir)
        if module_request.has_constraint:
            version = latest_matching(module_request.version_constraint, versions)
        else:
            version = self.resolutions.resolved_version(context, descriptor, name, versions)

        if version is None:
            if context.flat_mode is FlatMode.DISABLED:
                return self._defer(module_request.name, requester, "no resolution source")
            version = self._fallback_version(descriptor, module_dir, versions)
            if version is None:
                logger.debug(f"[flat:resolve] {request}: no version of {name} resolved from {origin}")
                return []

        context.store_root.enable_flat_mode()

        if version == versions.default:
            candidate = module_dir
            self._search_roots[candidate] = context.root / self.layout.store_dir
        else:
            candidate = module_dir / self.layout.versions_dir / version
            self._search_roots[candidate] = candidate

        logger.debug(f"[flat:resolve] {request} -> {name}@{version} ({candidate})")
        return [candidate]

    def resolve_final_path(self, request: str, candidates: Sequence[Path], is_main: bool = False) -> Path | None:
        """Find the file to load once the candidate directories are known.

        Args:
            request: Raw request; any version constraint is removed
            candidates: Directories returned by ``resolve``
            is_main: Whether the file is the program entry point

        Returns:
            Path of the file, or None
        """
        if not self.uses_legacy_lookup(request):
            request = strip_version(request)
        paths = [self._search_roots.get(candidate, candidate) for candidate in candidates]
        return self.legacy.find_path(request, paths, is_main)

    def resolve_file(self, request: str, requester: Requester | None = None, is_main: bool = False) -> Path:
        """Resolve a request all the way to a file.

        Raises:
            ModuleNotFoundError: No file was found
        """
        requester = requester or self.interactive_requester()
        found = self.resolve_final_path(request, self.resolve(request, requester), is_main)
        if found is None:
            raise ModuleNotFoundError(request, requester.filename)
        return found

    # Same entry point names as LegacyResolver.
    def lookup_paths(self, request: str, requester: Requester) -> list[Path]:
        return self.resolve(request, requester)

    def find_path(self, request: str, paths: Sequence[Path], is_main: bool = False) -> Path | None:
        return self.resolve_final_path(request, paths, is_main)

    # ----- Helpers -----

    def interactive_requester(self) -> Requester:
        return Requester(filename=None, id=self.layout.interactive_marker)

    def uses_legacy_lookup(self, request: str, requester: Requester | None = None) -> bool:
        """Check whether a request bypasses flat resolution entirely.

        Bypassed: the interactive-session marker, absolute and relative paths,
        and requesters living inside a nested (non-flat) dependency tree.
        """
        if request == self.layout.interactive_marker:
            return True
        if os.path.isabs(request) or is_relative_request(request):
            return True
        if requester is not None and requester.filename is not None:
            return requester.filename.parts.count(self.layout.store_dir) >= 2
        return False

    def canonical_name(self, root: Path, name: str) -> str:
        """Find the installed module boundary within a slash-separated name.

        The shortest prefix whose store directory has a versions directory or
        a descriptor is the module name; ``@scope/pkg/lib/a`` becomes ``@scope/pkg``.
        """
        segments = name.split("/")
        if len(segments) < 2:
            return name

        directory = root / self.layout.store_dir
        for index, segment in enumerate(segments):
            directory = directory / segment
            if (directory / self.layout.versions_dir).exists() or (directory / self.layout.descriptor_file).exists():
                return "/".join(segments[: index + 1])
        return name

    def module_dir(self, root: Path, name: str) -> Path:
        return root / self.layout.store_dir / name

    def nearest_descriptor(
        self, requester: Requester, origin: Path, context: TopDirContext
    ) -> PackageDescriptor | None:
        """Find and remember the descriptor that governs ``requester``.

        The search stops at the store root and at any store directory: an
        installed module always carries its own descriptor.
        """
        if requester.descriptor is None:
            requester.descriptor = self.descriptors.find_nearest(
                origin, stop_dir=context.root, stop_names=(self.layout.store_dir,)
            )
        return requester.descriptor

    def _fallback_version(
        self, descriptor: PackageDescriptor | None, module_dir: Path, versions: VersionSet
    ) -> str | None:
        if versions.default is None:
            return None
        module_descriptor = self.descriptors.read(module_dir)
        opted_in = (descriptor is not None and descriptor.fallback_to_default) or (
            module_descriptor is not None and module_descriptor.fallback_to_default
        )
        if opted_in:
            logger.debug(f"[flat:resolve] falling back to default version {versions.default} in {module_dir}")
            return versions.default
        return None

    def _defer(self, request: str, requester: Requester, reason: str) -> list[Path]:
        logger.debug(f"[flat:resolve] {request}: deferring to legacy resolver ({reason})")
        return self.legacy.lookup_paths(request, requester)

    def __repr__(self) -> str:
        return f"FlatModuleResolver(store={self.layout.store_dir!r}, legacy={self.legacy!r})"
