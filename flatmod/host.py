"""Module host - the registration point for resolvers.

A host exposes the two resolution entry points a module loader calls. By
default they are served by the legacy resolver; installing a flat resolver
routes them through it until it is uninstalled.

Usage:
    host = get_host()
    host.install()
    path = host.require("foo", Requester.for_file("/app/index.js"))
    host.uninstall()
"""

import logging
from collections.abc import Sequence
from pathlib import Path

from .errors import ModuleNotFoundError
from .errors import ResolverAlreadyInstalledError
from .errors import ResolverNotInstalledError
from .layout import DEFAULT_LAYOUT
from .layout import StoreLayout
from .legacy import LegacyResolver
from .legacy import NestedModuleResolver
from .request import Requester
from .resolver import FlatModuleResolver

logger = logging.getLogger(__name__)


class ModuleHost:
    """Dispatches resolution entry points to the installed resolver."""

    def __init__(self, legacy: LegacyResolver | None = None, layout: StoreLayout = DEFAULT_LAYOUT) -> None:
        self.layout = layout
        self.legacy = legacy or NestedModuleResolver(layout)
        self._resolver: FlatModuleResolver | None = None

    @property
    def installed(self) -> FlatModuleResolver | None:
        return self._resolver

    @property
    def active(self) -> LegacyResolver:
        return self._resolver or self.legacy

    def install(self, resolver: FlatModuleResolver | None = None) -> FlatModuleResolver:
        """Route resolution through a flat resolver.

        Args:
            resolver: Resolver to install; a new one wrapping this host's legacy resolver by default

        Returns:
            The installed resolver

        Raises:
            ResolverAlreadyInstalledError: A resolver is already installed
        """
        if self._resolver is not None:
            raise ResolverAlreadyInstalledError(f"Flat module resolver already installed: {self._resolver!r}")

        self._resolver = resolver or FlatModuleResolver(legacy=self.legacy, layout=self.layout)
        logger.debug(f"[flat:host] installed {self._resolver!r}")
        return self._resolver

    def uninstall(self) -> FlatModuleResolver:
        """Restore the legacy entry points.

        Raises:
            ResolverNotInstalledError: No resolver is installed
        """
        if self._resolver is None:
            raise ResolverNotInstalledError("No flat module resolver installed")

        resolver, self._resolver = self._resolver, None
        logger.debug(f"[flat:host] uninstalled {resolver!r}")
        return resolver

    def lookup_paths(self, request: str, requester: Requester) -> list[Path]:
        return self.active.lookup_paths(request, requester)

    def find_path(self, request: str, paths: Sequence[Path], is_main: bool = False) -> Path | None:
        return self.active.find_path(request, paths, is_main)

    def require(self, request: str, requester: Requester | None = None, is_main: bool = False) -> Path:
        """Resolve ``request`` to the file the loader should open.

        Raises:
            ModuleNotFoundError: No resolver could locate the module
        """
        requester = requester or Requester(filename=None, id=self.layout.interactive_marker)
        paths = self.lookup_paths(request, requester)
        found = self.find_path(request, paths, is_main)
        if found is None:
            raise ModuleNotFoundError(request, requester.filename)
        return found


_host: ModuleHost | None = None


def get_host() -> ModuleHost:
    """Get the process-wide module host."""
    global _host
    if _host is None:
        _host = ModuleHost()
    return _host


def install(resolver: FlatModuleResolver | None = None) -> FlatModuleResolver:
    """Install a flat resolver on the process-wide host."""
    return get_host().install(resolver)


def uninstall() -> FlatModuleResolver:
    """Uninstall the flat resolver from the process-wide host."""
    return get_host().uninstall()
