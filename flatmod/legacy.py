"""Legacy (nested-tree) module resolution.

The flat resolver defers to a ``LegacyResolver`` for relative and absolute
requests, for roots that are not flat stores, and for bundled dependencies.
``NestedModuleResolver`` is the classic implementation: look in the store
directory of the requester's directory and of every ancestor.
"""

import logging
import os
from collections.abc import Sequence
from pathlib import Path
from typing import Protocol

from .descriptor import DescriptorCache
from .layout import DEFAULT_LAYOUT
from .layout import StoreLayout
from .request import Requester
from .request import is_relative_request

logger = logging.getLogger(__name__)


# ============================================================================
# LegacyResolver Protocol
# ============================================================================


class LegacyResolver(Protocol):
    """The two resolution entry points a module host exposes."""

    def lookup_paths(self, request: str, requester: Requester) -> list[Path]:
        """Directories to search for ``request``, nearest first."""
        ...

    def find_path(self, request: str, paths: Sequence[Path], is_main: bool = False) -> Path | None:
        """Find the file ``request`` names inside one of ``paths``, or None."""
        ...


# ============================================================================
# Nested tree implementation
# ============================================================================


class NestedModuleResolver:
    """Nested ``<dir>/<store>/<name>`` lookup walking up from the requester."""

    def __init__(
        self,
        layout: StoreLayout = DEFAULT_LAYOUT,
        descriptors: DescriptorCache | None = None,
    ) -> None:
        self.layout = layout
        self.descriptors = descriptors or DescriptorCache(layout)

    def lookup_paths(self, request: str, requester: Requester) -> list[Path]:
        origin = requester.directory or Path.cwd()
        if os.path.isabs(request) or is_relative_request(request):
            return [origin]

        paths = []
        current = origin
        while True:
            if current.name != self.layout.store_dir:
                paths.append(current / self.layout.store_dir)
            if current.parent == current:
                break
            current = current.parent
        return paths

    def find_path(self, request: str, paths: Sequence[Path], is_main: bool = False) -> Path | None:
        """Find the file for ``request``.

        Tries, for each base location: the exact file, the file with each known
        extension, then the directory's descriptor ``main`` entry and its index file.

        Args:
            request: Request with any version constraint already removed
            paths: Directories to search in order
            is_main: Return the real path (symlinks resolved) for an entry point

        Returns:
            Path to the module file, or None
        """
        if os.path.isabs(request):
            bases = [Path(request)]
        else:
            bases = [path / request for path in paths]

        for base in bases:
            found = self._try_location(Path(os.path.normpath(base)))
            if found is not None:
                logger.debug(f"[flat:legacy] {request} -> {found}")
                return found.resolve() if is_main else found

        return None

    def _try_location(self, base: Path) -> Path | None:
        found = self._try_file(base)
        if found is not None:
            return found

        if base.is_dir():
            descriptor = self.descriptors.read(base)
            if descriptor is not None and descriptor.main:
                main = Path(os.path.normpath(base / descriptor.main))
                found = self._try_file(main) or self._try_index(main)
                if found is not None:
                    return found
            return self._try_index(base)

        return None

    def _try_file(self, base: Path) -> Path | None:
        if base.is_file():
            return base
        for extension in self.layout.extensions:
            candidate = base.with_name(base.name + extension)
            if candidate.is_file():
                return candidate
        return None

    def _try_index(self, directory: Path) -> Path | None:
        if not directory.is_dir():
            return None
        return self._try_file(directory / "index")
