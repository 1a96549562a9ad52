"""Top-directory location - find the store root that serves a requester.

A requester's dependencies live in exactly one store. For requesters under
the working directory the root is usually found lexically; otherwise the
locator walks up looking for a store directory. A module linked into the
working directory's project (``<linked>/<store>/<linked_from_file>`` lists the
working directory) resolves from the working directory's store instead of its own.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING
from typing import Any

from .errors import FlatModeViolationError
from .layout import DEFAULT_LAYOUT
from .layout import StoreLayout
from .walker import NOT_FOUND
from .walker import path_is_inside
from .walker import search_up

if TYPE_CHECKING:
    from .resolutions import DependencyResolutionMap

logger = logging.getLogger(__name__)


class FlatMode(Enum):
    """Whether a store root is resolved with flat semantics."""

    UNKNOWN = "unknown"
    ENABLED = "enabled"
    DISABLED = "disabled"


@dataclass
class LinkedModuleRecord:
    """What a linked module's marker file says about one consuming project.

    Attributes:
        consumer: Root of the project the module is linked into
        marker_file: Marker file the record was read from
        resolutions: Raw resolution map recorded for the linked module, if any
    """

    consumer: Path
    marker_file: Path
    resolutions: dict[str, Any] | None = None


@dataclass
class StoreRoot:
    """State shared by every requester resolved against one root directory.

    ``flat_mode`` only ever moves away from UNKNOWN once.
    """

    directory: Path
    flat_mode: FlatMode = FlatMode.UNKNOWN
    shared_resolutions: DependencyResolutionMap | None = None
    shared_resolutions_checked: bool = False

    def enable_flat_mode(self) -> None:
        if self.flat_mode is FlatMode.UNKNOWN:
            logger.info(f"[flat:mode] flat resolution enabled for {self.directory}")
            self.flat_mode = FlatMode.ENABLED

    def disable_flat_mode(self, reason: str) -> None:
        """Hand the root over to the legacy resolver for the rest of the process.

        Raises:
            FlatModeViolationError: The root already resolved modules in flat mode
        """
        if self.flat_mode is FlatMode.ENABLED:
            raise FlatModeViolationError(self.directory, reason)
        if self.flat_mode is FlatMode.UNKNOWN:
            logger.warning(f"[flat:mode] flat resolution disabled for {self.directory}: {reason}")
            self.flat_mode = FlatMode.DISABLED


@dataclass
class TopDirContext:
    """The store root found for one originating directory."""

    origin: Path
    store_root: StoreRoot
    linked: LinkedModuleRecord | None = None

    @property
    def root(self) -> Path:
        return self.store_root.directory

    @property
    def flat_mode(self) -> FlatMode:
        return self.store_root.flat_mode


class TopDirLocator:
    """Finds and caches the store root for requesting directories."""

    def __init__(self, layout: StoreLayout = DEFAULT_LAYOUT, cwd: Callable[[], Path] = Path.cwd) -> None:
        self.layout = layout
        self._cwd = cwd
        self._contexts: dict[Path, TopDirContext | None] = {}
        self._roots: dict[Path, StoreRoot] = {}
        self._linked: dict[tuple[Path, Path], LinkedModuleRecord | None] = {}

    def locate(self, origin: Path) -> TopDirContext | None:
        """Find the store root for requests made from ``origin``.

        Args:
            origin: Directory of the requesting file

        Returns:
            TopDirContext, or None when no store serves ``origin``
        """
        if origin in self._contexts:
            return self._contexts[origin]

        found = self._find(origin)
        context = None
        if found is not None:
            root, linked = found
            context = TopDirContext(origin=origin, store_root=self.store_root(root), linked=linked)
            logger.debug(f"[flat:topdir] {origin} -> {root}{' (linked)' if linked else ''}")
        else:
            logger.debug(f"[flat:topdir] no store found for {origin}")

        self._contexts[origin] = context
        return context

    def store_root(self, directory: Path) -> StoreRoot:
        """Get the shared state for a root directory."""
        if directory not in self._roots:
            self._roots[directory] = StoreRoot(directory=directory)
        return self._roots[directory]

    def _find(self, origin: Path) -> tuple[Path, LinkedModuleRecord | None] | None:
        if path_is_inside(origin, self._cwd()):
            if (origin / self.layout.store_dir).is_dir():
                return origin, None

            # Inside an installed module: the root is above the last store segment.
            parts = origin.parts
            for index in range(len(parts) - 1, 0, -1):
                if parts[index] == self.layout.store_dir:
                    return Path(*parts[:index]), None

        return self._search(origin)

    def _search(self, origin: Path) -> tuple[Path, LinkedModuleRecord | None] | None:
        def probe(directory: Path):
            store = directory / self.layout.store_dir
            if not store.is_dir():
                return NOT_FOUND
            linked = self.linked_info(store)
            if linked is not None:
                return linked.consumer, linked
            return directory, None

        found = search_up(origin, probe)
        return None if found is NOT_FOUND else found

    def linked_info(self, store: Path) -> LinkedModuleRecord | None:
        """Read the linked-module marker in ``store`` for the current working directory.

        Args:
            store: A store directory that may carry a linked-module marker

        Returns:
            LinkedModuleRecord when the marker lists the working directory, else None
        """
        cwd = self._cwd()
        key = (cwd, store)
        if key in self._linked:
            return self._linked[key]

        record = None
        marker = store / self.layout.linked_from_file
        if marker.is_file():
            consumers = json.loads(marker.read_text(encoding="utf-8"))
            entry = consumers.get(str(cwd))
            if entry:
                resolutions = entry.get("_depResolutions") if isinstance(entry, dict) else None
                record = LinkedModuleRecord(consumer=cwd, marker_file=marker, resolutions=resolutions)
                logger.debug(f"[flat:topdir] {store} is linked from {cwd}")

        self._linked[key] = record
        return record
