"""Dependency resolution maps - which exact version satisfies each dependency.

Sources, first hit wins:
1. The requester descriptor's own explicit resolution map
2. The linked-module record, when the root was redirected for a linked module
3. The store's shared resolution file (loaded once per root)

A root with none of these is not a flat store and is handed to the legacy resolver.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

from .descriptor import PackageDescriptor
from .layout import DEFAULT_LAYOUT
from .layout import StoreLayout
from .topdir import FlatMode
from .topdir import TopDirContext
from .versions import VersionSet
from .versions import latest_matching

logger = logging.getLogger(__name__)


class DependencySection(Enum):
    """Descriptor section a dependency was declared in."""

    PROD = "prod"
    DEV = "dev"
    PEER = "peer"


@dataclass(frozen=True)
class ResolvedDependency:
    """One resolution entry: ``{"resolved": "1.1.0", "prod": true}``."""

    resolved: str | None
    section: DependencySection | None = None

    @classmethod
    def from_record(cls, record: Any) -> ResolvedDependency:
        if isinstance(record, str):
            return cls(resolved=record)
        if not isinstance(record, Mapping):
            return cls(resolved=None)

        section = next((s for s in DependencySection if record.get(s.value)), None)
        resolved = record.get("resolved")
        return cls(resolved=str(resolved) if resolved is not None else None, section=section)


class DependencyResolutionMap:
    """Resolutions for one consumer, extended in memory by wildcard matches."""

    def __init__(self, entries: dict[str, ResolvedDependency] | None = None, source: str = "none") -> None:
        self._entries = entries or {}
        self.source = source

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any], source: str) -> DependencyResolutionMap:
        return cls({name: ResolvedDependency.from_record(record) for name, record in raw.items()}, source=source)

    def get(self, name: str) -> ResolvedDependency | None:
        return self._entries.get(name)

    def remember(self, name: str, version: str) -> None:
        """Record a dynamically matched version. Never written back to disk."""
        self._entries[name] = ResolvedDependency(resolved=version)

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"DependencyResolutionMap({self.source}, {len(self._entries)} entries)"


class ResolutionMapProvider:
    """Chooses and caches the resolution map for each requester descriptor."""

    def __init__(self, layout: StoreLayout = DEFAULT_LAYOUT) -> None:
        self.layout = layout
        self._by_descriptor: dict[Path | None, DependencyResolutionMap] = {}

    def resolutions_for(
        self, context: TopDirContext, descriptor: PackageDescriptor | None
    ) -> DependencyResolutionMap:
        """Get the resolution map that applies to ``descriptor``.

        Finding no source at all disables flat mode for the context's root.

        Args:
            context: Store root context of the requester
            descriptor: Nearest descriptor of the requester

        Returns:
            DependencyResolutionMap, empty when no source applies

        Raises:
            FlatModeViolationError: No source found but the root is already in flat mode
        """
        if descriptor is None:
            return DependencyResolutionMap()

        key = descriptor.directory
        if key in self._by_descriptor:
            return self._by_descriptor[key]

        resolutions = self._find_source(context, descriptor)
        if resolutions is None:
            context.store_root.disable_flat_mode(
                f"no dependency resolutions for {descriptor.name or descriptor.directory}"
            )
            return DependencyResolutionMap()

        self._by_descriptor[key] = resolutions
        return resolutions

    def _find_source(self, context: TopDirContext, descriptor: PackageDescriptor) -> DependencyResolutionMap | None:
        if descriptor.explicit_resolutions is not None:
            return DependencyResolutionMap.from_raw(descriptor.explicit_resolutions, source="descriptor")

        if context.linked is not None and context.linked.resolutions is not None:
            logger.debug(f"[flat:resolutions] using linked resolutions from {context.linked.marker_file}")
            return DependencyResolutionMap.from_raw(context.linked.resolutions, source="linked")

        return self.shared_resolutions(context)

    def shared_resolutions(self, context: TopDirContext) -> DependencyResolutionMap | None:
        """Load the root's shared resolution file once.

        Raises:
            json.JSONDecodeError: The resolution file is not valid JSON
        """
        root = context.store_root
        if not root.shared_resolutions_checked:
            resolution_file = root.directory / self.layout.store_dir / self.layout.resolutions_file
            if resolution_file.is_file():
                raw = json.loads(resolution_file.read_text(encoding="utf-8"))
                root.shared_resolutions = DependencyResolutionMap.from_raw(raw, source="shared")
                logger.debug(f"[flat:resolutions] loaded {resolution_file}")
            root.shared_resolutions_checked = True
        return root.shared_resolutions

    def resolved_version(
        self,
        context: TopDirContext,
        descriptor: PackageDescriptor | None,
        name: str,
        versions: VersionSet,
    ) -> str | None:
        """Look up the recorded version of ``name`` for a requester.

        A missing entry, or one whose version is no longer installed, is
        replaced by the latest installed version unless the root is in legacy mode.

        Args:
            context: Store root context of the requester
            descriptor: Nearest descriptor of the requester
            name: Canonical module name
            versions: Installed versions of the module

        Returns:
            Resolved version, or None
        """
        resolutions = self.resolutions_for(context, descriptor)
        entry = resolutions.get(name)
        if entry is not None and entry.resolved in versions:
            return entry.resolved

        if entry is not None:
            logger.debug(f"[flat:resolutions] stale resolution {name}@{entry.resolved}, matching latest")

        if descriptor is None or context.flat_mode is FlatMode.DISABLED:
            return None

        resolved = latest_matching("*", versions)
        if resolved is not None:
            resolutions.remember(name, resolved)
        return resolved
