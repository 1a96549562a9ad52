"""Package descriptor reading with a process-lifetime cache.

Only the handful of descriptor fields the resolver needs are projected.
Both positive and negative reads are cached; a directory missing from the
cache has simply not been checked yet.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Collection
from pathlib import Path
from typing import Any

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic import model_validator

from .layout import DEFAULT_LAYOUT
from .layout import StoreLayout
from .walker import NOT_FOUND
from .walker import search_up

logger = logging.getLogger(__name__)


class PackageDescriptor(BaseModel):
    """Projection of a package descriptor file.

    Attributes:
        name: Package name
        version: Package version
        dependencies: Declared dependency ranges
        bundled_dependencies: Names carried privately, or True for all dependencies
        explicit_resolutions: Exact versions chosen for this package's dependencies
        default_version: Version occupying the module's unversioned location
        fallback_to_default: Opt-in to using the default version when nothing resolves
        main: Entry file used when the package directory itself is requested
        directory: Directory the descriptor was read from
    """

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    name: str | None = None
    version: str | None = None
    dependencies: dict[str, Any] = Field(default_factory=dict)
    bundled_dependencies: list[str] | bool = Field(default_factory=list, alias="bundledDependencies")
    explicit_resolutions: dict[str, Any] | None = Field(default=None, alias="_depResolutions")
    default_version: str | None = Field(default=None, alias="_flatVersion")
    fallback_to_default: bool = Field(default=False, alias="_flatUseDefault")
    main: str | None = None
    directory: Path | None = Field(default=None, exclude=True)

    @model_validator(mode="before")
    @classmethod
    def _normalize(cls, data: Any) -> Any:
        """Drop null fields and accept the ``bundleDependencies`` spelling."""
        if not isinstance(data, dict):
            return data
        data = {key: value for key, value in data.items() if value is not None}
        if "bundledDependencies" not in data and "bundleDependencies" in data:
            data["bundledDependencies"] = data["bundleDependencies"]
        return data

    @property
    def bundled_exceptions(self) -> frozenset[str]:
        """Names excluded from flat resolution."""
        if self.bundled_dependencies is True:
            return frozenset(self.dependencies)
        if not self.bundled_dependencies:
            return frozenset()
        return frozenset(self.bundled_dependencies)

    def bundles(self, name: str) -> bool:
        return name in self.bundled_exceptions


class DescriptorCache:
    """Memoized descriptor reads keyed by directory."""

    def __init__(self, layout: StoreLayout = DEFAULT_LAYOUT) -> None:
        self.layout = layout
        self._cache: dict[Path, PackageDescriptor | None] = {}

    def read(self, directory: Path) -> PackageDescriptor | None:
        """Read the descriptor in ``directory``.

        Args:
            directory: Directory that may hold a descriptor file

        Returns:
            The projected descriptor, or None when the directory has none

        Raises:
            json.JSONDecodeError: Descriptor file is not valid JSON
            pydantic.ValidationError: Descriptor has fields of the wrong shape
        """
        if directory in self._cache:
            return self._cache[directory]

        descriptor_file = directory / self.layout.descriptor_file
        if not descriptor_file.is_file():
            self._cache[directory] = None
            return None

        data = json.loads(descriptor_file.read_text(encoding="utf-8"))
        descriptor = PackageDescriptor.model_validate(data).model_copy(update={"directory": directory})
        logger.debug(f"[flat:descriptor] read {descriptor_file} ({descriptor.name}@{descriptor.version})")
        self._cache[directory] = descriptor
        return descriptor

    def find_nearest(
        self,
        start: Path,
        stop_dir: Path | None = None,
        stop_names: Collection[str] = (),
    ) -> PackageDescriptor | None:
        """Find the closest descriptor at or above ``start``.

        Args:
            start: Directory to start from
            stop_dir: Directory at which to give up (inclusive)
            stop_names: Directory base names at which to give up (inclusive)

        Returns:
            Nearest descriptor, or None
        """

        def probe(directory: Path):
            descriptor = self.read(directory)
            return descriptor if descriptor is not None else NOT_FOUND

        found = search_up(start, probe, stop_dir=stop_dir, stop_names=stop_names)
        return None if found is NOT_FOUND else found
