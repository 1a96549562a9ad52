"""Version registry and positional-wildcard version matching.

Matching is deliberately simple: a constraint is a dot-separated pattern where
``x``, ``X`` and ``*`` match any component and missing trailing components
match anything. Ranges such as ``^1.2.0`` or ``>=2`` are not understood.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from dataclasses import field
from functools import cmp_to_key
from pathlib import Path

import semantic_version

from .descriptor import DescriptorCache

logger = logging.getLogger(__name__)

_SEMVER_RE = re.compile(
    r"\bv?(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    r"(?:-[\da-z\-]+(?:\.[\da-z\-]+)*)?"
    r"(?:\+[\da-z\-]+(?:\.[\da-z\-]+)*)?\b",
    re.IGNORECASE,
)

_WILDCARDS = ("x", "X", "*")


def _is_any(component: str) -> bool:
    return not component or component in _WILDCARDS


def _lexical(a: str, b: str) -> int:
    return (a > b) - (a < b)


def _parse_semver(version: str) -> semantic_version.Version | None:
    match = _SEMVER_RE.search(version)
    if match is None:
        return None
    try:
        return semantic_version.Version(match.group(0).lstrip("vV"))
    except ValueError:
        return None


def compare_versions(a: str, b: str) -> int:
    """Order two version strings.

    The first semver-shaped substring of each (a leading ``v`` is tolerated)
    is compared with semver precedence, so a prerelease sorts before its
    release and build metadata is ignored. Strings without one compare
    lexicographically.

    Returns:
        -1, 0 or 1

    Examples:
        >>> compare_versions("1.9.0", "1.10.0")
        -1
        >>> compare_versions("v2.0.0", "1.999.0")
        1
        >>> compare_versions("1.0.0-beta", "1.0.0")
        -1
    """
    if a == b:
        return 0

    parsed_a = _parse_semver(a)
    parsed_b = _parse_semver(b)
    if parsed_a is not None and parsed_b is not None:
        if parsed_a < parsed_b:
            return -1
        if parsed_a > parsed_b:
            return 1
        return 0

    return _lexical(a, b)


version_key = cmp_to_key(compare_versions)


def matches(constraint: str, version: str) -> bool:
    """Check ``version`` against a positional-wildcard constraint.

    Examples:
        >>> matches("2.x.5", "2.1.5")
        True
        >>> matches("3", "3.9.12")
        True
        >>> matches("3", "2.3")
        False
    """
    if _is_any(constraint):
        return True

    wanted = constraint.split(".")
    for index, component in enumerate(version.split(".")):
        if index >= len(wanted):
            return True
        if not _is_any(wanted[index]) and wanted[index] != component:
            return False

    return True


@dataclass
class VersionSet:
    """Versions available for one module.

    Attributes:
        all: Versions in ascending order
        default: Version occupying the module's unversioned location
    """

    all: list[str] = field(default_factory=list)
    default: str | None = None

    def __contains__(self, version: object) -> bool:
        return version in self.all

    def __bool__(self) -> bool:
        return bool(self.all)


def latest_matching(constraint: str, versions: VersionSet) -> str | None:
    """Return the greatest version in ``versions`` that satisfies ``constraint``."""
    matched = [version for version in versions.all if matches(constraint, version)]
    logger.debug(f"[flat:versions] matched {matched} for '{constraint or '*'}'")
    return matched[-1] if matched else None


class VersionRegistry:
    """Enumerates the versions installed for each module directory."""

    def __init__(self, descriptors: DescriptorCache) -> None:
        self.descriptors = descriptors
        self.layout = descriptors.layout
        self._cache: dict[Path, VersionSet] = {}

    def versions_of(self, module_dir: Path) -> VersionSet:
        """List the versions installed under ``module_dir``.

        Non-default versions are the entries of the versions directory. The
        default version comes from the descriptor at the unversioned location.

        Args:
            module_dir: ``<root>/<store>/<name>``

        Returns:
            VersionSet sorted ascending; empty when the module is not installed
        """
        if module_dir in self._cache:
            return self._cache[module_dir]

        if not module_dir.is_dir():
            self._cache[module_dir] = VersionSet()
            return self._cache[module_dir]

        versions_dir = module_dir / self.layout.versions_dir
        names = [entry.name for entry in versions_dir.iterdir() if entry.is_dir()] if versions_dir.is_dir() else []

        default = None
        descriptor = self.descriptors.read(module_dir)
        if descriptor is not None and descriptor.default_version:
            default = descriptor.default_version
            names.append(default)

        version_set = VersionSet(all=sorted(set(names), key=version_key), default=default)
        logger.debug(f"[flat:versions] {module_dir}: {version_set.all} (default {default})")
        self._cache[module_dir] = version_set
        return version_set
