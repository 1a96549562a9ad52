"""Upward directory traversal shared by the locator and descriptor lookups."""

from collections.abc import Callable
from collections.abc import Collection
from pathlib import Path
from typing import Any


class _NotFound:
    """Sentinel returned when a search ends without a result."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "NOT_FOUND"


NOT_FOUND: Any = _NotFound()


def search_up(
    start: Path,
    probe: Callable[[Path], Any],
    stop_dir: Path | None = None,
    stop_names: Collection[str] = (),
) -> Any:
    """Walk from ``start`` towards the filesystem root, probing each directory.

    The probe returns ``NOT_FOUND`` to keep walking or any other value to stop
    with that result. Each directory is probed before the stop conditions are
    checked, so ``stop_dir`` and directories named in ``stop_names`` are probed
    themselves and then end the walk.

    Args:
        start: First directory to probe
        probe: Callable invoked with each directory
        stop_dir: Directory at which to stop (inclusive)
        stop_names: Base names at which to stop (inclusive)

    Returns:
        The first probe result other than ``NOT_FOUND``, else ``NOT_FOUND``
    """
    current = start
    while True:
        result = probe(current)
        if result is not NOT_FOUND:
            return result

        if stop_dir is not None and current == stop_dir:
            break
        if current.name in stop_names:
            break

        parent = current.parent
        if parent == current:
            break
        current = parent

    return NOT_FOUND


def path_is_inside(path: Path, potential_parent: Path) -> bool:
    """Check whether ``path`` is ``potential_parent`` or lies beneath it.

    Purely lexical. Symlinks are not followed.
    """
    if path == potential_parent:
        return True
    return potential_parent in path.parents
