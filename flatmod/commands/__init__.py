"""CLI command implementations."""

from .resolve import resolve_cmd
from .store import topdir_cmd
from .store import versions_cmd

__all__ = ["resolve_cmd", "topdir_cmd", "versions_cmd"]
