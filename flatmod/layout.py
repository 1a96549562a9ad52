"""Store layout - the canonical on-disk format of a flat dependency store.

Layout (format version 1):

    <root>/<store_dir>/<name>/...                              default version
    <root>/<store_dir>/<name>/<versions_dir>/<version>/<name>/  any other version
    <root>/<store_dir>/<resolutions_file>                      shared resolutions
    <linked>/<store_dir>/<linked_from_file>                    linked module marker
"""

from __future__ import annotations

import base64
import hashlib
from typing import Literal

from pydantic import BaseModel
from pydantic import ConfigDict

STORE_FORMAT_VERSION = 1

NonSemverKind = Literal["symlink", "file", "git", "http"]


class StoreLayout(BaseModel):
    """Names of the files and directories that make up a flat store."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    format_version: Literal[1] = STORE_FORMAT_VERSION
    store_dir: str = "node_modules"
    descriptor_file: str = "package.json"
    versions_dir: str = "__fv_"
    resolutions_file: str = "__dep_resolutions.json"
    linked_from_file: str = "__linked_from.json"
    interactive_marker: str = "<repl>"
    extensions: tuple[str, ...] = (".js", ".json", ".node")


DEFAULT_LAYOUT = StoreLayout()


def non_semver_version_id(kind: NonSemverKind, target: str) -> str:
    """Build the version identifier for a module not installed from a semver range.

    Args:
        kind: How the module was installed (symlink, file, git, http)
        target: Full target path or URL

    Returns:
        Identifier such as ``v_symlink_<digest>``

    Example:
        >>> non_semver_version_id("symlink", "/work/zoo").startswith("v_symlink_")
        True
    """
    digest = base64.urlsafe_b64encode(hashlib.md5(target.encode()).digest()).decode()[:22]
    if kind in ("symlink", "file"):
        return f"v_{kind}_{digest}"
    return f"v_{kind}url_{digest}"
