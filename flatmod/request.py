"""Request parsing - split ``name@constraint/sub/path`` into name and constraint."""

import os
from dataclasses import dataclass
from pathlib import Path

from .descriptor import PackageDescriptor


@dataclass(frozen=True)
class ModuleRequest:
    """A symbolic module request.

    Attributes:
        name: Module name, including any sub-path after the version constraint
        version_constraint: Explicit constraint, empty when none was given
    """

    name: str
    version_constraint: str = ""

    @property
    def has_constraint(self) -> bool:
        return bool(self.version_constraint)


def parse_request(raw: str) -> ModuleRequest:
    """Parse a raw request string.

    The first ``@`` after position 0 starts the constraint, so scoped names
    like ``@scope/pkg`` keep their leading ``@``. The constraint ends at the
    next ``/``; anything from there on is a sub-path and is reattached to the name.

    Examples:
        >>> parse_request("foo@1.x/lib/a")
        ModuleRequest(name='foo/lib/a', version_constraint='1.x')
        >>> parse_request("@scope/pkg")
        ModuleRequest(name='@scope/pkg', version_constraint='')
    """
    at = raw.find("@", 1)
    if at < 0:
        return ModuleRequest(name=raw)

    head = raw[:at]
    sep = raw.find("/", at)
    if sep > at:
        return ModuleRequest(name=head + raw[sep:], version_constraint=raw[at + 1 : sep])
    return ModuleRequest(name=head, version_constraint=raw[at + 1 :])


def strip_version(raw: str) -> str:
    """Return the request with any version constraint removed."""
    return parse_request(raw).name


def is_relative_request(request: str) -> bool:
    """Check whether a request is relative to the requester (``.``, ``..``, ``./x``, ``../x``)."""
    if request in (".", ".."):
        return True

    if request.startswith("./") or request.startswith("../"):
        return True

    if os.sep != "/":
        return request.startswith("." + os.sep) or request.startswith(".." + os.sep)

    return False


@dataclass(eq=False)
class Requester:
    """The file a request is made from.

    Attributes:
        filename: Absolute path of the requesting file, None for an interactive session
        id: Identifier of the requesting module (``<repl>`` for an interactive session)
        descriptor: Nearest package descriptor, filled in on first flat resolution
    """

    filename: Path | None = None
    id: str = ""
    descriptor: PackageDescriptor | None = None

    @property
    def directory(self) -> Path | None:
        return self.filename.parent if self.filename is not None else None

    @classmethod
    def for_file(cls, filename: str | Path) -> "Requester":
        path = Path(os.path.abspath(filename))
        return cls(filename=path, id=str(path))
