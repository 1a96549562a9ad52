"""flatmod - resolve module requests against a flat dependency store.

Public API:
- FlatModuleResolver: Request -> directory resolution with legacy fallback
- ModuleHost, install, uninstall: Register a resolver as the active one
- Requester, parse_request: Request inputs
- compare_versions, matches, latest_matching: Version ordering and matching
- StoreLayout: The on-disk store format
"""

from .descriptor import DescriptorCache
from .descriptor import PackageDescriptor
from .errors import FlatModeViolationError
from .errors import FlatModuleError
from .errors import ModuleNotFoundError
from .errors import ResolverAlreadyInstalledError
from .errors import ResolverNotInstalledError
from .host import ModuleHost
from .host import get_host
from .host import install
from .host import uninstall
from .layout import DEFAULT_LAYOUT
from .layout import StoreLayout
from .layout import non_semver_version_id
from .legacy import LegacyResolver
from .legacy import NestedModuleResolver
from .request import ModuleRequest
from .request import Requester
from .request import parse_request
from .resolutions import DependencyResolutionMap
from .resolver import FlatModuleResolver
from .topdir import FlatMode
from .topdir import TopDirContext
from .versions import VersionRegistry
from .versions import VersionSet
from .versions import compare_versions
from .versions import latest_matching
from .versions import matches

__all__ = [
    "DEFAULT_LAYOUT",
    "DependencyResolutionMap",
    "DescriptorCache",
    "FlatMode",
    "FlatModeViolationError",
    "FlatModuleError",
    "FlatModuleResolver",
    "LegacyResolver",
    "ModuleHost",
    "ModuleNotFoundError",
    "ModuleRequest",
    "NestedModuleResolver",
    "PackageDescriptor",
    "Requester",
    "ResolverAlreadyInstalledError",
    "ResolverNotInstalledError",
    "StoreLayout",
    "TopDirContext",
    "VersionRegistry",
    "VersionSet",
    "compare_versions",
    "get_host",
    "install",
    "latest_matching",
    "matches",
    "non_semver_version_id",
    "parse_request",
    "uninstall",
]
