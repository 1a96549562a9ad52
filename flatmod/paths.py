"""CLI dependency injection helpers.

Libraries receive their layout via injection; this module provides the CLI's choices.
"""

from .layout import StoreLayout
from .resolver import FlatModuleResolver
from .settings import FlatmodSettings
from .settings import get_settings


def create_settings() -> FlatmodSettings:
    """Create the settings manager with CLI conventions."""
    return get_settings()


def create_resolver(layout: StoreLayout | None = None) -> FlatModuleResolver:
    """Create a resolver using the configured store layout.

    Raises:
        pydantic.ValidationError: Configured layout is invalid
    """
    if layout is None:
        layout = create_settings().get_layout()
    return FlatModuleResolver(layout=layout)
