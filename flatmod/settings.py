"""Settings for flatmod.

Scope-aware YAML settings, most specific wins:
1. local (.flatmod/settings.local.yaml) - machine-specific
2. project (.flatmod/settings.yaml) - committed with the project
3. global (~/.flatmod/settings.yaml) - user defaults

Environment variables override all files:
    FLATMOD_STORE_DIR     store directory name
    FLATMOD_VERSIONS_DIR  versions directory name
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from .layout import StoreLayout

logger = logging.getLogger(__name__)

_ENV_LAYOUT_OVERRIDES = {
    "FLATMOD_STORE_DIR": "store_dir",
    "FLATMOD_VERSIONS_DIR": "versions_dir",
}


@dataclass
class SettingsPaths:
    """Standard paths for settings files."""

    global_settings: Path
    project_settings: Path
    local_settings: Path

    @classmethod
    def default(cls) -> SettingsPaths:
        """Create default paths for the standard flatmod layout."""
        return cls(
            global_settings=Path.home() / ".flatmod" / "settings.yaml",
            project_settings=Path.cwd() / ".flatmod" / "settings.yaml",
            local_settings=Path.cwd() / ".flatmod" / "settings.local.yaml",
        )


class FlatmodSettings:
    """Settings manager with scope-aware merging."""

    def __init__(self, paths: SettingsPaths | None = None, environ: dict[str, str] | None = None) -> None:
        self.paths = paths or SettingsPaths.default()
        self.environ = os.environ if environ is None else environ

    def get_merged_settings(self) -> dict[str, Any]:
        """Load and merge settings from all scopes."""
        result: dict[str, Any] = {}
        for path in [self.paths.global_settings, self.paths.project_settings, self.paths.local_settings]:
            if path.exists():
                try:
                    with open(path) as f:
                        content = yaml.safe_load(f) or {}
                except (OSError, yaml.YAMLError) as e:
                    logger.warning(f"Skipping malformed settings file {path}: {e}")
                    continue
                if not isinstance(content, dict):
                    logger.warning(f"Skipping malformed settings file {path}: expected a mapping")
                    continue
                result = self._deep_merge(result, content)
        return result

    # ----- Store layout -----

    def get_layout(self) -> StoreLayout:
        """Build the store layout from merged settings and environment overrides.

        Raises:
            pydantic.ValidationError: Unknown keys or an unsupported format_version
        """
        values = self._section("layout")
        for env_key, field_name in _ENV_LAYOUT_OVERRIDES.items():
            if env_value := self.environ.get(env_key):
                values[field_name] = env_value
        return StoreLayout.model_validate(values)

    # ----- Logging -----

    def get_logging(self) -> dict[str, Any]:
        """Get the logging section (``path`` and ``level``)."""
        return self._section("logging")

    def _section(self, name: str) -> dict[str, Any]:
        section = self.get_merged_settings().get(name) or {}
        if not isinstance(section, dict):
            logger.warning(f"Ignoring settings section '{name}': expected a mapping")
            return {}
        return dict(section)

    def _deep_merge(self, base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
        """Deep merge two dicts, overlay wins."""
        result = base.copy()
        for key, value in overlay.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value
        return result


def get_settings() -> FlatmodSettings:
    """Get a settings instance with default paths."""
    return FlatmodSettings()
