"""Shared fixtures: flat stores built on disk under tmp_path."""

import json
from pathlib import Path
from typing import Any

import pytest

from flatmod import FlatModuleResolver
from flatmod import Requester


def write_json(path: Path, data: Any) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2) + "\n")
    return path


def write_file(path: Path, content: str = "module.exports = {};\n") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    return path


class FlatStore:
    """Builds a flat store under ``root/node_modules``."""

    def __init__(self, root: Path):
        self.root = root
        self.store = root / "node_modules"
        self.store.mkdir(parents=True, exist_ok=True)

    def add_module(self, name: str, version: str, default: bool = False, **descriptor: Any) -> Path:
        """Install ``name@version`` and return the module's directory."""
        if default:
            module_dir = self.store / name
            descriptor.setdefault("_flatVersion", version)
        else:
            module_dir = self.store / name / "__fv_" / version / name
        write_json(module_dir / "package.json", {"name": name, "version": version, **descriptor})
        write_file(module_dir / "index.js", f"// {name}@{version}\n")
        return module_dir

    def write_resolutions(self, resolutions: dict[str, str]) -> Path:
        return write_json(
            self.store / "__dep_resolutions.json",
            {name: {"resolved": version, "prod": True} for name, version in resolutions.items()},
        )

    def write_app(self, **descriptor: Any) -> Path:
        data = {"name": "app", "version": "1.0.0", **descriptor}
        write_json(self.root / "package.json", data)
        return write_file(self.root / "index.js", "require('foo');\n")


@pytest.fixture
def flat_app(tmp_path: Path) -> FlatStore:
    """An app with foo 1.0.0 / 1.1.0 (default), @scope/bar 2.0.1 and car 1.0.0.

    Creates:
    - app/package.json, app/index.js, app/lib/lib2/index.js
    - app/node_modules/__dep_resolutions.json  (foo -> 1.1.0, @scope/bar -> 2.0.1, car -> 1.0.0)
    - app/node_modules/foo/                    (1.1.0, default)
    - app/node_modules/foo/__fv_/1.0.0/foo/
    - app/node_modules/@scope/bar/             (2.0.1, default, lib/util.js)
    - app/node_modules/car/__fv_/1.0.0/car/    (depends on foo 1.0.0)
    """
    store = FlatStore(tmp_path / "app")
    store.write_app(dependencies={"foo": "^1.0.0", "@scope/bar": "2.x", "car": "1"})
    write_file(store.root / "lib" / "lib2" / "index.js", "require('foo');\n")

    store.add_module("foo", "1.1.0", default=True)
    store.add_module("foo", "1.0.0")
    bar = store.add_module("@scope/bar", "2.0.1", default=True)
    write_file(bar / "lib" / "util.js", "module.exports = 'bar';\n")
    car = store.add_module("car", "1.0.0", _depResolutions={"foo": {"resolved": "1.0.0", "prod": True}})
    write_file(car / "lib" / "index.js", "require('foo');\n")

    store.write_resolutions({"foo": "1.1.0", "@scope/bar": "2.0.1", "car": "1.0.0"})
    return store


@pytest.fixture
def resolver(flat_app: FlatStore) -> FlatModuleResolver:
    """Resolver whose working directory is the app root."""
    return FlatModuleResolver(cwd=lambda: flat_app.root)


@pytest.fixture
def app_requester(flat_app: FlatStore) -> Requester:
    return Requester.for_file(flat_app.root / "index.js")
