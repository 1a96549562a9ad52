"""Tests for store root location and the flat-mode state machine."""

from pathlib import Path

import pytest

from conftest import write_json
from flatmod.errors import FlatModeViolationError
from flatmod.topdir import FlatMode
from flatmod.topdir import StoreRoot
from flatmod.topdir import TopDirLocator


def test_origin_with_store_is_root(flat_app):
    locator = TopDirLocator(cwd=lambda: flat_app.root)

    context = locator.locate(flat_app.root)

    assert context is not None
    assert context.root == flat_app.root
    assert context.linked is None


def test_origin_inside_installed_module(flat_app):
    locator = TopDirLocator(cwd=lambda: flat_app.root)
    origin = flat_app.store / "car" / "__fv_" / "1.0.0" / "car" / "lib"

    context = locator.locate(origin)

    assert context is not None
    assert context.root == flat_app.root


def test_origin_below_root_searches_up(flat_app):
    locator = TopDirLocator(cwd=lambda: flat_app.root)

    context = locator.locate(flat_app.root / "lib" / "lib2")

    assert context is not None
    assert context.root == flat_app.root


def test_origin_outside_cwd_searches_up(flat_app, tmp_path):
    other = tmp_path / "elsewhere"
    other.mkdir()
    locator = TopDirLocator(cwd=lambda: other)

    context = locator.locate(flat_app.root / "lib" / "lib2")

    assert context is not None
    assert context.root == flat_app.root


def test_no_store_found(tmp_path):
    origin = tmp_path / "nothing" / "here"
    origin.mkdir(parents=True)
    locator = TopDirLocator(cwd=lambda: tmp_path)

    assert locator.locate(origin) is None


def test_context_cached_per_origin(flat_app):
    locator = TopDirLocator(cwd=lambda: flat_app.root)
    first = locator.locate(flat_app.root / "lib")

    assert locator.locate(flat_app.root / "lib") is first


def test_origins_share_store_root_state(flat_app):
    locator = TopDirLocator(cwd=lambda: flat_app.root)
    a = locator.locate(flat_app.root)
    b = locator.locate(flat_app.root / "lib" / "lib2")

    assert a is not b
    assert a.store_root is b.store_root


def test_linked_module_redirects_to_cwd(flat_app, tmp_path):
    linked = tmp_path / "zoo"
    write_json(linked / "package.json", {"name": "zoo", "version": "0.1.0"})
    write_json(
        linked / "node_modules" / "__linked_from.json",
        {str(flat_app.root): {"_depResolutions": {"foo": {"resolved": "1.0.0"}}}},
    )
    locator = TopDirLocator(cwd=lambda: flat_app.root)

    context = locator.locate(linked / "lib")

    assert context is not None
    assert context.root == flat_app.root
    assert context.linked is not None
    assert context.linked.resolutions == {"foo": {"resolved": "1.0.0"}}


def test_linked_marker_for_other_consumer_is_ignored(flat_app, tmp_path):
    linked = tmp_path / "fox"
    write_json(linked / "node_modules" / "__linked_from.json", {"/some/other/app": {}})
    locator = TopDirLocator(cwd=lambda: flat_app.root)

    context = locator.locate(linked)

    assert context is not None
    assert context.root == linked
    assert context.linked is None


def test_flat_mode_transitions():
    root = StoreRoot(directory=Path("/app"))
    assert root.flat_mode is FlatMode.UNKNOWN

    root.enable_flat_mode()
    root.enable_flat_mode()
    assert root.flat_mode is FlatMode.ENABLED

    with pytest.raises(FlatModeViolationError) as exc_info:
        root.disable_flat_mode("foo is bundled")
    assert exc_info.value.root == Path("/app")
    assert root.flat_mode is FlatMode.ENABLED


def test_disabled_mode_is_sticky():
    root = StoreRoot(directory=Path("/app"))
    root.disable_flat_mode("no resolutions")
    root.disable_flat_mode("again")
    root.enable_flat_mode()

    assert root.flat_mode is FlatMode.DISABLED
