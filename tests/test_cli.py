"""Tests for the flatmod command line."""

import logging
from unittest.mock import patch

import pytest
from click.testing import CliRunner
from rich.console import Console

from flatmod.logging_setup import JsonlHandler
from flatmod.main import cli


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def in_app(flat_app, tmp_path, monkeypatch):
    """Run commands from the app root with isolated settings and a wide console."""
    monkeypatch.chdir(flat_app.root)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.delenv("FLATMOD_STORE_DIR", raising=False)
    monkeypatch.delenv("FLATMOD_VERSIONS_DIR", raising=False)

    root = logging.getLogger()
    saved_handlers = list(root.handlers)
    saved_level = root.level
    wide = Console(width=400)
    with (
        patch("flatmod.commands.resolve.console", wide),
        patch("flatmod.commands.store.console", wide),
    ):
        yield flat_app
    for handler in list(root.handlers):
        if handler not in saved_handlers:
            root.removeHandler(handler)
    root.setLevel(saved_level)


def invoke(runner, tmp_path, *args):
    return runner.invoke(cli, ["--log-path", str(tmp_path / "log.jsonl"), *args])


class TestResolveCommand:
    def test_default_version(self, runner, in_app, tmp_path):
        result = invoke(runner, tmp_path, "resolve", "foo")

        assert result.exit_code == 0, result.output
        assert str(in_app.store / "foo") in result.output
        assert str(in_app.store / "foo" / "index.js") in result.output

    def test_versioned_request_from_file(self, runner, in_app, tmp_path):
        result = invoke(runner, tmp_path, "resolve", "foo@1.0", "--from", "lib/lib2/index.js")

        assert result.exit_code == 0, result.output
        assert str(in_app.store / "foo" / "__fv_" / "1.0.0" / "foo" / "index.js") in result.output

    def test_missing_module(self, runner, in_app, tmp_path):
        result = invoke(runner, tmp_path, "resolve", "missing")

        assert result.exit_code == 1
        assert "No candidate directories" in result.output
        assert "Cannot find module 'missing'" in result.output

    def test_invalid_layout_reported(self, runner, in_app, tmp_path):
        (in_app.root / ".flatmod").mkdir()
        (in_app.root / ".flatmod" / "settings.yaml").write_text("layout:\n  format_version: 7\n")

        result = invoke(runner, tmp_path, "resolve", "foo")

        assert result.exit_code == 1
        assert "Error:" in result.output

    def test_markup_in_request_is_printed_verbatim(self, runner, in_app, tmp_path):
        result = invoke(runner, tmp_path, "resolve", "foo[bold]x")

        assert result.exit_code == 1
        assert "Cannot find module 'foo[bold]x'" in result.output

    def test_non_mapping_settings_file_skipped(self, runner, in_app, tmp_path):
        (in_app.root / ".flatmod").mkdir()
        (in_app.root / ".flatmod" / "settings.yaml").write_text("- just\n- a list\n")

        result = invoke(runner, tmp_path, "resolve", "foo")

        assert result.exit_code == 0, result.output
        assert str(in_app.store / "foo" / "index.js") in result.output

    def test_log_file_written(self, runner, in_app, tmp_path):
        invoke(runner, tmp_path, "resolve", "foo")

        assert (tmp_path / "log.jsonl").exists()
        assert any(isinstance(h, JsonlHandler) for h in logging.getLogger().handlers)


class TestStoreCommands:
    def test_versions_lists_default_marker(self, runner, in_app, tmp_path):
        result = invoke(runner, tmp_path, "versions", "foo")

        assert result.exit_code == 0, result.output
        assert "1.1.0" in result.output
        assert "1.0.0" in result.output
        assert "✓" in result.output

    def test_versions_unknown_module(self, runner, in_app, tmp_path):
        result = invoke(runner, tmp_path, "versions", "nope")

        assert result.exit_code == 1
        assert "No versions of 'nope'" in result.output

    def test_topdir_reports_root(self, runner, in_app, tmp_path):
        result = invoke(runner, tmp_path, "topdir", "lib/lib2")

        assert result.exit_code == 0, result.output
        assert f"Root: {in_app.root}" in result.output
        assert "Linked: no" in result.output
        assert "3 entries" in result.output

    def test_topdir_without_store(self, runner, in_app, tmp_path):
        elsewhere = tmp_path / "elsewhere"
        elsewhere.mkdir()

        result = invoke(runner, tmp_path, "topdir", str(elsewhere))

        assert result.exit_code == 1
        assert "No node_modules directory serves" in result.output


def test_help_without_command(runner, in_app, tmp_path):
    result = invoke(runner, tmp_path)

    assert result.exit_code == 0
    assert "resolve" in result.output
    assert "versions" in result.output
