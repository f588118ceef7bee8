"""Integration tests for profile, provider, config and snapshot commands."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml
from typer.testing import CliRunner

from cloudsweep import __version__
from cloudsweep.cli.main import app, parse_settings
from cloudsweep.errors import ConfigError
from tests.fixtures.workspace import create_workspace


@pytest.fixture
def runner() -> CliRunner:
    """Create CLI test runner."""
    return CliRunner()


@pytest.fixture
def config_path(tmp_path: Path) -> Path:
    path, _ = create_workspace(tmp_path)
    return path


def invoke(runner: CliRunner, config_path: Path, *args: str, **kwargs):
    return runner.invoke(app, ["--config", str(config_path), *args], **kwargs)


class TestVersionCommand:
    def test_version(self, runner: CliRunner) -> None:
        result = runner.invoke(app, ["version"])

        assert result.exit_code == 0
        assert f"cloudsweep version {__version__}" in result.output


class TestProfileCommands:
    """Test suite for the profile sub-commands."""

    def test_list(self, runner: CliRunner, config_path: Path) -> None:
        result = invoke(runner, config_path, "profile", "list")

        assert result.exit_code == 0
        assert "local" in result.output

    def test_list_empty(self, runner: CliRunner, tmp_path: Path) -> None:
        result = invoke(runner, tmp_path / "missing.yaml", "profile", "list")

        assert result.exit_code == 0
        assert "No profile configured" in result.output

    def test_describe(self, runner: CliRunner, config_path: Path) -> None:
        result = invoke(runner, config_path, "profile", "describe", "local")

        assert result.exit_code == 0
        assert "profile: local" in result.output
        assert "provider: fs" in result.output

    def test_new_and_remove(self, runner: CliRunner, config_path: Path, tmp_path: Path) -> None:
        result = invoke(runner, config_path, "profile", "new", "fs", "other", "--set", f"path={tmp_path}")

        assert result.exit_code == 0, result.output
        saved = yaml.safe_load(config_path.read_text())
        assert saved["profiles"][-1] == {"name": "other", "provider": "fs", "config": {"path": str(tmp_path)}}

        result = invoke(runner, config_path, "profile", "remove", "other")

        assert result.exit_code == 0, result.output
        saved = yaml.safe_load(config_path.read_text())
        assert [p["name"] for p in saved["profiles"]] == ["local"]

    def test_new_with_missing_setting(self, runner: CliRunner, config_path: Path) -> None:
        result = invoke(runner, config_path, "profile", "new", "s3", "bucket-store", "--set", "endpoint=http://x")

        assert result.exit_code == 1
        assert "region's name is needed (region)" in result.output

    def test_new_with_unknown_provider(self, runner: CliRunner, config_path: Path) -> None:
        result = invoke(runner, config_path, "profile", "new", "gcp", "cloud")

        assert result.exit_code == 1
        assert "Provider gcp not found" in result.output

    def test_new_duplicate(self, runner: CliRunner, config_path: Path, tmp_path: Path) -> None:
        result = invoke(runner, config_path, "profile", "new", "fs", "local", "--set", f"path={tmp_path}")

        assert result.exit_code == 1
        assert "already exist" in result.output

    def test_test_profile(self, runner: CliRunner, config_path: Path) -> None:
        result = invoke(runner, config_path, "profile", "test", "local")

        assert result.exit_code == 0, result.output
        assert "Authenticated" in result.output

    def test_remove_unknown(self, runner: CliRunner, config_path: Path) -> None:
        result = invoke(runner, config_path, "profile", "remove", "ghost")

        assert result.exit_code == 1
        assert "Profile ghost not found" in result.output

    def test_parse_settings(self) -> None:
        assert parse_settings(["a=1", "b = x=y"]) == {"a": "1", "b": "x=y"}
        assert parse_settings(None) == {}
        with pytest.raises(ConfigError, match="Invalid setting format"):
            parse_settings(["novalue"])


class TestProviderCommands:
    """Test suite for the provider sub-commands."""

    def test_list(self, runner: CliRunner) -> None:
        result = runner.invoke(app, ["provider", "list"])

        assert result.exit_code == 0
        assert result.output.split() == ["fs", "s3"]

    def test_describe(self, runner: CliRunner) -> None:
        result = runner.invoke(app, ["provider", "describe", "s3"])

        assert result.exit_code == 0
        assert result.output.index("object") < result.output.index("bucket")
        assert "sk: secret key" in result.output

    def test_describe_unknown(self, runner: CliRunner) -> None:
        result = runner.invoke(app, ["provider", "describe", "gcp"])

        assert result.exit_code == 1


class TestConfigCommands:
    def test_list(self, runner: CliRunner, config_path: Path) -> None:
        result = invoke(runner, config_path, "config", "list")

        assert result.exit_code == 0, result.output
        assert "log_level" in result.output
        assert "pass_delay" in result.output

    def test_invalid_config(self, runner: CliRunner, tmp_path: Path) -> None:
        path = tmp_path / "broken.yaml"
        path.write_text("profiles: [unclosed\n")

        result = invoke(runner, path, "config", "list")

        assert result.exit_code == 1
        assert "Cannot parse configuration" in result.output


class TestSnapshotCommands:
    """Test suite for the snapshot sub-commands."""

    @pytest.fixture
    def snapshot_taken(self, runner: CliRunner, tmp_path: Path) -> Path:
        config_path, data_dir = create_workspace(tmp_path)
        (data_dir / "a.txt").write_text("a")
        result = invoke(runner, config_path, "snapshot", "new", "base", "local")
        assert result.exit_code == 0, result.output
        return config_path

    def test_new_writes_snapshot(self, snapshot_taken: Path, tmp_path: Path) -> None:
        document = yaml.safe_load((tmp_path / "snapshots" / "base.yaml").read_text())

        assert document["name"] == "base"
        assert document["data"] == [{"profile": "local", "objects": {"file": ["a.txt"]}}]

    def test_new_existing_name(self, runner: CliRunner, snapshot_taken: Path) -> None:
        result = invoke(runner, snapshot_taken, "snapshot", "new", "base", "local")

        assert result.exit_code == 1
        assert "Snapshot base already exist" in result.output

    def test_new_invalid_name(self, runner: CliRunner, config_path: Path) -> None:
        result = invoke(runner, config_path, "snapshot", "new", "bad.name", "local")

        assert result.exit_code == 1
        assert "Invalid snapshot name" in result.output

    def test_new_unknown_profile(self, runner: CliRunner, config_path: Path) -> None:
        result = invoke(runner, config_path, "snapshot", "new", "base", "ghost")

        assert result.exit_code == 1
        assert "Profile ghost not found" in result.output

    def test_list_and_describe(self, runner: CliRunner, snapshot_taken: Path) -> None:
        result = invoke(runner, snapshot_taken, "snapshot", "list")
        assert result.exit_code == 0
        assert "base" in result.output

        result = invoke(runner, snapshot_taken, "snapshot", "describe", "base")
        assert result.exit_code == 0
        assert "name: base" in result.output
        assert "  - local: (1 objects)" in result.output

    def test_remove(self, runner: CliRunner, snapshot_taken: Path, tmp_path: Path) -> None:
        result = invoke(runner, snapshot_taken, "snapshot", "remove", "base")

        assert result.exit_code == 0
        assert not (tmp_path / "snapshots" / "base.yaml").exists()

        result = invoke(runner, snapshot_taken, "snapshot", "remove", "base")
        assert result.exit_code == 1

    def test_update_without_changes(self, runner: CliRunner, snapshot_taken: Path) -> None:
        result = invoke(runner, snapshot_taken, "snapshot", "update", "base")

        assert result.exit_code == 0
        assert "Nothing to add" in result.output

    def test_remove_rejects_path_outside_snapshot_folder(self, runner: CliRunner, snapshot_taken: Path) -> None:
        result = invoke(runner, snapshot_taken, "snapshot", "remove", "../config")

        assert result.exit_code == 1
        assert "Invalid snapshot name" in result.output
        assert snapshot_taken.exists()

    def test_clean_rejects_path_outside_snapshot_folder(self, runner: CliRunner, snapshot_taken: Path) -> None:
        result = invoke(runner, snapshot_taken, "clean", "../config", "--plan")

        assert result.exit_code == 1
        assert "Invalid snapshot name" in result.output

    @pytest.mark.parametrize("command", ["describe", "update", "remove"])
    def test_corrupt_snapshot_reports_error(
        self, runner: CliRunner, config_path: Path, tmp_path: Path, command: str
    ) -> None:
        snapshot_dir = tmp_path / "snapshots"
        snapshot_dir.mkdir(exist_ok=True)
        (snapshot_dir / "bad.yaml").write_text("- just\n- a list\n")

        result = invoke(runner, config_path, "snapshot", command, "bad")

        if command == "remove":
            assert result.exit_code == 0, result.output
            assert not (snapshot_dir / "bad.yaml").exists()
        else:
            assert result.exit_code == 1
            assert "Invalid snapshot" in result.output
            assert not isinstance(result.exception, AttributeError)
