"""Integration tests for the logarchive CLI through click's CliRunner."""

from __future__ import annotations

import json
import logging
import stat
from pathlib import Path

import pytest
from click.testing import CliRunner

from logarchive.cli.main import cli

CID = "container_1_0001_01_000001"


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture(autouse=True)
def _restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def env(tmp_path: Path) -> dict[str, str]:
    return {
        "LOGARCHIVE_CONFIG": str(tmp_path / "config.toml"),
        "LOGARCHIVE_LOG_LEVEL": "ERROR",
    }


@pytest.fixture
def log_root(tmp_path: Path) -> Path:
    container_dir = tmp_path / "logs" / "application_1_0001" / CID
    container_dir.mkdir(parents=True)
    (container_dir / "stdout").write_text("hello from stdout\n")
    (container_dir / "stderr").write_text("warning on stderr\n")
    return tmp_path / "logs"


class TestAggregateAndDump:
    def test_round_trip(self, runner, env, log_root, tmp_path) -> None:
        dest = tmp_path / "out" / "archive"
        result = runner.invoke(
            cli,
            ["aggregate", CID, "--root", str(log_root), "--dest", str(dest), "--json"],
            env=env,
            catch_exceptions=False,
        )
        assert result.exit_code == 0, result.output
        summary = json.loads(result.stdout)
        assert summary["containers"][0]["included"] == 2
        assert stat.S_IMODE(dest.stat().st_mode) == 0o640

        result = runner.invoke(cli, ["dump", str(dest)], env=env, catch_exceptions=False)
        assert result.exit_code == 0
        assert f"Container: {CID}" in result.stdout
        assert "LogType:stdout" in result.stdout
        assert "hello from stdout" in result.stdout
        assert "warning on stderr" in result.stdout

    def test_foreign_owner_reported(self, runner, env, log_root, tmp_path) -> None:
        dest = tmp_path / "archive"
        result = runner.invoke(
            cli,
            ["aggregate", CID, "--root", str(log_root), "--dest", str(dest),
             "--owner", "randomUser", "--json"],
            env=env,
            catch_exceptions=False,
        )
        assert result.exit_code == 0
        assert json.loads(result.stdout)["containers"][0]["ownership_mismatches"] == 2

        result = runner.invoke(cli, ["dump", str(dest)], env=env, catch_exceptions=False)
        assert result.stdout.count("did not match expected owner 'randomUser'") == 2
        assert "hello from stdout" not in result.stdout

    def test_invalid_container_id(self, runner, env, log_root, tmp_path) -> None:
        result = runner.invoke(
            cli,
            ["aggregate", "bogus", "--root", str(log_root), "--dest", str(tmp_path / "a")],
            env=env,
        )
        assert result.exit_code == 1

    def test_uncreatable_archive(self, runner, env, log_root, tmp_path) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("")
        result = runner.invoke(
            cli,
            ["aggregate", CID, "--root", str(log_root), "--dest", str(blocker / "archive")],
            env=env,
        )
        assert result.exit_code == 5

    def test_dest_derived_from_config(self, runner, env, log_root, tmp_path) -> None:
        archive_dir = tmp_path / "remote"
        Path(env["LOGARCHIVE_CONFIG"]).write_text(
            f'[aggregation]\nlog_roots = ["{log_root}"]\n'
            f'archive_dir = "{archive_dir}"\nnode_id = "node1"\n'
        )
        result = runner.invoke(
            cli, ["aggregate", CID, "--owner", "alice", "--json"], env=env, catch_exceptions=False
        )
        assert result.exit_code == 0
        expected = archive_dir / "alice" / "logs" / "application_1_0001" / "node1"
        assert json.loads(result.stdout)["archive"] == str(expected)
        assert expected.is_file()

    def test_dump_corrupt_archive(self, runner, env, tmp_path) -> None:
        bad = tmp_path / "bad"
        bad.write_bytes(b"\x00\x00\x00\x10short")
        result = runner.invoke(cli, ["dump", str(bad)], env=env)
        assert result.exit_code == 1

    def test_dump_missing_container(self, runner, env, log_root, tmp_path) -> None:
        dest = tmp_path / "archive"
        runner.invoke(
            cli,
            ["aggregate", CID, "--root", str(log_root), "--dest", str(dest), "--json"],
            env=env,
            catch_exceptions=False,
        )
        result = runner.invoke(
            cli, ["dump", str(dest), "--container", "container_9_0009_01_000009"], env=env
        )
        assert result.exit_code == 1


class TestResolve:
    def test_default_scheduler(self, runner, env) -> None:
        result = runner.invoke(cli, ["resolve", "scheduler"], env=env, catch_exceptions=False)
        assert result.exit_code == 0
        assert result.stdout.strip() == "0.0.0.0:8030"

    def test_unknown_protocol_rejected(self, runner, env) -> None:
        result = runner.invoke(cli, ["resolve", "history"], env=env)
        assert result.exit_code == 2


class TestConfigCommands:
    def test_init_then_show(self, runner, env) -> None:
        result = runner.invoke(
            cli,
            ["config", "init", "--root", "/var/log/c", "--node", "n1"],
            env=env,
            catch_exceptions=False,
        )
        assert result.exit_code == 0
        cfg_path = Path(env["LOGARCHIVE_CONFIG"])
        assert stat.S_IMODE(cfg_path.stat().st_mode) == 0o600

        result = runner.invoke(cli, ["config", "show", "--json"], env=env, catch_exceptions=False)
        data = json.loads(result.stdout)
        assert data["aggregation"]["log_roots"] == ["/var/log/c"]
        assert data["aggregation"]["node_id"] == "n1"

    def test_init_refuses_overwrite(self, runner, env) -> None:
        Path(env["LOGARCHIVE_CONFIG"]).write_text("")
        result = runner.invoke(cli, ["config", "init"], env=env)
        assert result.exit_code == 2

    def test_broken_config_is_config_error(self, runner, env) -> None:
        Path(env["LOGARCHIVE_CONFIG"]).write_text("[logging]\nformat = 'xml'\n")
        result = runner.invoke(cli, ["resolve", "client"], env=env)
        assert result.exit_code == 2

    def test_init_force_replaces_broken_config(self, runner, env) -> None:
        cfg_path = Path(env["LOGARCHIVE_CONFIG"])
        cfg_path.write_text("[logging]\nformat = 'xml'\n")
        result = runner.invoke(cli, ["config", "init", "--force", "--node", "n2"], env=env)
        assert result.exit_code == 0

        result = runner.invoke(cli, ["config", "show", "--json"], env=env, catch_exceptions=False)
        assert json.loads(result.stdout)["aggregation"]["node_id"] == "n2"

    def test_show_reports_broken_config(self, runner, env) -> None:
        Path(env["LOGARCHIVE_CONFIG"]).write_text("[logging]\nformat = 'xml'\n")
        result = runner.invoke(cli, ["config", "show"], env=env)
        assert result.exit_code == 2


def test_version(runner) -> None:
    result = runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert "logarchive" in result.output
