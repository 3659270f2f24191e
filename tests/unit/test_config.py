"""Unit tests for config loading, env overrides, and saving."""

from __future__ import annotations

import stat
from pathlib import Path

import pytest

from logarchive.core.config import (
    AggregationConfig,
    LogArchiveConfig,
    LoggingConfig,
    load_config,
    save_config,
)
from logarchive.core.exceptions import ConfigError, ConfigNotFoundError

_TOML = """\
[aggregation]
log_roots = ["/var/log/containers", "/data/logs"]
archive_dir = "/archive"
node_id = "node1_45454"

[cluster]
scheduler_address = "rm.example:8030"

[logging]
level = "debug"
"""


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch) -> None:
    for var in (
        "LOGARCHIVE_CONFIG",
        "LOGARCHIVE_LOG_ROOTS",
        "LOGARCHIVE_ARCHIVE_DIR",
        "LOGARCHIVE_NODE_ID",
        "LOGARCHIVE_LOG_LEVEL",
    ):
        monkeypatch.delenv(var, raising=False)


class TestLoad:
    def test_load_file(self, tmp_path: Path) -> None:
        path = tmp_path / "config.toml"
        path.write_text(_TOML)
        cfg = load_config(path)
        assert cfg.aggregation.log_roots == ["/var/log/containers", "/data/logs"]
        assert cfg.cluster.scheduler_address == "rm.example:8030"
        assert cfg.logging.level == "DEBUG"

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigNotFoundError):
            load_config(tmp_path / "absent.toml")

    def test_malformed_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "config.toml"
        path.write_text("[aggregation\n")
        with pytest.raises(ConfigError):
            load_config(path)

    def test_invalid_value(self, tmp_path: Path) -> None:
        path = tmp_path / "config.toml"
        path.write_text('[logging]\nlevel = "LOUD"\n')
        with pytest.raises(ConfigError):
            load_config(path)

    def test_env_overrides(self, tmp_path: Path, monkeypatch) -> None:
        path = tmp_path / "config.toml"
        path.write_text(_TOML)
        monkeypatch.setenv("LOGARCHIVE_LOG_ROOTS", "/a, /b")
        monkeypatch.setenv("LOGARCHIVE_LOG_LEVEL", "warning")
        cfg = load_config(path)
        assert cfg.aggregation.log_roots == ["/a", "/b"]
        assert cfg.logging.level == "WARNING"

    def test_env_config_path(self, tmp_path: Path, monkeypatch) -> None:
        path = tmp_path / "elsewhere.toml"
        path.write_text(_TOML)
        monkeypatch.setenv("LOGARCHIVE_CONFIG", str(path))
        assert load_config().aggregation.node_id == "node1_45454"


class TestSave:
    def test_round_trip_and_mode(self, tmp_path: Path) -> None:
        path = tmp_path / "sub" / "config.toml"
        data = LogArchiveConfig(aggregation=AggregationConfig(log_roots=["/logs"])).model_dump()
        written = save_config(data, path)
        assert written == path
        assert stat.S_IMODE(path.stat().st_mode) == 0o600
        assert load_config(path).aggregation.log_roots == ["/logs"]


class TestModels:
    def test_empty_root_rejected(self) -> None:
        with pytest.raises(ValueError):
            AggregationConfig(log_roots=["/ok", "  "])

    def test_bad_log_format(self) -> None:
        with pytest.raises(ValueError):
            LoggingConfig(format="xml")

    def test_archive_path(self) -> None:
        agg = AggregationConfig(archive_dir="/archive", node_id="node1")
        assert agg.archive_path("alice", "application_1_0001") == Path(
            "/archive/alice/logs/application_1_0001/node1"
        )

    def test_archive_path_requires_dir(self) -> None:
        with pytest.raises(ConfigError):
            AggregationConfig(node_id="n").archive_path("alice", "application_1_0001")

    def test_archive_path_requires_node(self) -> None:
        with pytest.raises(ConfigError):
            AggregationConfig(archive_dir="/a").archive_path("alice", "application_1_0001")
