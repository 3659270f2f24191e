"""logarchive configuration: Pydantic model, load, and save."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator

from logarchive.core.constants import (
    CONFIG_FILE_MODE,
    CONFIG_FILENAME,
    DEFAULT_ADMIN_PORT,
    DEFAULT_CLIENT_PORT,
    DEFAULT_SCHEDULER_PORT,
    LOGARCHIVE_DIR_NAME,
)
from logarchive.core.exceptions import ConfigError, ConfigNotFoundError


def logarchive_dir() -> Path:
    """Return the logarchive config directory (~/.logarchive), creating it if needed."""
    d = Path.home() / LOGARCHIVE_DIR_NAME
    d.mkdir(mode=0o700, parents=True, exist_ok=True)
    return d


# ---------------------------------------------------------------------------
# Sub-models
# ---------------------------------------------------------------------------


class AggregationConfig(BaseModel):
    log_roots: list[str] = Field(default_factory=list)
    archive_dir: str = ""  # empty → aggregate needs an explicit --dest
    node_id: str = ""

    @field_validator("log_roots", mode="before")
    @classmethod
    def parse_log_roots(cls, v: Any) -> Any:
        """Accept both list and comma-separated string."""
        if isinstance(v, str):
            return [root.strip() for root in v.split(",") if root.strip()]
        return v

    @field_validator("log_roots")
    @classmethod
    def reject_empty_roots(cls, v: list[str]) -> list[str]:
        if any(not root.strip() for root in v):
            raise ValueError("log_roots entries must be non-empty paths")
        return v

    def archive_path(self, owner: str, application_id: str, node_id: str = "") -> Path:
        """Remote archive location: <archive_dir>/<owner>/logs/<application>/<node>."""
        if not self.archive_dir:
            raise ConfigError("aggregation.archive_dir is not configured")
        node = node_id or self.node_id
        if not node:
            raise ConfigError("No node id given and aggregation.node_id is not configured")
        return Path(self.archive_dir).expanduser() / owner / "logs" / application_id / node


class ClusterConfig(BaseModel):
    address: str = f"0.0.0.0:{DEFAULT_CLIENT_PORT}"
    admin_address: str = f"0.0.0.0:{DEFAULT_ADMIN_PORT}"
    scheduler_address: str = f"0.0.0.0:{DEFAULT_SCHEDULER_PORT}"


class LoggingConfig(BaseModel):
    level: str = "INFO"
    format: str = "text"  # "text" | "json"

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR"}
        if v.upper() not in allowed:
            raise ValueError(f"Log level must be one of: {allowed}")
        return v.upper()

    @field_validator("format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        if v not in ("text", "json"):
            raise ValueError("Log format must be 'text' or 'json'")
        return v


# ---------------------------------------------------------------------------
# Root config
# ---------------------------------------------------------------------------


class LogArchiveConfig(BaseModel):
    """Root logarchive configuration model."""

    aggregation: AggregationConfig = Field(default_factory=AggregationConfig)
    cluster: ClusterConfig = Field(default_factory=ClusterConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


# ---------------------------------------------------------------------------
# Load / save
# ---------------------------------------------------------------------------


def _config_file_path() -> Path:
    if env_path := os.environ.get("LOGARCHIVE_CONFIG"):
        return Path(env_path)
    return logarchive_dir() / CONFIG_FILENAME


def load_config(path: Path | None = None) -> LogArchiveConfig:
    """
    Load LogArchiveConfig from TOML file, overlaid with environment variables.

    Priority (highest to lowest):
      1. Environment variables (LOGARCHIVE_*)
      2. Config file (~/.logarchive/config.toml)
    """
    import tomllib

    cfg_path = path or _config_file_path()

    if not cfg_path.exists():
        raise ConfigNotFoundError(
            f"logarchive is not configured. Run 'logarchive config init' first.\n"
            f"(Config file not found: {cfg_path})"
        )

    try:
        with open(cfg_path, "rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as exc:
        raise ConfigError(f"Cannot read config file {cfg_path}: {exc}") from exc

    _apply_env_overrides(data)

    try:
        return LogArchiveConfig.model_validate(data)
    except ValueError as exc:
        raise ConfigError(f"Invalid config at {cfg_path}: {exc}") from exc


def default_config() -> LogArchiveConfig:
    """Built-in defaults overlaid with LOGARCHIVE_* environment variables."""
    data: dict[str, Any] = {}
    _apply_env_overrides(data)
    try:
        return LogArchiveConfig.model_validate(data)
    except ValueError as exc:
        raise ConfigError(f"Invalid LOGARCHIVE_* environment settings: {exc}") from exc


def _apply_env_overrides(data: dict[str, Any]) -> None:
    """Overlay LOGARCHIVE_* environment variables onto the parsed TOML data."""
    if roots := os.environ.get("LOGARCHIVE_LOG_ROOTS"):
        data.setdefault("aggregation", {})["log_roots"] = roots
    if archive_dir := os.environ.get("LOGARCHIVE_ARCHIVE_DIR"):
        data.setdefault("aggregation", {})["archive_dir"] = archive_dir
    if node_id := os.environ.get("LOGARCHIVE_NODE_ID"):
        data.setdefault("aggregation", {})["node_id"] = node_id
    if level := os.environ.get("LOGARCHIVE_LOG_LEVEL"):
        data.setdefault("logging", {})["level"] = level


def save_config(config_data: dict[str, Any], path: Path | None = None) -> Path:
    """Write config dict to TOML file with secure permissions (0600)."""
    import tomli_w

    cfg_path = path or _config_file_path()
    cfg_path.parent.mkdir(mode=0o700, parents=True, exist_ok=True)

    # Write atomically
    tmp_path = cfg_path.with_suffix(".tmp")
    try:
        with open(tmp_path, "wb") as f:
            tomli_w.dump(config_data, f)
        tmp_path.rename(cfg_path)
    except OSError as exc:
        tmp_path.unlink(missing_ok=True)
        raise ConfigError(f"Cannot write config to {cfg_path}: {exc}") from exc

    cfg_path.chmod(CONFIG_FILE_MODE)
    return cfg_path
