"""Sitedata configuration: Pydantic model, load, and save."""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator

from sitedata.core.constants import (
    ALIAS_SCHEME,
    ARCHIVE_KEY_LENGTH,
    CONFIG_FILENAME,
    DB_FILENAME,
    SITEDATA_DIR_NAME,
)
from sitedata.core.exceptions import ConfigError, ConfigNotFoundError
from sitedata.core.origin import is_archive_key


def sitedata_dir() -> Path:
    """Return the default sitedata directory (~/.sitedata), creating it if needed."""
    d = Path.home() / SITEDATA_DIR_NAME
    d.mkdir(mode=0o700, parents=True, exist_ok=True)
    return d


# ---------------------------------------------------------------------------
# Sub-models
# ---------------------------------------------------------------------------


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
        if v.lower() not in ("text", "json"):
            raise ValueError("Log format must be 'text' or 'json'")
        return v.lower()


class DatabaseConfig(BaseModel):
    data_dir: str = ""  # empty → use ~/.sitedata


class ResolverConfig(BaseModel):
    alias_scheme: str = ALIAS_SCHEME
    # host name -> 64-hex archive key
    aliases: dict[str, str] = Field(default_factory=dict)

    @field_validator("alias_scheme")
    @classmethod
    def normalise_scheme(cls, v: str) -> str:
        scheme = v.strip().lower()
        if not scheme.endswith(":"):
            scheme += ":"
        if not re.fullmatch(r"[a-z][a-z0-9+.\-]*:", scheme):
            raise ValueError(f"Invalid alias scheme: {v!r}")
        return scheme

    @field_validator("aliases")
    @classmethod
    def validate_aliases(cls, v: dict[str, str]) -> dict[str, str]:
        for name, key in v.items():
            if not is_archive_key(key):
                raise ValueError(
                    f"Alias {name!r} must map to a {ARCHIVE_KEY_LENGTH}-digit hex key"
                )
        return {name.lower(): key.lower() for name, key in v.items()}


# ---------------------------------------------------------------------------
# Root config
# ---------------------------------------------------------------------------


class SiteDataConfig(BaseModel):
    """Root sitedata configuration model."""

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    resolver: ResolverConfig = Field(default_factory=ResolverConfig)

    # Computed paths (not stored in config file)
    _config_path: Path | None = None

    @property
    def data_dir(self) -> Path:
        if self.database.data_dir:
            return Path(self.database.data_dir).expanduser()
        return sitedata_dir()

    @property
    def db_path(self) -> Path:
        return self.data_dir / DB_FILENAME


# ---------------------------------------------------------------------------
# Load / save
# ---------------------------------------------------------------------------


def _config_file_path() -> Path:
    if env_path := os.environ.get("SITEDATA_CONFIG"):
        return Path(env_path)
    return Path.home() / SITEDATA_DIR_NAME / CONFIG_FILENAME


def load_config(path: Path | None = None) -> SiteDataConfig:
    """
    Load SiteDataConfig from TOML file, overlaid with environment variables.

    Priority (highest to lowest):
      1. Environment variables (SITEDATA_*)
      2. Config file (~/.sitedata/config.toml)
      3. Built-in defaults

    A missing default config file is not an error; a missing file that was
    asked for explicitly is.
    """
    import tomllib

    cfg_path = path or _config_file_path()
    data: dict[str, Any] = {}

    if cfg_path.exists():
        try:
            with open(cfg_path, "rb") as f:
                data = tomllib.load(f)
        except Exception as exc:
            raise ConfigError(f"Cannot read config file {cfg_path}: {exc}") from exc
    elif path is not None or "SITEDATA_CONFIG" in os.environ:
        raise ConfigNotFoundError(f"Config file not found: {cfg_path}")

    # Apply environment variable overrides
    _apply_env_overrides(data)

    try:
        config = SiteDataConfig.model_validate(data)
    except Exception as exc:
        raise ConfigError(f"Invalid config at {cfg_path}: {exc}") from exc

    config._config_path = cfg_path
    return config


def _apply_env_overrides(data: dict[str, Any]) -> None:
    """Overlay SITEDATA_* environment variables onto the parsed TOML data."""
    if level := os.environ.get("SITEDATA_LOG_LEVEL"):
        data.setdefault("logging", {})["level"] = level
    if fmt := os.environ.get("SITEDATA_LOG_FORMAT"):
        data.setdefault("logging", {})["format"] = fmt
    if data_dir := os.environ.get("SITEDATA_DATA_DIR"):
        data.setdefault("database", {})["data_dir"] = data_dir


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
    except Exception as exc:
        tmp_path.unlink(missing_ok=True)
        raise ConfigError(f"Cannot write config to {cfg_path}: {exc}") from exc

    cfg_path.chmod(0o600)
    return cfg_path
