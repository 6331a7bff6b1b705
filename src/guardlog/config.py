"""
Module: config
Purpose: Typed, immutable journal configuration with pure merging and YAML/env loading
Dependencies: pydantic, yaml, os, pathlib, typing

Notes
-----
- `LogConfig` is frozen and forbids unknown keys, so `{"max_log_sise": ...}`
  fails loudly instead of being silently ignored.
- `merge` never mutates; it validates the merged mapping into a new instance.
- `max_log_size` only has to be positive here. The operational 1 KiB floor is
  checked by `LogValidator.is_config_valid` so tiny ceilings stay usable.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Literal, Mapping, Optional, Tuple, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from guardlog.errors import ConfigError
from guardlog.validator import is_valid_filepath

__all__ = [
    "DEFAULT_MAX_LOG_SIZE",
    "ENV_PREFIX",
    "LogConfig",
    "merge",
    "load_config",
    "config_from_env",
    "resolve_config",
]

DEFAULT_MAX_LOG_SIZE = 5 * 1024 * 1024
ENV_PREFIX = "GUARDLOG_"


class LogConfig(BaseModel):
    """Where the journal lives and how it rotates."""

    log_base_path: str = Field(default_factory=os.getcwd, min_length=1)
    log_dir_name: str = Field(default="tb-logs", min_length=1)
    log_filename: str = Field(default="wc_checkout_guard.log", min_length=1)
    max_log_size: int = Field(default=DEFAULT_MAX_LOG_SIZE, gt=0)
    purge_keep_days: int = Field(default=14, ge=1)
    unknown_event_policy: Literal["reject", "warn"] = "reject"
    extra_events: Tuple[str, ...] = ()
    default_tail_lines: int = Field(default=200, ge=1)

    model_config = ConfigDict(frozen=True, extra="forbid")

    @field_validator("log_base_path", mode="before")
    @classmethod
    def _coerce_path(cls, v: Any) -> Any:
        if isinstance(v, os.PathLike):
            return os.fspath(v)
        return v

    @field_validator("log_dir_name", "log_filename")
    @classmethod
    def _single_safe_component(cls, v: str) -> str:
        if not is_valid_filepath(v):
            raise ValueError(f"unsafe path component: {v!r}")
        return v

    @field_validator("log_filename")
    @classmethod
    def _no_separator(cls, v: str) -> str:
        if "/" in v or os.sep in v:
            raise ValueError("log_filename must be a bare file name")
        return v

    @field_validator("extra_events", mode="before")
    @classmethod
    def _split_events(cls, v: Any) -> Any:
        if isinstance(v, str):
            return tuple(e.strip() for e in v.split(",") if e.strip())
        return v

    @property
    def log_dir(self) -> Path:
        return Path(self.log_base_path) / self.log_dir_name

    @property
    def log_file_path(self) -> Path:
        return self.log_dir / self.log_filename

    def merge(self, partial: Mapping[str, Any]) -> "LogConfig":
        return merge(self, partial)


def _build(data: Mapping[str, Any]) -> LogConfig:
    try:
        return LogConfig.model_validate(dict(data))
    except ValidationError as e:
        raise ConfigError(f"invalid journal configuration: {e}") from e


def merge(config: LogConfig, partial: Mapping[str, Any]) -> LogConfig:
    """Shallow merge: keys missing from `partial` keep their current values."""
    if not isinstance(partial, Mapping):
        raise ConfigError(f"config override must be a mapping, got {type(partial).__name__}")
    data: Dict[str, Any] = config.model_dump()
    data.update(partial)
    return _build(data)


def load_config(path: Union[str, Path]) -> LogConfig:
    """Load a YAML mapping of overrides on top of the defaults."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"cannot read config {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"config {path} is not valid YAML: {e}") from e
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config at {path} is not a mapping")
    return _build(data)


def config_from_env(
    environ: Optional[Mapping[str, str]] = None,
    base: Optional[LogConfig] = None,
) -> LogConfig:
    """Apply ``GUARDLOG_<FIELD>`` variables (e.g. ``GUARDLOG_MAX_LOG_SIZE``) on top of `base`."""
    env = os.environ if environ is None else environ
    overrides = {
        name: env[ENV_PREFIX + name.upper()]
        for name in LogConfig.model_fields
        if ENV_PREFIX + name.upper() in env
    }
    return merge(base or LogConfig(), overrides)


def resolve_config(config: Union[LogConfig, Mapping[str, Any], None]) -> LogConfig:
    if config is None:
        return LogConfig()
    if isinstance(config, LogConfig):
        return config
    return merge(LogConfig(), config)
