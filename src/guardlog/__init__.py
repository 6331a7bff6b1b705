"""Top-level package for the guardlog checkout journal."""

from importlib import metadata as _metadata
from typing import Any, Mapping, Union

from .config import LogConfig, config_from_env, load_config, merge, resolve_config
from .errors import ConfigError, FailureKind, GuardLogError, WriteResult
from .events import KnownEvent, LogLevel
from .facade import LogFacade
from .store import TAIL_UNAVAILABLE, LogStore
from .validator import LogValidator

try:
    __version__ = _metadata.version("guardlog")
except _metadata.PackageNotFoundError:  # pragma: no cover - during local usage
    __version__ = "0.0.0"


def build_logger(config: Union[LogConfig, Mapping[str, Any], None] = None) -> LogFacade:
    """Assemble validator, store and facade for one journal; the caller owns the result."""
    cfg = resolve_config(config)
    validator = LogValidator(cfg)
    store = LogStore(cfg)
    return LogFacade(cfg, validator, store)


__all__ = [
    "__version__",
    "build_logger",
    "ConfigError",
    "FailureKind",
    "GuardLogError",
    "KnownEvent",
    "LogConfig",
    "LogFacade",
    "LogLevel",
    "LogStore",
    "LogValidator",
    "TAIL_UNAVAILABLE",
    "WriteResult",
    "config_from_env",
    "load_config",
    "merge",
]
