"""
Module: facade
Purpose: The single journal API consumed by checkout, cart and admin collaborators
Dependencies: logging, typing; guardlog.config, guardlog.validator, guardlog.store

Usage
-----
    journal = build_logger({"log_base_path": "/srv/shop/uploads"})
    journal.log_structured({"event": "visit_commander", "total_qty": 2})
    if not journal.warning("cart over limit", {"qty": 3}):
        ...  # rejected or diverted to the fallback logger

Every method on the logging path reports failure through its return value
(falsy `WriteResult`, ``False``, ``0`` or a placeholder string) and never
raises. Only `update_config` raises, with `ConfigError`, on invalid input.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

from guardlog.config import LogConfig
from guardlog.errors import WriteResult
from guardlog.events import KnownEvent, LogLevel
from guardlog.store import LogStore
from guardlog.validator import LogValidator

__all__ = ["LogFacade"]

logger = logging.getLogger(__name__)


class LogFacade:
    """Validate-then-append journal with rotation, purge, stats and tail."""

    def __init__(self, config: LogConfig, validator: LogValidator, store: LogStore) -> None:
        self._config = config
        self.validator = validator
        self.store = store

    @property
    def config(self) -> LogConfig:
        return self._config

    # ------------------------------------------------------------------ write

    def log_structured(self, payload: Mapping[str, Any]) -> WriteResult:
        if not self.validator.validate(payload):
            return WriteResult.rejected()
        return self.store.append(payload)

    def log_message(
        self,
        message: str,
        level: str = LogLevel.INFO.value,
        context: Optional[Mapping[str, Any]] = None,
    ) -> WriteResult:
        payload: Dict[str, Any] = {
            "event": KnownEvent.LOG_MESSAGE.value,
            "level": level,
            "message": message,
            "context": dict(context or {}),
        }
        return self.log_structured(payload)

    log = log_message

    def debug(self, message: str, context: Optional[Mapping[str, Any]] = None) -> WriteResult:
        return self.log_message(message, LogLevel.DEBUG.value, context)

    def info(self, message: str, context: Optional[Mapping[str, Any]] = None) -> WriteResult:
        return self.log_message(message, LogLevel.INFO.value, context)

    def warning(self, message: str, context: Optional[Mapping[str, Any]] = None) -> WriteResult:
        return self.log_message(message, LogLevel.WARNING.value, context)

    def error(self, message: str, context: Optional[Mapping[str, Any]] = None) -> WriteResult:
        return self.log_message(message, LogLevel.ERROR.value, context)

    # ------------------------------------------------------------------ read / maintenance

    def tail(self, n: Optional[int] = None) -> str:
        lines = self._config.default_tail_lines if n is None else n
        return self.store.tail(self.store.log_path, lines)

    def stats(self) -> Dict[str, Any]:
        return {
            "exists": self.store.file_exists(),
            "size": self.store.file_size(),
            "path": self.store.path(),
            "max_size": self._config.max_log_size,
            "retention_days": self._config.purge_keep_days,
            "rotated_count": len(self.store.rotated_files()),
        }

    def force_rotate(self) -> bool:
        return self.store.rotate()

    def purge(self) -> int:
        return self.store.purge_expired_rotations()

    def get_log_file_path(self) -> str:
        return self.store.path()

    def ensure_directory_secure(self) -> None:
        self.store.ensure_directory_secure()

    # ------------------------------------------------------------------ config

    def update_config(self, partial: Mapping[str, Any]) -> None:
        """Shallow-merge `partial` and propagate it before returning; raises `ConfigError`."""
        merged = self._config.merge(partial)
        if not self.validator.is_config_valid(merged):
            logger.warning(
                "Journal config below operational floor (max_log_size=%d, purge_keep_days=%d)",
                merged.max_log_size,
                merged.purge_keep_days,
            )
        self._config = merged
        self.validator.update_config(merged)
        self.store.update_config(merged)
