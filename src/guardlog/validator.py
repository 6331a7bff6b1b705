"""
Module: validator
Purpose: Accept or reject a journal payload before it is persisted
Dependencies: logging, math, re, typing

Rules
-----
A payload is routed to exactly one branch, by the first key that is present
and not None:

- ``event``   -> event record: non-blank str, <= 100 chars, in the vocabulary
                 (or any name under the ``warn`` policy)
- ``message`` -> message record: non-blank str, <= 1000 chars, optional level
- otherwise   -> generic record: safe keys, safe values, recursively

A ``log_message`` event must also pass the message rules. Otherwise the
event and message branches do not inspect the remaining keys.
"""

from __future__ import annotations

import logging
import math
import re
from typing import TYPE_CHECKING, Any, FrozenSet, Iterable, Mapping, Optional, Tuple

from guardlog.events import LOG_LEVELS, KnownEvent, event_vocabulary

if TYPE_CHECKING:  # pragma: no cover
    from guardlog.config import LogConfig

__all__ = [
    "LogValidator",
    "is_safe_key",
    "is_safe_value",
    "is_valid_filepath",
]

logger = logging.getLogger(__name__)

KEY_PATTERN = re.compile(r"[a-zA-Z0-9_]{1,50}")
MAX_EVENT_LENGTH = 100
MAX_MESSAGE_LENGTH = 1000
MAX_STRING_LENGTH = 2000
MAX_CONTAINER_ENTRIES = 50
MIN_LOG_SIZE = 1024
MAX_FILEPATH_LENGTH = 500


def is_safe_key(key: Any) -> bool:
    return isinstance(key, str) and KEY_PATTERN.fullmatch(key) is not None


def is_safe_value(value: Any) -> bool:
    """Scalars of allowed kinds, bounded strings, bounded containers of the same."""
    if value is None or isinstance(value, (bool, int)):
        return True
    if isinstance(value, float):
        return math.isfinite(value)
    if isinstance(value, str):
        return len(value) <= MAX_STRING_LENGTH
    if isinstance(value, Mapping):
        return _is_safe_container(value.items(), len(value))
    if isinstance(value, (list, tuple)):
        # sequence indices stand in for keys and always match the pattern
        return _is_safe_container(((str(i), v) for i, v in enumerate(value)), len(value))
    return False


def _is_safe_container(items: Iterable[Tuple[Any, Any]], size: int) -> bool:
    if size > MAX_CONTAINER_ENTRIES:
        return False
    return all(is_safe_key(k) and is_safe_value(v) for k, v in items)


def _is_bounded_text(value: Any, limit: int) -> bool:
    return isinstance(value, str) and bool(value.strip()) and len(value) <= limit


def is_valid_filepath(filepath: Any) -> bool:
    """Non-blank, no parent traversal, at most 500 characters."""
    if not isinstance(filepath, str) or not filepath.strip():
        return False
    if ".." in filepath:
        return False
    return len(filepath) <= MAX_FILEPATH_LENGTH


class LogValidator:
    """
    Side-effect-free gatekeeper for the journal.

    Parameters
    ----------
    config : Optional[LogConfig]
        Supplies ``unknown_event_policy`` and ``extra_events``. Without one the
        validator uses the strict defaults (reject unknown events).
    """

    def __init__(self, config: Optional["LogConfig"] = None) -> None:
        self.config = config
        self._events: FrozenSet[str] = frozenset()
        self._warn_unknown = False
        self.update_config(config)

    def update_config(self, config: Optional["LogConfig"]) -> None:
        self.config = config
        extra: Tuple[str, ...] = tuple(config.extra_events) if config is not None else ()
        self._events = event_vocabulary(extra)
        self._warn_unknown = config is not None and config.unknown_event_policy == "warn"

    @property
    def known_events(self) -> FrozenSet[str]:
        return self._events

    def validate(self, payload: Any) -> bool:
        if not isinstance(payload, Mapping) or not payload:
            return False
        if payload.get("event") is not None:
            if not self._validate_event(payload["event"]):
                return False
            if payload["event"] == KnownEvent.LOG_MESSAGE.value:
                return self._validate_message(payload)
            return True
        if payload.get("message") is not None:
            return self._validate_message(payload)
        return self._validate_generic(payload)

    def _validate_event(self, event: Any) -> bool:
        if not _is_bounded_text(event, MAX_EVENT_LENGTH):
            return False
        if event in self._events:
            return True
        if self._warn_unknown:
            logger.warning("Accepting unknown journal event %r", event)
            return True
        return False

    def _validate_message(self, payload: Mapping[str, Any]) -> bool:
        if not _is_bounded_text(payload.get("message"), MAX_MESSAGE_LENGTH):
            return False
        level = payload.get("level")
        if level is not None:
            return isinstance(level, str) and level in LOG_LEVELS
        return True

    def _validate_generic(self, payload: Mapping[str, Any]) -> bool:
        return all(is_safe_key(k) and is_safe_value(v) for k, v in payload.items())

    def is_config_valid(self, config: Optional["LogConfig"] = None) -> bool:
        """Check the operational floor (1 KiB ceiling, one-day retention, non-blank paths)."""
        cfg = config if config is not None else self.config
        if cfg is None:
            return False
        if not (cfg.log_base_path.strip() and cfg.log_dir_name.strip() and cfg.log_filename.strip()):
            return False
        if cfg.max_log_size < MIN_LOG_SIZE:
            return False
        return cfg.purge_keep_days >= 1
