"""Known event vocabulary and log levels for the checkout journal."""

from __future__ import annotations

from enum import Enum
from typing import FrozenSet, Iterable


class KnownEvent(str, Enum):
    """Events emitted by the checkout guard."""
    VISIT_COMMANDER = "visit_commander"
    REDIRECT_CHECKOUT_TO_CART = "redirect_checkout_to_cart"
    BLOCK_CHECKOUT_BLOCKS = "block_checkout_blocks"
    BLOCK_CHECKOUT_LEGACY = "block_checkout_legacy"
    LOG_MESSAGE = "log_message"


class LogLevel(str, Enum):
    """Levels accepted on message records."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


KNOWN_EVENTS: FrozenSet[str] = frozenset(e.value for e in KnownEvent)
LOG_LEVELS: FrozenSet[str] = frozenset(lv.value for lv in LogLevel)


def event_vocabulary(extra: Iterable[str] = ()) -> FrozenSet[str]:
    """Known events plus deployment-specific additions."""
    return KNOWN_EVENTS | frozenset(str(e) for e in extra)
