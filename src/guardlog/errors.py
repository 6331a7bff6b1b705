"""
Module: errors
Purpose: Exception hierarchy and the non-raising result type of the write path
Dependencies: dataclasses, enum, typing

Notes
-----
Nothing on the logging path raises: validation and write failures come back
as a falsy `WriteResult`, rotation as `False`, tail as a placeholder string.
Exceptions are reserved for misconfiguration, which is a programming error
and should surface at startup rather than during checkout.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

__all__ = [
    "GuardLogError",
    "ConfigError",
    "FailureKind",
    "WriteResult",
]


class GuardLogError(RuntimeError):
    """Base exception for guardlog failures outside the write path."""


class ConfigError(GuardLogError):
    """Raised for unreadable, unknown or out-of-range configuration."""


class FailureKind(str, Enum):
    VALIDATION = "validation"  # record rejected, never persisted
    WRITE = "write"  # directory unusable or OS write failed; sent to fallback


@dataclass(frozen=True)
class WriteResult:
    """
    Outcome of a journal write.

    Truthy iff the line reached the primary log file, so callers can keep
    writing ``if not journal.info(...)``.
    """

    ok: bool
    failure: Optional[FailureKind] = None
    reason: Optional[str] = None

    def __bool__(self) -> bool:
        return self.ok

    @classmethod
    def success(cls) -> "WriteResult":
        return cls(ok=True)

    @classmethod
    def rejected(cls, reason: str = "payload failed validation") -> "WriteResult":
        return cls(ok=False, failure=FailureKind.VALIDATION, reason=reason)

    @classmethod
    def write_failed(cls, reason: str) -> "WriteResult":
        return cls(ok=False, failure=FailureKind.WRITE, reason=reason)
