"""
Module: store
Purpose: Rotating, purgeable JSON Lines journal file with an efficient tail read
Dependencies: fcntl, json, logging, os, shutil, datetime, pathlib

Notes
-----
- Each line is ``{"time": "YYYY-MM-DD HH:MM:SS", "data": {...}}`` written
  compactly with Unicode kept literal (``ensure_ascii=False``). NaN and
  infinite floats are refused (``allow_nan=False``) so every line is strict JSON.
- Appends hold an exclusive ``fcntl.flock`` on the log file itself so every
  worker process sharing the directory serializes on the OS lock.
- Rotation renames the active file to ``<file>.<YYYYMMDD_HHMMSS>`` and is not
  atomic with respect to other processes; a concurrent append may land in the
  fresh file. Purge and tail never take the lock and treat a vanished file as
  an empty result.
- Nothing here raises on the write path. Failures are logged, diverted to the
  ``guardlog.fallback`` logger and returned as a falsy `WriteResult`.
"""

from __future__ import annotations

import fcntl
import json
import logging
import os
import shutil
from datetime import datetime
from pathlib import Path
from typing import Any, List, Mapping, Optional, Tuple, Union

from guardlog.config import LogConfig
from guardlog.errors import WriteResult
from guardlog.sanitize import sanitize_payload

__all__ = [
    "LogStore",
    "TAIL_UNAVAILABLE",
    "ROTATION_SUFFIX_FORMAT",
    "TIME_FORMAT",
    "DENY_MARKER",
    "PLACEHOLDER_MARKER",
]

logger = logging.getLogger(__name__)
fallback_logger = logging.getLogger("guardlog.fallback")

TIME_FORMAT = "%Y-%m-%d %H:%M:%S"
ROTATION_SUFFIX_FORMAT = "%Y%m%d_%H%M%S"
ROTATION_SUFFIX_LENGTH = 15
DAY_SECONDS = 86400

DENY_MARKER = ".htaccess"
PLACEHOLDER_MARKER = "index.html"
_MARKERS: Tuple[Tuple[str, str], ...] = (
    (DENY_MARKER, "Deny from all\n"),
    (PLACEHOLDER_MARKER, ""),
)

TAIL_UNAVAILABLE = "Unable to open log file."


def _now() -> datetime:
    """Local wall-clock time; tests patch this to move the clock."""
    return datetime.now()


def _encode_line(entry: Mapping[str, Any]) -> str:
    return json.dumps(entry, ensure_ascii=False, allow_nan=False, separators=(",", ":")) + "\n"


def _parse_rotation_stamp(name: str) -> Optional[datetime]:
    """Timestamp encoded in the last 15 characters of a rotated file name."""
    if len(name) < ROTATION_SUFFIX_LENGTH:
        return None
    try:
        return datetime.strptime(name[-ROTATION_SUFFIX_LENGTH:], ROTATION_SUFFIX_FORMAT)
    except ValueError:
        return None


class LogStore:
    """
    Owner of the journal file, its rotations and the directory markers.

    Parameters
    ----------
    config : LogConfig
        Location, size ceiling and retention window. Replace it through
        `update_config`, which recomputes the file path immediately.
    """

    def __init__(self, config: LogConfig) -> None:
        self.config = config
        self._path = config.log_file_path

    def update_config(self, config: LogConfig) -> None:
        self.config = config
        self._path = config.log_file_path

    # ------------------------------------------------------------------ accessors

    @property
    def log_path(self) -> Path:
        return self._path

    def path(self) -> str:
        return str(self._path)

    def file_exists(self) -> bool:
        return self._path.is_file()

    def file_size(self) -> int:
        try:
            return self._path.stat().st_size
        except OSError:
            return 0

    # ------------------------------------------------------------------ directory

    def ensure_directory_secure(self) -> None:
        """Create the directory and its access-control markers if missing (idempotent)."""
        log_dir = self._path.parent
        try:
            log_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.warning("Cannot create journal directory %s: %s", log_dir, e)
            return

        for name, content in _MARKERS:
            marker = log_dir / name
            if marker.exists():
                continue
            try:
                marker.write_text(content, encoding="utf-8")
            except OSError as e:
                logger.warning("Cannot write marker %s: %s", marker, e)

    # ------------------------------------------------------------------ write path

    def append(self, payload: Mapping[str, Any]) -> WriteResult:
        """Append one sanitized record; never raises."""
        self.ensure_directory_secure()

        entry = {"time": _now().strftime(TIME_FORMAT), "data": sanitize_payload(payload)}
        try:
            line = _encode_line(entry)
        except (TypeError, ValueError) as e:
            self._fallback(repr(entry))
            return WriteResult.write_failed(f"payload is not JSON-serializable: {e}")

        log_dir = self._path.parent
        if not log_dir.is_dir() or not os.access(log_dir, os.W_OK):
            self._fallback(line)
            return WriteResult.write_failed(f"log directory missing or not writable: {log_dir}")

        if self.should_rotate():
            self.rotate()

        try:
            self._write_line(line)
        except OSError as e:
            self._fallback(line)
            return WriteResult.write_failed(f"write failed: {e}")
        return WriteResult.success()

    def _write_line(self, line: str) -> None:
        with open(self._path, "a", encoding="utf-8") as fh:
            fcntl.flock(fh.fileno(), fcntl.LOCK_EX)
            try:
                fh.write(line)
                fh.flush()
            finally:
                fcntl.flock(fh.fileno(), fcntl.LOCK_UN)

    def _fallback(self, line: str) -> None:
        fallback_logger.warning("%s", line.rstrip("\n"))

    # ------------------------------------------------------------------ rotation

    def should_rotate(self) -> bool:
        try:
            return self._path.stat().st_size > self.config.max_log_size
        except OSError:
            return False

    def rotate(self) -> bool:
        """Rename the active file with a timestamp suffix, then purge expired rotations."""
        if not self._path.exists():
            return False

        target = self._path.with_name(f"{self._path.name}.{_now().strftime(ROTATION_SUFFIX_FORMAT)}")
        try:
            if target.exists():
                # two rotations in the same second: keep both contents in one file
                self._merge_into(target)
            else:
                os.rename(self._path, target)
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.warning("Journal rotation of %s failed: %s", self._path, e)
            return False

        logger.info("Rotated journal %s -> %s", self._path, target.name)
        self.purge_expired_rotations()
        return True

    def _merge_into(self, target: Path) -> None:
        with open(self._path, "rb") as src, open(target, "ab") as dst:
            shutil.copyfileobj(src, dst)
        os.unlink(self._path)

    def _rotation_candidates(self) -> List[Tuple[str, datetime]]:
        prefix = self._path.name + "."
        try:
            names = os.listdir(self._path.parent)
        except OSError:
            return []
        out: List[Tuple[str, datetime]] = []
        for name in names:
            if not name.startswith(prefix):
                continue
            stamp = _parse_rotation_stamp(name)
            if stamp is not None:
                out.append((name, stamp))
        out.sort(key=lambda item: item[1])
        return out

    def is_journal_file(self, path: Union[str, Path]) -> bool:
        """True when `path` names the active file or a rotation of it."""
        candidate = Path(path)
        if candidate.resolve().parent != self._path.parent.resolve():
            return False
        name = candidate.name
        if name == self._path.name:
            return True
        return (
            name.startswith(self._path.name + ".")
            and len(name) == len(self._path.name) + 1 + ROTATION_SUFFIX_LENGTH
            and _parse_rotation_stamp(name) is not None
        )

    def rotated_files(self) -> List[Path]:
        """Rotated siblings of the active file, oldest first."""
        return [self._path.parent / name for name, _ in self._rotation_candidates()]

    def purge_expired_rotations(self) -> int:
        """Delete rotations older than the retention window; returns the count removed."""
        max_age = self.config.purge_keep_days * DAY_SECONDS
        now = _now()
        deleted = 0
        for name, stamp in self._rotation_candidates():
            if (now - stamp).total_seconds() <= max_age:
                continue
            try:
                os.unlink(self._path.parent / name)
            except FileNotFoundError:
                continue
            except OSError as e:
                logger.warning("Cannot purge rotated journal %s: %s", name, e)
                continue
            deleted += 1

        if deleted:
            logger.info("Purged %d expired journal rotation(s)", deleted)
        return deleted

    # ------------------------------------------------------------------ read path

    def tail(
        self,
        path: Union[str, Path, None] = None,
        max_lines: int = 200,
        buffer_size: int = 4096,
    ) -> str:
        """
        Return the last `max_lines` lines of `path` (default: the active file).

        The file is read backwards in `buffer_size` chunks until enough lines
        are buffered or the start of the file is reached, so the cost depends
        on the size of the tail, not of the file. Trailing newlines are
        dropped. An unopenable file yields `TAIL_UNAVAILABLE`.
        """
        target = self._path if path is None else Path(path)
        max_lines = max(1, int(max_lines))
        buffer_size = max(1, int(buffer_size))

        try:
            fh = open(target, "rb")
        except OSError:
            return TAIL_UNAVAILABLE

        with fh:
            fh.seek(0, os.SEEK_END)
            position = fh.tell()
            chunks: List[bytes] = []
            newlines = 0
            # trailing newlines seen so far; they do not separate lines
            trailing = 0
            in_trailer = True
            while position > 0:
                read_size = min(buffer_size, position)
                position -= read_size
                fh.seek(position)
                chunk = fh.read(read_size)
                chunks.append(chunk)
                newlines += chunk.count(b"\n")
                if in_trailer:
                    stripped = chunk.rstrip(b"\n")
                    trailing += len(chunk) - len(stripped)
                    in_trailer = not stripped
                if newlines - trailing >= max_lines:
                    break

        data = b"".join(reversed(chunks))
        lines = data.rstrip(b"\n").split(b"\n")
        return b"\n".join(lines[-max_lines:]).decode("utf-8", errors="replace")
