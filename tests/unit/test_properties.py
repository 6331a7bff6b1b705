# tests/unit/test_properties.py
"""Property tests for validation and tail with explicit seeding."""

from __future__ import annotations

import json
import tempfile
from pathlib import Path

import pytest

from guardlog import build_logger
from guardlog.config import LogConfig
from guardlog.events import KNOWN_EVENTS, LOG_LEVELS, KnownEvent
from guardlog.sanitize import sanitize_payload
from guardlog.store import LogStore
from guardlog.validator import LogValidator

hypothesis = pytest.importorskip("hypothesis")
given = hypothesis.given
settings = hypothesis.settings
seed = hypothesis.seed
st = hypothesis.strategies

KEYS = st.from_regex(r"[a-zA-Z0-9_]{1,20}", fullmatch=True).filter(
    lambda k: k not in {"event", "message"}
)
SCALARS = st.one_of(
    st.none(),
    st.booleans(),
    st.integers(min_value=-(2**53), max_value=2**53),
    st.floats(allow_nan=False, allow_infinity=False),
    st.text(max_size=50),
)
VALUES = st.recursive(
    SCALARS,
    lambda children: st.one_of(
        st.lists(children, max_size=5),
        st.dictionaries(KEYS, children, max_size=5),
    ),
    max_leaves=10,
)

VALIDATOR = LogValidator(LogConfig(log_base_path="/tmp"))


@seed(0)
@settings(max_examples=100)
@given(st.dictionaries(KEYS, VALUES, min_size=1, max_size=8))
def test_generic_json_like_payloads_are_accepted(payload) -> None:
    assert VALIDATOR.validate(payload) is True


@seed(0)
@settings(max_examples=50)
@given(st.text(min_size=1, max_size=100).filter(lambda s: s.strip() and s not in KNOWN_EVENTS))
def test_unknown_events_are_rejected(event: str) -> None:
    assert VALIDATOR.validate({"event": event}) is False


@seed(0)
@settings(max_examples=50)
@given(
    st.sampled_from(sorted(KNOWN_EVENTS - {KnownEvent.LOG_MESSAGE.value})),
    st.dictionaries(KEYS, VALUES, max_size=4),
)
def test_known_events_are_accepted(event: str, extra) -> None:
    assert VALIDATOR.validate({**extra, "event": event}) is True


@seed(0)
@settings(max_examples=50)
@given(st.text(max_size=1200), st.sampled_from(sorted(LOG_LEVELS) + ["trace", "INFO"]))
def test_log_message_event_follows_message_rules(message: str, level: str) -> None:
    payload = {"event": KnownEvent.LOG_MESSAGE.value, "level": level, "message": message, "context": {}}
    expected = bool(message.strip()) and len(message) <= 1000 and level in LOG_LEVELS
    assert VALIDATOR.validate(payload) is expected


@seed(0)
@settings(max_examples=30, deadline=None)
@given(st.dictionaries(KEYS, VALUES, min_size=1, max_size=6))
def test_append_then_tail_round_trips_sanitized_payload(payload) -> None:
    with tempfile.TemporaryDirectory() as tmp:
        journal = build_logger({"log_base_path": tmp})
        assert journal.log_structured(payload)
        rec = json.loads(journal.tail(1))
        assert rec["data"] == sanitize_payload(payload)


@seed(0)
@settings(max_examples=50, deadline=None)
@given(
    st.lists(st.text(alphabet="abcxyz é{}\":", max_size=30), min_size=1, max_size=200),
    st.integers(min_value=1, max_value=250),
    st.integers(min_value=1, max_value=64),
)
def test_tail_matches_naive_slice(lines, n, buffer_size) -> None:
    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / "t.log"
        content = "\n".join(lines) + "\n"
        path.write_text(content, encoding="utf-8")
        store = LogStore(LogConfig(log_base_path=tmp))
        expected = "\n".join(content.rstrip("\n").split("\n")[-n:])
        assert store.tail(path, n, buffer_size=buffer_size) == expected
