# tests/unit/test_facade.py

import json
from pathlib import Path

import pytest

from guardlog import LogFacade, build_logger
from guardlog.config import LogConfig
from guardlog.errors import ConfigError, FailureKind
from guardlog.sanitize import sanitize_payload
from guardlog.store import TAIL_UNAVAILABLE


def last_record(journal: LogFacade) -> dict:
    return json.loads(journal.tail(1))


# ---------------------------------------------------------------------------
# Assembly
# ---------------------------------------------------------------------------


def test_build_logger_wires_one_config_through(tmp_path):
    journal = build_logger({"log_base_path": str(tmp_path), "max_log_size": 4096})
    assert journal.config.max_log_size == 4096
    assert journal.store.config is journal.config
    assert journal.validator.config is journal.config
    assert journal.get_log_file_path() == str(tmp_path / "tb-logs" / "wc_checkout_guard.log")


def test_build_logger_instances_are_independent(tmp_path):
    a = build_logger({"log_base_path": str(tmp_path / "a")})
    b = build_logger({"log_base_path": str(tmp_path / "b")})
    assert a.get_log_file_path() != b.get_log_file_path()


# ---------------------------------------------------------------------------
# Structured logging
# ---------------------------------------------------------------------------


def test_log_structured_round_trip(journal):
    payload = {
        "event": "visit_commander",
        "uri": "/commander/",
        "ip_hash": "9f86d081884c7d65",
        "user_id": 0,
        "user_agent": "Mozilla/5.0 <script>x</script>",
        "total_qty": 2,
        "lines": [{"product_id": 12, "qty": 2}],
        "session_id": None,
    }
    assert journal.log_structured(payload)
    rec = last_record(journal)
    assert rec["data"] == sanitize_payload(payload)
    assert rec["data"]["user_agent"] == "Mozilla/5.0"


def test_rejected_payload_has_no_side_effect(journal):
    result = journal.log_structured({"event": "not_in_vocabulary"})
    assert not result
    assert result.failure is FailureKind.VALIDATION
    assert not journal.store.file_exists()
    assert not journal.store.log_path.parent.exists()


def test_empty_payload_rejected(journal):
    assert journal.log_structured({}).ok is False


# ---------------------------------------------------------------------------
# Message helpers
# ---------------------------------------------------------------------------


def test_log_message_builds_log_message_event(journal):
    assert journal.log_message("cart trimmed", "warning", {"qty": 3})
    assert last_record(journal)["data"] == {
        "event": "log_message",
        "level": "warning",
        "message": "cart trimmed",
        "context": {"qty": 3},
    }


@pytest.mark.parametrize("level", ["debug", "info", "warning", "error"])
def test_level_wrappers(journal, level):
    assert getattr(journal, level)(f"{level} message")
    data = last_record(journal)["data"]
    assert data["level"] == level
    assert data["message"] == f"{level} message"
    assert data["context"] == {}


@pytest.mark.parametrize(
    "message, level",
    [("   ", "info"), ("", "info"), ("x" * 5000, "info"), ("hi", "bogus"), (None, "info")],
)
def test_log_message_rejects_invalid_message_fields(journal, message, level):
    result = journal.log_message(message, level)
    assert not result
    assert result.failure is FailureKind.VALIDATION
    assert not journal.store.file_exists()


def test_log_message_at_length_limit_is_written(journal):
    assert journal.log_message("m" * 1000, "error")
    assert last_record(journal)["data"]["message"] == "m" * 1000


def test_log_alias_defaults_to_info(journal):
    assert journal.log("hello")
    assert last_record(journal)["data"]["level"] == "info"


# ---------------------------------------------------------------------------
# Stats / rotate / purge / tail
# ---------------------------------------------------------------------------


def test_stats_before_and_after_write(journal):
    stats = journal.stats()
    assert stats == {
        "exists": False,
        "size": 0,
        "path": journal.get_log_file_path(),
        "max_size": 5 * 1024 * 1024,
        "retention_days": 14,
        "rotated_count": 0,
    }
    journal.info("first")
    stats = journal.stats()
    assert stats["exists"] is True
    assert stats["size"] == Path(journal.get_log_file_path()).stat().st_size


def test_force_rotate_and_purge(journal):
    assert journal.force_rotate() is False
    journal.info("to rotate")
    assert journal.force_rotate() is True
    assert journal.stats()["rotated_count"] == 1
    assert journal.stats()["exists"] is False
    # fresh rotation is within retention
    assert journal.purge() == 0
    # appends after rotation create a new file
    assert journal.info("after")
    assert journal.stats()["exists"] is True


def test_tail_default_and_missing(journal):
    assert journal.tail() == TAIL_UNAVAILABLE
    for i in range(5):
        journal.info(f"m{i}")
    assert len(journal.tail().split("\n")) == 5
    assert len(journal.tail(2).split("\n")) == 2


# ---------------------------------------------------------------------------
# Config updates
# ---------------------------------------------------------------------------


def test_update_config_merges_and_propagates(journal, tmp_path):
    journal.update_config({"log_filename": "renamed.log", "max_log_size": 2048})
    assert journal.config.max_log_size == 2048
    assert journal.config.purge_keep_days == 14
    assert journal.get_log_file_path().endswith("renamed.log")
    assert journal.stats()["max_size"] == 2048
    journal.info("into renamed")
    assert (tmp_path / "tb-logs" / "renamed.log").exists()


def test_update_config_policy_reaches_validator(journal):
    assert not journal.log_structured({"event": "coupon_refused"})
    journal.update_config({"extra_events": ["coupon_refused"]})
    assert journal.log_structured({"event": "coupon_refused"})


def test_update_config_invalid_keeps_previous(journal):
    before = journal.config
    with pytest.raises(ConfigError):
        journal.update_config({"max_log_sise": 10})
    assert journal.config is before


def test_update_config_warns_below_floor(journal, caplog):
    with caplog.at_level("WARNING", logger="guardlog.facade"):
        journal.update_config({"max_log_size": 100})
    assert "operational floor" in caplog.text
    assert journal.config.max_log_size == 100


def test_build_logger_accepts_model(tmp_path):
    cfg = LogConfig(log_base_path=str(tmp_path))
    assert build_logger(cfg).config is cfg
