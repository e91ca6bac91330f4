"""Tests for the SMS inbox reader."""

import pytest

from conftest import HOUR_MS, make_inbox_db
from sms_forwarder.errors import PermissionDenied
from sms_forwarder.inbox import SmsInbox


def test_fetch_sms_substring_match(inbox, now_ms):
    """Any address containing a token qualifies."""
    messages = inbox.fetch_sms({"BANK"}, now_ms - 24 * HOUR_MS, set())
    assert [m.id for m in messages] == ["1", "3"]
    assert all("BANK" in m.sender for m in messages)


def test_fetch_sms_newest_first(inbox, now_ms):
    messages = inbox.fetch_sms({"BANK", "SHOP", "+1555"}, 0, set())
    timestamps = [m.timestamp for m in messages]
    assert timestamps == sorted(timestamps, reverse=True)
    assert [m.id for m in messages] == ["1", "2", "3", "4", "5"]


def test_fetch_sms_start_time_is_strict(tmp_path):
    db = make_inbox_db(tmp_path / "inbox.db", [
        ("10", "BANK", "at bound", 1_000),
        ("11", "BANK", "after bound", 1_001),
    ])
    messages = SmsInbox(db_path=db).fetch_sms({"BANK"}, 1_000, set())
    assert [m.id for m in messages] == ["11"]


def test_fetch_sms_is_case_sensitive(inbox):
    assert inbox.fetch_sms({"bank"}, 0, set()) == []


def test_fetch_sms_drops_excluded_ids(inbox):
    messages = inbox.fetch_sms({"BANK"}, 0, {"1", "5"})
    assert [m.id for m in messages] == ["3"]


def test_fetch_sms_ignores_sent_box(inbox):
    """Rows with type != inbox are never returned."""
    ids = [m.id for m in inbox.fetch_sms({"BANK-XYZ"}, 0, set())]
    assert "6" not in ids


def test_fetch_sms_record_fields(inbox, now_ms):
    message = inbox.fetch_sms({"SHOP"}, 0, set())[0]
    assert message.id == "2"
    assert message.sender == "SHOP-ABC"
    assert message.body == "Flat 50% off this weekend"
    assert message.timestamp == now_ms - 2 * HOUR_MS
    assert message.sent is False


def test_fetch_sms_empty_senders_skips_store(tmp_path):
    """Empty sender set returns [] without opening the database."""
    missing = SmsInbox(db_path=tmp_path / "does-not-exist.db")
    assert missing.fetch_sms(set(), 0, set()) == []
    assert missing.fetch_sms([], 12345, {"1"}) == []


def test_fetch_sms_missing_db_is_permission_denied(tmp_path):
    missing = SmsInbox(db_path=tmp_path / "does-not-exist.db")
    with pytest.raises(PermissionDenied):
        missing.fetch_sms({"BANK"}, 0, set())


def test_fetch_unique_senders(inbox):
    senders = inbox.fetch_unique_senders()
    assert senders == ["+15551234567", "AX-BANK", "BANK-XYZ", "SHOP-ABC"]


def test_fetch_unique_senders_skips_blank(tmp_path):
    db = make_inbox_db(tmp_path / "inbox.db", [
        (1, "   ", "blank", 1),
        (2, None, "null", 2),
        (3, "B", "x", 3),
        (4, "A", "y", 4),
        (5, "B", "z", 5),
    ])
    assert SmsInbox(db_path=db).fetch_unique_senders() == ["A", "B"]


def test_fetch_unique_senders_missing_db(tmp_path):
    with pytest.raises(PermissionDenied):
        SmsInbox(db_path=tmp_path / "nope.db").fetch_unique_senders()


@pytest.fixture
def junk_inbox(tmp_path):
    db = tmp_path / "junk.db"
    db.write_bytes(b"this is not sqlite" * 100)
    return SmsInbox(db_path=db)


def test_fetch_sms_corrupt_db_is_permission_denied(junk_inbox):
    with pytest.raises(PermissionDenied, match="query failed"):
        junk_inbox.fetch_sms({"BANK"}, 0, set())


def test_fetch_unique_senders_corrupt_db(junk_inbox):
    with pytest.raises(PermissionDenied, match="query failed"):
        junk_inbox.fetch_unique_senders()
