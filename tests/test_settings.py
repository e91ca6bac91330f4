"""Tests for the settings store and sent id tracker."""

from sms_forwarder.settings import SentSmsTracker, SettingsStore


def test_defaults(settings):
    assert settings.server_url == ""
    assert settings.email == ""
    assert settings.password == ""
    assert settings.sender_list == ""
    assert settings.access_token == ""
    assert settings.last_fetch_timestamp == 0


def test_values_persist_across_instances(tmp_path):
    db_path = tmp_path / "settings.db"

    with SettingsStore(db_path=db_path) as store:
        store.save_server_url("https://api.example.com")
        store.save_email("asha@example.com")
        store.save_password("s3cret")
        store.save_sender_list("BANK,SHOP")
        store.save_access_token("tok123")
        store.save_last_fetch_timestamp(1700000000000)

    with SettingsStore(db_path=db_path) as store:
        assert store.server_url == "https://api.example.com"
        assert store.email == "asha@example.com"
        assert store.password == "s3cret"
        assert store.sender_list == "BANK,SHOP"
        assert store.access_token == "tok123"
        assert store.last_fetch_timestamp == 1700000000000


def test_overwrite(settings):
    settings.save_email("a@example.com")
    settings.save_email("b@example.com")
    assert settings.email == "b@example.com"


def test_tracker_empty(settings):
    assert SentSmsTracker(settings).read_all() == set()


def test_tracker_add_is_idempotent(settings):
    tracker = SentSmsTracker(settings)
    tracker.add("m1")
    once = settings.get("sent_sms_ids")
    tracker.add("m1")
    assert settings.get("sent_sms_ids") == once
    assert tracker.read_all() == {"m1"}


def test_tracker_is_append_only(settings):
    tracker = SentSmsTracker(settings)
    for sms_id in ["3", "1", "2", "1"]:
        tracker.add(sms_id)
    assert tracker.read_all() == {"1", "2", "3"}
    assert settings.get("sent_sms_ids") == "3,1,2"


def test_get_info_masks_password(settings):
    settings.save_password("hunter2")
    SentSmsTracker(settings).add("9")
    info = settings.get_info()
    assert info["password"] == "*******"
    assert info["has_token"] is False
    assert info["excluded_count"] == 1
