"""Shared fixtures for tests."""

from __future__ import annotations

import locale
import sqlite3
import time
from pathlib import Path

import httpx
import pytest

from sms_forwarder.inbox import SmsInbox
from sms_forwarder.session import ForwarderSession
from sms_forwarder.settings import SettingsStore

HOUR_MS = 60 * 60 * 1000

_CREATE_SMS_SQL = """
CREATE TABLE sms (
    _id INTEGER PRIMARY KEY AUTOINCREMENT,
    thread_id INTEGER,
    address TEXT,
    date INTEGER,
    read INTEGER DEFAULT 0,
    type INTEGER,
    body TEXT
);
"""


def make_inbox_db(path: Path, rows: list[tuple]) -> Path:
    """Create an Android-style SMS database.

    Each row is (_id, address, body, date) for an inbox message, or
    (_id, address, body, date, type) to set the message type.
    """
    conn = sqlite3.connect(str(path))
    with conn:
        conn.executescript(_CREATE_SMS_SQL)
        for row in rows:
            sms_id, address, body, date, *rest = row
            sms_type = rest[0] if rest else 1
            conn.execute(
                "INSERT INTO sms (_id, address, body, date, type) VALUES (?, ?, ?, ?, ?)",
                (sms_id, address, body, date, sms_type),
            )
    conn.close()
    return path


@pytest.fixture(autouse=True)
def restore_time_locale():
    """CLI runs switch LC_TIME to the system locale; put it back afterwards."""
    saved = locale.setlocale(locale.LC_TIME)
    yield
    locale.setlocale(locale.LC_TIME, saved)


@pytest.fixture
def now_ms() -> int:
    return int(time.time() * 1000)


@pytest.fixture
def inbox_rows(now_ms: int) -> list[tuple]:
    return [
        (1, "BANK-XYZ", "Rs 500 debited from A/c XX1234", now_ms - 1 * HOUR_MS),
        (2, "SHOP-ABC", "Flat 50% off this weekend", now_ms - 2 * HOUR_MS),
        (3, "AX-BANK", "Rs 1200 credited to A/c XX1234", now_ms - 3 * HOUR_MS),
        (4, "+15551234567", "See you at 7?", now_ms - 4 * HOUR_MS),
        (5, "BANK-XYZ", "Your OTP is 482913", now_ms - 30 * 24 * HOUR_MS),
        (6, "BANK-XYZ", "Outgoing reply", now_ms - 1 * HOUR_MS, 2),
        (7, "", "No address", now_ms - 1 * HOUR_MS),
    ]


@pytest.fixture
def inbox_db(tmp_path: Path, inbox_rows: list[tuple]) -> Path:
    return make_inbox_db(tmp_path / "mmssms.db", inbox_rows)


@pytest.fixture
def inbox(inbox_db: Path) -> SmsInbox:
    return SmsInbox(db_path=inbox_db)


@pytest.fixture
def settings(tmp_path: Path):
    with SettingsStore(db_path=tmp_path / "settings.db") as store:
        yield store


class FakeServer:
    """Records requests and answers like the forwarding backend."""

    def __init__(self, token: str = "tok123", auth_status: int = 200, send_status: int = 200):
        self.token = token
        self.auth_status = auth_status
        self.send_status = send_status
        self.auth_body: dict | None = None
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path.endswith("/api/v1/auth/authenticate"):
            if self.auth_status != 200:
                return httpx.Response(self.auth_status)
            body = self.auth_body if self.auth_body is not None else {
                "message": "ok",
                "code": "200",
                "access_token": self.token,
                "refresh_token": "refresh456",
                "user": {
                    "firstname": "Asha",
                    "lastname": "Rao",
                    "email": "asha@example.com",
                },
            }
            return httpx.Response(200, json=body)
        if request.url.path.endswith("/api/v1/genAi"):
            return httpx.Response(self.send_status)
        return httpx.Response(404)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def server() -> FakeServer:
    return FakeServer()


@pytest.fixture
def session(settings: SettingsStore, inbox: SmsInbox, server: FakeServer) -> ForwarderSession:
    return ForwarderSession(settings, inbox, transport=server.transport)
