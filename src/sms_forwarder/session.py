"""Forwarding session - the state machine behind every user action.

A ForwarderSession owns the settings store, the inbox reader and the
in-memory view state (configured fields, sender selection, fetched
messages).  Each public operation is a coroutine that:

- moves ``ui_state`` to Loading and its own entry in ``operations`` to
  Running,
- does its I/O (SQLite work in worker threads, HTTP through httpx),
- finishes in Success/Succeeded or Error/Failed.

No exception escapes an operation and nothing is retried.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Iterable

import httpx

from .api_client import ApiClient
from .constants import SENT_SUFFIX
from .errors import EmptyAuthResponse, ValidationError
from .inbox import SmsInbox
from .models import (
    Error,
    Failed,
    Idle,
    Initial,
    Loading,
    Message,
    Operation,
    OperationState,
    Running,
    Succeeded,
    Success,
    TimeFilter,
    UiState,
)
from .settings import SentSmsTracker, SettingsStore
from .timeutils import format_timestamp, start_time_for_filter

logger = logging.getLogger(__name__)


def parse_sender_list(sender_list: str) -> set[str]:
    """Split a comma-joined sender list into a set of non-blank tokens."""
    return {s.strip() for s in sender_list.split(",") if s.strip()}


def filter_senders(
    available: list[str],
    query: str,
    selected: set[str] | frozenset[str],
) -> list[str]:
    """Filter senders by a case-insensitive search and list selected ones first.

    Relative order inside the selected and unselected groups is kept.
    """
    if query.strip():
        needle = query.lower()
        senders = [s for s in available if needle in s.lower()]
    else:
        senders = list(available)
    return sorted(senders, key=lambda s: s not in selected)


def build_sms_payload(message: Message) -> str:
    """Return the text forwarded for *message*: body plus receive time."""
    return message.body + SENT_SUFFIX + format_timestamp(message.timestamp)


class ForwarderSession:
    """Explicit session context shared by all operations."""

    def __init__(
        self,
        settings: SettingsStore,
        inbox: SmsInbox,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.settings = settings
        self.inbox = inbox
        self.tracker = SentSmsTracker(settings)
        self._transport = transport

        self.server_url = ""
        self.email = ""
        self.password = ""
        self.sender_list = ""
        self.selected_senders: frozenset[str] = frozenset()
        self.available_senders: list[str] = []
        self.search_query = ""
        self.time_filter = TimeFilter.TODAY
        self.sms_list: list[Message] = []

        self.ui_state: UiState = Initial()
        self.operations: dict[Operation, OperationState] = {op: Idle() for op in Operation}
        self._list_lock = asyncio.Lock()

    # --- lifecycle ---

    async def initialize(self) -> None:
        """Load saved settings and seed the sender selection."""
        settings = self.settings
        self.server_url = await asyncio.to_thread(lambda: settings.server_url)
        self.email = await asyncio.to_thread(lambda: settings.email)
        self.password = await asyncio.to_thread(lambda: settings.password)
        self.sender_list = await asyncio.to_thread(lambda: settings.sender_list)
        if self.sender_list:
            self.selected_senders = frozenset(parse_sender_list(self.sender_list))

    def close(self) -> None:
        self.settings.close()

    def __enter__(self) -> ForwarderSession:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        self.close()

    # --- derived view ---

    @property
    def filtered_senders(self) -> list[str]:
        return filter_senders(self.available_senders, self.search_query, self.selected_senders)

    def is_busy(self, op: Operation) -> bool:
        return isinstance(self.operations[op], Running)

    @property
    def sending_sms_id(self) -> str | None:
        state = self.operations[Operation.SEND_SMS]
        return state.target if isinstance(state, Running) else None

    @property
    def hiding_sms_id(self) -> str | None:
        state = self.operations[Operation.HIDE_SMS]
        return state.target if isinstance(state, Running) else None

    # --- setters ---

    def update_server_url(self, url: str) -> None:
        self.server_url = url

    def update_email(self, email: str) -> None:
        self.email = email

    def update_password(self, password: str) -> None:
        self.password = password

    def update_sender_list(self, sender_list: str) -> None:
        self.sender_list = sender_list

    def update_selected_senders(self, selected: Iterable[str]) -> None:
        self.selected_senders = frozenset(selected)
        # Keep the comma-joined form in step for older readers
        self.sender_list = ",".join(sorted(self.selected_senders))

    def update_time_filter(self, time_filter: TimeFilter) -> None:
        self.time_filter = time_filter

    def update_search_query(self, query: str) -> None:
        self.search_query = query

    # --- state transitions ---

    def _start(self, op: Operation, target: str | None = None) -> None:
        self.operations[op] = Running(target)
        self.ui_state = Loading()

    def _succeed(self, op: Operation, message: str) -> None:
        logger.info("%s: %s", op.value, message)
        self.operations[op] = Succeeded(message)
        self.ui_state = Success(message)

    def _fail(self, op: Operation, message: str) -> None:
        logger.error("%s: %s", op.value, message)
        self.operations[op] = Failed(message)
        self.ui_state = Error(message)

    async def _remove_from_list(self, sms_id: str) -> None:
        async with self._list_lock:
            self.sms_list = [m for m in self.sms_list if m.id != sms_id]

    # --- operations ---

    async def save_user_data(self) -> None:
        op = Operation.SAVE_USER_DATA
        self._start(op)
        settings = self.settings
        try:
            await asyncio.to_thread(settings.save_server_url, self.server_url)
            await asyncio.to_thread(settings.save_email, self.email)
            await asyncio.to_thread(settings.save_password, self.password)
            await asyncio.to_thread(settings.save_sender_list, self.sender_list)
        except Exception as exc:  # noqa: BLE001
            self._fail(op, f"Failed to save user data: {exc}")
            return
        self._succeed(op, "User data saved successfully")

    async def fetch_token(self) -> None:
        op = Operation.FETCH_TOKEN
        self._start(op)
        try:
            if not self.server_url:
                raise ValidationError("Server URL cannot be empty")
            if not self.email:
                raise ValidationError("Email cannot be empty")
            if not self.password:
                raise ValidationError("Password cannot be empty")
        except ValidationError as exc:
            self._fail(op, str(exc))
            return

        try:
            async with ApiClient(self.server_url, transport=self._transport) as client:
                auth = await client.authenticate(self.email, self.password)
            await asyncio.to_thread(self.settings.save_access_token, auth.access_token)
        except EmptyAuthResponse as exc:
            self._fail(op, str(exc))
            return
        except Exception as exc:  # noqa: BLE001
            self._fail(op, f"Authentication failed: {exc}")
            return
        self._succeed(op, "Authentication successful")

    async def fetch_available_senders(self) -> None:
        op = Operation.FETCH_SENDERS
        self._start(op)
        try:
            senders = await asyncio.to_thread(self.inbox.fetch_unique_senders)
        except Exception as exc:  # noqa: BLE001
            self._fail(op, f"Failed to fetch senders: {exc}")
            return

        self.available_senders = senders
        if self.sender_list and not self.selected_senders:
            self.selected_senders = frozenset(parse_sender_list(self.sender_list))
        self._succeed(op, f"Found {len(senders)} unique senders")

    async def fetch_sms_messages(self) -> None:
        op = Operation.FETCH_SMS
        self._start(op)
        try:
            if self.selected_senders:
                senders = set(self.selected_senders)
            else:
                senders = parse_sender_list(self.sender_list)
            if not senders:
                raise ValidationError("Sender list cannot be empty")
        except ValidationError as exc:
            self._fail(op, str(exc))
            return

        try:
            excluded = await asyncio.to_thread(self.tracker.read_all)
            start_time = start_time_for_filter(self.time_filter)
            messages = await asyncio.to_thread(
                self.inbox.fetch_sms, senders, start_time, excluded
            )
            async with self._list_lock:
                self.sms_list = messages
            now_ms = int(time.time() * 1000)
            await asyncio.to_thread(self.settings.save_last_fetch_timestamp, now_ms)
        except Exception as exc:  # noqa: BLE001
            self._fail(op, f"Failed to fetch SMS messages: {exc}")
            return

        if messages:
            self._succeed(op, f"{len(messages)} SMS messages fetched successfully")
        else:
            self._succeed(op, "No SMS messages found for the selected time period")

    async def send_sms_content(self, message: Message) -> None:
        op = Operation.SEND_SMS
        self._start(op, message.id)
        try:
            if not self.server_url:
                raise ValidationError("Server URL cannot be empty")
            access_token = await asyncio.to_thread(lambda: self.settings.access_token)
            if not access_token:
                raise ValidationError("Access token is not available. Please fetch token first.")
        except ValidationError as exc:
            self._fail(op, str(exc))
            return
        except Exception as exc:  # noqa: BLE001
            self._fail(op, f"Failed to send SMS content: {exc}")
            return

        try:
            async with ApiClient(self.server_url, transport=self._transport) as client:
                await client.send_sms_content(access_token, build_sms_payload(message))
            await asyncio.to_thread(self.tracker.add, message.id)
            await self._remove_from_list(message.id)
        except Exception as exc:  # noqa: BLE001
            self._fail(op, f"Failed to send SMS content: {exc}")
            return
        message.sent = True
        self._succeed(op, "SMS content sent successfully")

    async def hide_sms_message(self, message: Message) -> None:
        op = Operation.HIDE_SMS
        self._start(op, message.id)
        try:
            await self._remove_from_list(message.id)
            # A failed write leaves the message out of the list until the next fetch
            await asyncio.to_thread(self.tracker.add, message.id)
        except Exception as exc:  # noqa: BLE001
            self._fail(op, f"Failed to hide SMS: {exc}")
            return
        self._succeed(op, "SMS hidden successfully")

    def find_message(self, sms_id: str) -> Message | None:
        for message in self.sms_list:
            if message.id == sms_id:
                return message
        return None
