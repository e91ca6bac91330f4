"""SMS inbox reader - queries an Android mmssms.db for messages and senders.

The database is opened read-only.  A missing or unreadable file is
reported as PermissionDenied, the same way the platform reports a
missing READ_SMS grant.
"""

from __future__ import annotations

import logging
import os
import sqlite3
from pathlib import Path

from .constants import DEFAULT_INBOX_DB_PATH, SMS_TYPE_INBOX
from .errors import PermissionDenied
from .models import Message

logger = logging.getLogger(__name__)


class SmsInbox:
    """Read-only access to the device SMS inbox."""

    def __init__(self, db_path: Path | None = None) -> None:
        self.db_path = Path(db_path or DEFAULT_INBOX_DB_PATH)

    def _connect(self) -> sqlite3.Connection:
        if not self.db_path.exists() or not os.access(self.db_path, os.R_OK):
            raise PermissionDenied(f"Cannot read SMS inbox at {self.db_path}")
        try:
            conn = sqlite3.connect(f"file:{self.db_path}?mode=ro", uri=True)
        except sqlite3.DatabaseError as exc:
            raise PermissionDenied(f"Cannot open SMS inbox: {exc}") from exc
        conn.row_factory = sqlite3.Row
        return conn

    def fetch_sms(
        self,
        senders: set[str] | list[str],
        start_time: int,
        excluded_ids: set[str],
    ) -> list[Message]:
        """Return inbox messages from matching senders newer than start_time.

        A message matches when its address contains any sender token
        (case-sensitive).  Results are newest first; ids in excluded_ids
        are dropped.
        """
        tokens = list(senders)
        if not tokens:
            return []

        sender_clause = " OR ".join("instr(address, ?) > 0" for _ in tokens)
        query = (
            "SELECT _id, address, body, date FROM sms "
            f"WHERE type = ? AND ({sender_clause}) AND date > ? "
            "ORDER BY date DESC"
        )
        params = [SMS_TYPE_INBOX, *tokens, start_time]

        conn = self._connect()
        try:
            rows = conn.execute(query, params).fetchall()
        except sqlite3.DatabaseError as exc:
            raise PermissionDenied(f"SMS inbox query failed: {exc}") from exc
        finally:
            conn.close()

        messages: list[Message] = []
        for row in rows:
            sms_id = str(row["_id"])
            # Skip anything already sent or hidden
            if sms_id in excluded_ids:
                continue
            messages.append(
                Message(
                    id=sms_id,
                    sender=row["address"] or "",
                    body=row["body"] or "",
                    timestamp=int(row["date"] or 0),
                )
            )

        logger.debug(
            "Read %d SMS (%d rows, %d tokens, start=%d)",
            len(messages), len(rows), len(tokens), start_time,
        )
        return messages

    def fetch_unique_senders(self) -> list[str]:
        """Return the sorted, distinct, non-blank sender addresses in the inbox."""
        conn = self._connect()
        try:
            rows = conn.execute(
                "SELECT address FROM sms WHERE type = ?", (SMS_TYPE_INBOX,)
            ).fetchall()
        except sqlite3.DatabaseError as exc:
            raise PermissionDenied(f"SMS inbox query failed: {exc}") from exc
        finally:
            conn.close()

        senders = {row["address"] for row in rows if row["address"] and row["address"].strip()}
        return sorted(senders)
