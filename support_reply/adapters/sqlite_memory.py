"""
SQLite adapter for ReplyMemory.

Use ":memory:" for tests, a file path for production.
"""

import sqlite3
from datetime import datetime, timezone

from support_reply.communication.ports import MailMessage
from support_reply.domain.memory import Conversation, ReplyMemory, StoredResponse

_SCHEMA = """
CREATE TABLE IF NOT EXISTS conversations (
    id              INTEGER PRIMARY KEY AUTOINCREMENT,
    customer_email  TEXT NOT NULL UNIQUE,
    customer_name   TEXT NOT NULL DEFAULT '',
    order_number    TEXT,
    status          TEXT NOT NULL DEFAULT 'ACTIVE',
    priority        TEXT NOT NULL DEFAULT 'NORMAL',
    created_at      TEXT NOT NULL,
    updated_at      TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS emails (
    id              INTEGER PRIMARY KEY AUTOINCREMENT,
    message_id      TEXT NOT NULL UNIQUE,
    conversation_id INTEGER NOT NULL REFERENCES conversations(id),
    thread_id       TEXT NOT NULL DEFAULT '',
    subject         TEXT NOT NULL DEFAULT '',
    from_email      TEXT NOT NULL,
    from_name       TEXT NOT NULL DEFAULT '',
    body            TEXT NOT NULL,
    received_at     TEXT NOT NULL,
    processed       INTEGER NOT NULL DEFAULT 0,
    processed_at    TEXT
);

CREATE TABLE IF NOT EXISTS responses (
    id              INTEGER PRIMARY KEY AUTOINCREMENT,
    conversation_id INTEGER NOT NULL REFERENCES conversations(id),
    message_id      TEXT NOT NULL,
    response_text   TEXT NOT NULL,
    confidence      REAL NOT NULL,
    source          TEXT NOT NULL,
    escalated       INTEGER NOT NULL,
    needs_human_review INTEGER NOT NULL,
    sent            INTEGER NOT NULL DEFAULT 0,
    sent_at         TEXT,
    draft_id        TEXT,
    order_data      TEXT,
    evidence        TEXT,
    prompt_used     TEXT NOT NULL DEFAULT '',
    verdict         TEXT NOT NULL DEFAULT 'pending',
    actual_message_sent TEXT,
    reviewer_comment TEXT,
    created_at      TEXT NOT NULL,
    reviewed_at     TEXT
);
"""


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _parse_dt(s: str | None) -> datetime | None:
    return datetime.fromisoformat(s) if s else None


class SqliteReplyMemory(ReplyMemory):

    def __init__(self, db_path: str = "support.db"):
        self._conn = sqlite3.connect(db_path)
        self._conn.row_factory = sqlite3.Row
        self._conn.executescript(_SCHEMA)

    # -- e-mail dedup --------------------------------------------------------

    async def has_email_been_processed(self, message_id: str) -> bool:
        row = self._conn.execute(
            "SELECT 1 FROM emails WHERE message_id = ? AND processed = 1", (message_id,)
        ).fetchone()
        return row is not None

    async def save_email(self, conversation_id: int, message: MailMessage) -> None:
        self._conn.execute(
            "INSERT OR IGNORE INTO emails"
            " (message_id, conversation_id, thread_id, subject, from_email, from_name,"
            "  body, received_at)"
            " VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
            (message.message_id, conversation_id, message.thread_id, message.subject,
             message.from_email, message.from_name, message.body,
             message.received_at.isoformat()),
        )
        self._conn.commit()

    async def mark_email_processed(self, message_id: str) -> None:
        self._conn.execute(
            "UPDATE emails SET processed = 1, processed_at = ? WHERE message_id = ?",
            (_now(), message_id),
        )
        self._conn.commit()

    # -- conversations -------------------------------------------------------

    async def get_or_create_conversation(
        self, customer_email: str, customer_name: str = ""
    ) -> Conversation:
        email = customer_email.lower()
        row = self._conn.execute(
            "SELECT * FROM conversations WHERE customer_email = ?", (email,)
        ).fetchone()
        if row:
            return self._row_to_conversation(row)

        now = _now()
        cur = self._conn.execute(
            "INSERT INTO conversations (customer_email, customer_name, created_at, updated_at)"
            " VALUES (?, ?, ?, ?)",
            (email, customer_name, now, now),
        )
        self._conn.commit()
        assert cur.lastrowid is not None
        conversation = await self.get_conversation(cur.lastrowid)
        assert conversation is not None
        return conversation

    async def get_conversation(self, conversation_id: int) -> Conversation | None:
        row = self._conn.execute(
            "SELECT * FROM conversations WHERE id = ?", (conversation_id,)
        ).fetchone()
        if not row:
            return None
        return self._row_to_conversation(row)

    async def set_conversation_order(self, conversation_id: int, order_number: str) -> None:
        self._conn.execute(
            "UPDATE conversations SET order_number = ?, updated_at = ? WHERE id = ?",
            (order_number, _now(), conversation_id),
        )
        self._conn.commit()

    async def update_conversation(
        self, conversation_id: int, status: str, priority: str
    ) -> None:
        self._conn.execute(
            "UPDATE conversations SET status = ?, priority = ?, updated_at = ? WHERE id = ?",
            (status, priority, _now(), conversation_id),
        )
        self._conn.commit()

    async def get_conversation_history(self, limit: int = 50) -> list[Conversation]:
        rows = self._conn.execute(
            "SELECT * FROM conversations ORDER BY updated_at DESC, id DESC LIMIT ?",
            (limit,),
        ).fetchall()
        return [self._row_to_conversation(r) for r in rows]

    async def get_escalated_conversations(self) -> list[Conversation]:
        rows = self._conn.execute(
            "SELECT * FROM conversations WHERE status = 'ESCALATED'"
            " ORDER BY updated_at DESC, id DESC"
        ).fetchall()
        return [self._row_to_conversation(r) for r in rows]

    @staticmethod
    def _row_to_conversation(row) -> Conversation:
        return Conversation(
            conversation_id=row["id"],
            customer_email=row["customer_email"],
            customer_name=row["customer_name"],
            order_number=row["order_number"],
            status=row["status"],
            priority=row["priority"],
            created_at=_parse_dt(row["created_at"]),
            updated_at=_parse_dt(row["updated_at"]),
        )

    # -- responses -----------------------------------------------------------

    async def save_response(
        self,
        conversation_id: int,
        message_id: str,
        response_text: str,
        confidence: float,
        source: str,
        escalated: bool,
        needs_human_review: bool,
        sent: bool = False,
        draft_id: str | None = None,
        order_data: str | None = None,
        evidence: str | None = None,
        prompt_used: str = "",
    ) -> int:
        now = _now()
        cur = self._conn.execute(
            "INSERT INTO responses"
            " (conversation_id, message_id, response_text, confidence, source, escalated,"
            "  needs_human_review, sent, sent_at, draft_id, order_data, evidence,"
            "  prompt_used, created_at)"
            " VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
            (conversation_id, message_id, response_text, confidence, source,
             int(escalated), int(needs_human_review), int(sent), now if sent else None,
             draft_id, order_data, evidence, prompt_used, now),
        )
        self._conn.commit()
        assert cur.lastrowid is not None
        return cur.lastrowid

    async def get_response(self, response_id: int) -> StoredResponse | None:
        row = self._conn.execute(
            "SELECT * FROM responses WHERE id = ?", (response_id,)
        ).fetchone()
        if not row:
            return None
        return self._row_to_response(row)

    async def get_responses_for_email(self, message_id: str) -> list[StoredResponse]:
        rows = self._conn.execute(
            "SELECT * FROM responses WHERE message_id = ? ORDER BY id", (message_id,)
        ).fetchall()
        return [self._row_to_response(r) for r in rows]

    async def get_pending_reviews(self) -> list[StoredResponse]:
        rows = self._conn.execute(
            "SELECT * FROM responses WHERE needs_human_review = 1 AND verdict = 'pending'"
            " ORDER BY id"
        ).fetchall()
        return [self._row_to_response(r) for r in rows]

    async def review_response(
        self,
        response_id: int,
        verdict: str,
        actual_message_sent: str | None = None,
        reviewer_comment: str | None = None,
    ) -> None:
        self._conn.execute(
            "UPDATE responses SET verdict = ?, actual_message_sent = ?,"
            " reviewer_comment = ?, reviewed_at = ? WHERE id = ?",
            (verdict, actual_message_sent, reviewer_comment, _now(), response_id),
        )
        self._conn.commit()

    @staticmethod
    def _row_to_response(row) -> StoredResponse:
        return StoredResponse(
            response_id=row["id"],
            conversation_id=row["conversation_id"],
            message_id=row["message_id"],
            response_text=row["response_text"],
            confidence=row["confidence"],
            source=row["source"],
            escalated=bool(row["escalated"]),
            needs_human_review=bool(row["needs_human_review"]),
            sent=bool(row["sent"]),
            sent_at=_parse_dt(row["sent_at"]),
            draft_id=row["draft_id"],
            order_data=row["order_data"],
            evidence=row["evidence"],
            prompt_used=row["prompt_used"],
            verdict=row["verdict"],
            actual_message_sent=row["actual_message_sent"],
            reviewer_comment=row["reviewer_comment"],
            created_at=_parse_dt(row["created_at"]),
            reviewed_at=_parse_dt(row["reviewed_at"]),
        )
