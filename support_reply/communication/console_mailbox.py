from dataclasses import dataclass
from datetime import datetime, timezone

from .ports import Mailbox, MailMessage


@dataclass
class OutgoingMail:
    to: str
    subject: str
    body: str
    thread_id: str | None = None


class ConsoleMailbox(Mailbox):
    """Adapter: print to console, buffer mail in memory. For dev/testing."""

    def __init__(self, fail_send: bool = False, fail_draft: bool = False):
        self.fail_send = fail_send
        self.fail_draft = fail_draft
        self._unread: dict[str, MailMessage] = {}
        self.sent: list[OutgoingMail] = []
        self.drafts: list[OutgoingMail] = []
        self.read: list[str] = []

    async def list_unread(self) -> list[MailMessage]:
        return sorted(self._unread.values(), key=lambda m: m.received_at)

    async def mark_read(self, message_id: str) -> None:
        self._unread.pop(message_id, None)
        self.read.append(message_id)

    async def send_reply(
        self, to: str, subject: str, body: str, thread_id: str | None = None
    ) -> bool:
        if self.fail_send:
            return False
        self.sent.append(OutgoingMail(to, subject, body, thread_id))
        self._print("SENT", to, subject, body)
        return True

    async def create_draft(
        self, to: str, subject: str, body: str, thread_id: str | None = None
    ) -> str | None:
        if self.fail_draft:
            return None
        self.drafts.append(OutgoingMail(to, subject, body, thread_id))
        self._print("DRAFT", to, subject, body)
        return f"console-draft-{len(self.drafts)}"

    def simulate_incoming(
        self,
        message_id: str,
        body: str,
        from_email: str = "customer@example.com",
        from_name: str = "",
        subject: str = "Question about my order",
    ) -> MailMessage:
        """Call from tests or a dev CLI to simulate a customer e-mail."""
        message = MailMessage(
            message_id=message_id,
            thread_id=message_id,
            subject=subject,
            from_email=from_email,
            from_name=from_name,
            body=body,
            received_at=datetime.now(timezone.utc),
        )
        self._unread[message_id] = message
        return message

    @staticmethod
    def _print(label: str, to: str, subject: str, body: str) -> None:
        print(f"\n{'=' * 60}")
        print(f"  {label} TO: {to}")
        print(f"  SUBJECT: {subject}")
        print(f"{'=' * 60}")
        print(body)
        print(f"{'=' * 60}\n")
