from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime


@dataclass
class MailMessage:
    """An inbound customer e-mail."""

    message_id: str  # mailbox id; the dedup key
    thread_id: str
    subject: str
    from_email: str
    from_name: str
    body: str
    received_at: datetime


class MailboxReader(ABC):
    """
    Port: read the support inbox.

    The business logic depends ONLY on this interface.
    It doesn't know or care whether mail comes over IMAP or from
    an in-memory console simulator.
    """

    @abstractmethod
    async def list_unread(self) -> list[MailMessage]:
        """Unread inbox messages, oldest first."""
        ...

    @abstractmethod
    async def mark_read(self, message_id: str) -> None:
        ...


class MailboxWriter(ABC):
    """Port: answer customers, either directly or through a draft."""

    @abstractmethod
    async def send_reply(
        self, to: str, subject: str, body: str, thread_id: str | None = None
    ) -> bool:
        """Send a reply. Returns False when the mail could not be sent."""
        ...

    @abstractmethod
    async def create_draft(
        self, to: str, subject: str, body: str, thread_id: str | None = None
    ) -> str | None:
        """Save a reply as a draft for human review. Returns the draft id, or None."""
        ...


class Mailbox(MailboxReader, MailboxWriter):
    """Both sides of one mailbox account."""
