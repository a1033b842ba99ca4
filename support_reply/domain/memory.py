"""
ReplyMemory port: conversations, inbound e-mails, and generated responses.

The mailbox message id is the dedup key: an e-mail that has been marked
processed is never handled again.  A saved e-mail whose handling did not
finish stays eligible for a retry.  Every response is stored with its delivery outcome;
the ones held for review are worked through by a human, who marks them OK
or NOK and can record what they actually sent.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime

from support_reply.communication.ports import MailMessage


@dataclass
class Conversation:
    conversation_id: int
    customer_email: str
    customer_name: str
    order_number: str | None
    status: str          # "ACTIVE", "ESCALATED"
    priority: str        # "LOW", "NORMAL", "HIGH", "URGENT"
    created_at: datetime
    updated_at: datetime


@dataclass
class StoredResponse:
    response_id: int
    conversation_id: int
    message_id: str              # mailbox id of the e-mail answered
    response_text: str
    confidence: float
    source: str                  # "generative" or "fallback"
    escalated: bool
    needs_human_review: bool
    sent: bool
    sent_at: datetime | None
    draft_id: str | None
    order_data: str | None       # JSON snapshot of the orders used
    evidence: str | None         # JSON snapshot of the evidence used
    prompt_used: str
    verdict: str                 # "pending", "ok", "nok"
    actual_message_sent: str | None
    reviewer_comment: str | None
    created_at: datetime
    reviewed_at: datetime | None


class ReplyMemory(ABC):
    """Port: remember what was received, what was answered, and how."""

    # -- e-mail dedup --------------------------------------------------------

    @abstractmethod
    async def has_email_been_processed(self, message_id: str) -> bool:
        """True once mark_email_processed() has run for this message."""
        ...

    @abstractmethod
    async def save_email(self, conversation_id: int, message: MailMessage) -> None:
        """Record an inbound e-mail under its conversation."""
        ...

    @abstractmethod
    async def mark_email_processed(self, message_id: str) -> None:
        ...

    # -- conversations -------------------------------------------------------

    @abstractmethod
    async def get_or_create_conversation(
        self, customer_email: str, customer_name: str = ""
    ) -> Conversation:
        """One conversation per customer e-mail address."""
        ...

    @abstractmethod
    async def get_conversation(self, conversation_id: int) -> Conversation | None:
        ...

    @abstractmethod
    async def set_conversation_order(self, conversation_id: int, order_number: str) -> None:
        ...

    @abstractmethod
    async def update_conversation(
        self, conversation_id: int, status: str, priority: str
    ) -> None:
        ...

    @abstractmethod
    async def get_conversation_history(self, limit: int = 50) -> list[Conversation]:
        """Most recently updated conversations first."""
        ...

    @abstractmethod
    async def get_escalated_conversations(self) -> list[Conversation]:
        ...

    # -- responses -----------------------------------------------------------

    @abstractmethod
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
        """Save a generated response. Returns the response_id."""
        ...

    @abstractmethod
    async def get_response(self, response_id: int) -> StoredResponse | None:
        ...

    @abstractmethod
    async def get_responses_for_email(self, message_id: str) -> list[StoredResponse]:
        ...

    @abstractmethod
    async def get_pending_reviews(self) -> list[StoredResponse]:
        """Responses held for review and not yet reviewed, oldest first."""
        ...

    @abstractmethod
    async def review_response(
        self,
        response_id: int,
        verdict: str,
        actual_message_sent: str | None = None,
        reviewer_comment: str | None = None,
    ) -> None:
        """
        Record the reviewer's verdict on a held response.

        verdict: "ok" (send the draft as-is) or "nok" (reviewer wrote something else)
        actual_message_sent: what the reviewer actually sent
        reviewer_comment: why they changed it
        """
        ...
