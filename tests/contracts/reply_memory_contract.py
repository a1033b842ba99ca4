"""Contract tests for any ReplyMemory implementation."""

from abc import ABC, abstractmethod
from datetime import datetime, timezone

import pytest

from support_reply.communication.ports import MailMessage
from support_reply.domain.memory import ReplyMemory


def _msg(message_id: str = "msg-1", from_email: str = "anna@example.com") -> MailMessage:
    return MailMessage(
        message_id=message_id,
        thread_id=f"thread-{message_id}",
        subject="Where is my order?",
        from_email=from_email,
        from_name="Anna",
        body="Hi, where is my order #1001?",
        received_at=datetime(2026, 3, 1, 9, 30, tzinfo=timezone.utc),
    )


class ReplyMemoryContract(ABC):

    @abstractmethod
    def create_memory(self) -> ReplyMemory:
        ...

    async def _response(self, mem: ReplyMemory, message_id: str = "msg-1", **overrides) -> int:
        conv = await mem.get_or_create_conversation("anna@example.com", "Anna")
        fields = dict(
            response_text="Thank you for your message, your order #1001 has shipped.",
            confidence=0.85,
            source="generative",
            escalated=False,
            needs_human_review=False,
        )
        fields.update(overrides)
        return await mem.save_response(conv.conversation_id, message_id, **fields)

    # -- e-mail dedup --------------------------------------------------------

    @pytest.mark.asyncio
    async def test_email_not_processed_by_default(self):
        mem = self.create_memory()
        assert await mem.has_email_been_processed("unknown") is False

    @pytest.mark.asyncio
    async def test_saved_email_not_processed_until_marked(self):
        mem = self.create_memory()
        conv = await mem.get_or_create_conversation("anna@example.com", "Anna")
        await mem.save_email(conv.conversation_id, _msg())
        assert await mem.has_email_been_processed("msg-1") is False

    @pytest.mark.asyncio
    async def test_save_email_is_idempotent(self):
        mem = self.create_memory()
        conv = await mem.get_or_create_conversation("anna@example.com", "Anna")
        await mem.save_email(conv.conversation_id, _msg())
        await mem.save_email(conv.conversation_id, _msg())  # must not raise
        assert await mem.has_email_been_processed("msg-1") is False

    @pytest.mark.asyncio
    async def test_mark_email_processed(self):
        mem = self.create_memory()
        conv = await mem.get_or_create_conversation("anna@example.com", "Anna")
        await mem.save_email(conv.conversation_id, _msg())
        await mem.mark_email_processed("msg-1")  # must not raise
        assert await mem.has_email_been_processed("msg-1") is True

    # -- conversations -------------------------------------------------------

    @pytest.mark.asyncio
    async def test_one_conversation_per_customer(self):
        mem = self.create_memory()
        c1 = await mem.get_or_create_conversation("anna@example.com", "Anna")
        c2 = await mem.get_or_create_conversation("anna@example.com", "Anna")
        c3 = await mem.get_or_create_conversation("bob@example.com", "Bob")
        assert c1.conversation_id == c2.conversation_id
        assert c3.conversation_id != c1.conversation_id

    @pytest.mark.asyncio
    async def test_new_conversation_defaults(self):
        mem = self.create_memory()
        conv = await mem.get_or_create_conversation("anna@example.com", "Anna")
        assert conv.status == "ACTIVE"
        assert conv.priority == "NORMAL"
        assert conv.order_number is None
        assert conv.customer_name == "Anna"

    @pytest.mark.asyncio
    async def test_get_unknown_conversation_returns_none(self):
        mem = self.create_memory()
        assert await mem.get_conversation(9999) is None

    @pytest.mark.asyncio
    async def test_set_conversation_order(self):
        mem = self.create_memory()
        conv = await mem.get_or_create_conversation("anna@example.com", "Anna")
        await mem.set_conversation_order(conv.conversation_id, "1001")
        updated = await mem.get_conversation(conv.conversation_id)
        assert updated.order_number == "1001"

    @pytest.mark.asyncio
    async def test_update_conversation_status_and_priority(self):
        mem = self.create_memory()
        conv = await mem.get_or_create_conversation("anna@example.com", "Anna")
        await mem.update_conversation(conv.conversation_id, "ESCALATED", "URGENT")
        updated = await mem.get_conversation(conv.conversation_id)
        assert updated.status == "ESCALATED"
        assert updated.priority == "URGENT"

    @pytest.mark.asyncio
    async def test_escalated_conversations_listed(self):
        mem = self.create_memory()
        anna = await mem.get_or_create_conversation("anna@example.com", "Anna")
        await mem.get_or_create_conversation("bob@example.com", "Bob")
        await mem.update_conversation(anna.conversation_id, "ESCALATED", "HIGH")

        escalated = await mem.get_escalated_conversations()
        assert [c.customer_email for c in escalated] == ["anna@example.com"]

    @pytest.mark.asyncio
    async def test_conversation_history_respects_limit(self):
        mem = self.create_memory()
        for i in range(5):
            await mem.get_or_create_conversation(f"c{i}@example.com", f"C{i}")
        history = await mem.get_conversation_history(limit=3)
        assert len(history) == 3

    # -- responses -----------------------------------------------------------

    @pytest.mark.asyncio
    async def test_save_and_get_response(self):
        mem = self.create_memory()
        response_id = await self._response(mem, sent=True, prompt_used="prompt")
        stored = await mem.get_response(response_id)
        assert stored is not None
        assert stored.message_id == "msg-1"
        assert stored.confidence == pytest.approx(0.85)
        assert stored.sent is True
        assert stored.sent_at is not None
        assert stored.verdict == "pending"
        assert stored.prompt_used == "prompt"

    @pytest.mark.asyncio
    async def test_get_unknown_response_returns_none(self):
        mem = self.create_memory()
        assert await mem.get_response(9999) is None

    @pytest.mark.asyncio
    async def test_responses_for_email(self):
        mem = self.create_memory()
        await self._response(mem, "msg-1")
        await self._response(mem, "msg-2")
        responses = await mem.get_responses_for_email("msg-1")
        assert len(responses) == 1
        assert responses[0].message_id == "msg-1"

    @pytest.mark.asyncio
    async def test_pending_reviews_only_held_responses(self):
        mem = self.create_memory()
        await self._response(mem, "msg-1", needs_human_review=False, sent=True)
        held = await self._response(
            mem, "msg-2", escalated=True, needs_human_review=True, draft_id="d-1"
        )
        pending = await mem.get_pending_reviews()
        assert [r.response_id for r in pending] == [held]
        assert pending[0].draft_id == "d-1"

    @pytest.mark.asyncio
    async def test_review_approve(self):
        mem = self.create_memory()
        held = await self._response(mem, needs_human_review=True)
        await mem.review_response(held, "ok")

        reviewed = await mem.get_response(held)
        assert reviewed.verdict == "ok"
        assert reviewed.reviewed_at is not None
        assert await mem.get_pending_reviews() == []

    @pytest.mark.asyncio
    async def test_review_reject_with_correction(self):
        mem = self.create_memory()
        held = await self._response(mem, needs_human_review=True)
        await mem.review_response(
            held,
            "nok",
            actual_message_sent="My own version of the reply",
            reviewer_comment="Too generic for this customer",
        )

        reviewed = await mem.get_response(held)
        assert reviewed.verdict == "nok"
        assert reviewed.actual_message_sent == "My own version of the reply"
        assert reviewed.reviewer_comment == "Too generic for this customer"
