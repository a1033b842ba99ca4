"""Contract tests for any MailboxWriter implementation."""

from abc import ABC, abstractmethod

import pytest

from support_reply.communication.ports import MailboxWriter


class MailboxWriterContract(ABC):

    @abstractmethod
    def create_mailbox(self) -> MailboxWriter:
        ...

    @abstractmethod
    def recipient(self) -> str:
        """Address the contract may write drafts to."""
        ...

    @pytest.mark.asyncio
    async def test_create_draft_returns_id(self):
        mailbox = self.create_mailbox()
        draft_id = await mailbox.create_draft(
            self.recipient(),
            "Re: contract test",
            "Thank you for your message. This draft was created by a contract test.",
        )
        assert isinstance(draft_id, str)
        assert draft_id

    @pytest.mark.asyncio
    async def test_create_draft_in_thread(self):
        mailbox = self.create_mailbox()
        draft_id = await mailbox.create_draft(
            self.recipient(),
            "Re: contract test",
            "Thank you for your message. This draft belongs to an existing thread.",
            thread_id="<contract-thread@example.com>",
        )
        assert draft_id
