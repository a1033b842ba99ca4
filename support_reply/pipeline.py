"""
Main processing pipeline: one inbound customer e-mail, end to end.

Flow:
  2. Data: order lookup (the named order number, else the sender's orders), similar responses
  2. Data: order lookup (by order number, else by sender), similar responses
  3. AI: generate a reply (falls back to composer text on any provider failure)
  4. Code: validate, decide escalation, plan delivery
  5. Send, or save a draft for human review
  6. Persist the response and the conversation's new status / priority

Order and evidence lookups are best-effort: a failing store means the
reply is generated without that context, never that the e-mail is dropped.
"""

import json
import logging
from dataclasses import asdict, dataclass
from typing import Literal

from support_reply.communication.ports import MailboxWriter, MailMessage
from support_reply.domain.composer import compose_escalation_message
from support_reply.domain.escalation import decide, determine_priority, plan_delivery
from support_reply.domain.evidence import EvidenceResponse, EvidenceStore
from support_reply.domain.generation import InboundQuery
from support_reply.domain.intent import classify, extract_order_number
from support_reply.domain.memory import ReplyMemory
from support_reply.domain.orders import OrderLookup, OrderSnapshot
from support_reply.domain.validation import validate
from support_reply.responder import ResponseGenerator

log = logging.getLogger(__name__)


@dataclass
class PipelineConfig:
    mailbox: MailboxWriter
    orders: OrderLookup
    evidence: EvidenceStore
    responder: ResponseGenerator
    memory: ReplyMemory
    auto_reply_enabled: bool = True
    auto_send_fallback: bool = True
    evidence_results: int = 3


@dataclass
class PipelineResult:
    action: Literal[
        "already_processed",  # memory says we handled this e-mail before
        "sent",               # reply sent to the customer
        "drafted",            # reply saved as a draft for human review
        "undelivered",        # neither send nor draft succeeded
    ]
    escalated: bool = False
    confidence: float = 0.0
    response_id: int | None = None
    details: str = ""


def _reply_subject(subject: str) -> str:
    if subject.lower().startswith("re:"):
        return subject
    return f"Re: {subject}" if subject else "Re: your message"


class Pipeline:
    """
    Stateless pipeline step: process one customer e-mail.

    Call process_message() for each unread message; calling it again for
    the same message id is a no-op.
    """

    def __init__(self, config: PipelineConfig):
        self._cfg = config

    async def process_message(self, message: MailMessage) -> PipelineResult:
        mem = self._cfg.memory
        msg_id = message.message_id

        log.debug("msg_id=%s from=%s body=%.60r", msg_id, message.from_email, message.body)

        if await mem.has_email_been_processed(msg_id):
            log.info("msg_id=%s skip: already processed", msg_id)
            return PipelineResult(action="already_processed", details="e-mail already seen")

        conversation = await mem.get_or_create_conversation(
            message.from_email, message.from_name
        )
        await mem.save_email(conversation.conversation_id, message)

        analysis = classify(message.body)
        order_number = analysis.order_number or extract_order_number(message.subject)
        if order_number and not conversation.order_number:
            await mem.set_conversation_order(conversation.conversation_id, order_number)

        orders = self._lookup_orders(message.from_email, order_number)
        evidence = self._search_evidence(message.body)

        query = InboundQuery(
            text=message.body,
            customer_email=message.from_email,
            customer_name=message.from_name or None,
            category=analysis.intent,
            context_note=f"Subject: {message.subject}" if message.subject else None,
        )
        reply = await self._cfg.responder.generate(query, orders, evidence)

        validation = validate(reply.text)
        escalated = decide(reply.confidence, validation, reply.escalate)

        log.info(
            "msg_id=%s intent=%s source=%s conf=%.2f valid=%s escalated=%s",
            msg_id, analysis.intent.value, reply.source, reply.confidence,
            validation.is_valid, escalated,
        )

        text = reply.text
        confidence = reply.confidence
        composed_by_fallback = reply.source == "fallback"
        if escalated:
            if not composed_by_fallback:
                composed = self._cfg.responder.fallback(query, orders)
                text, confidence = composed.text, composed.confidence
                composed_by_fallback = True
            if not validate(text).is_valid:
                text = compose_escalation_message(query.customer_name)

        decision = plan_delivery(
            escalated,
            composed_by_fallback,
            auto_send_fallback=self._cfg.auto_send_fallback,
            auto_reply_enabled=self._cfg.auto_reply_enabled,
        )

        subject = _reply_subject(message.subject)
        sent = False
        draft_id = None
        needs_review = decision.needs_human_review

        if decision.auto_send:
            sent = await self._cfg.mailbox.send_reply(
                message.from_email, subject, text, message.thread_id
            )
            if not sent:
                log.warning("msg_id=%s send failed, saving draft for review", msg_id)
                needs_review = True

        if not sent:
            draft_id = await self._cfg.mailbox.create_draft(
                message.from_email, subject, text, message.thread_id
            )
            if draft_id is None:
                log.error("msg_id=%s could not create draft", msg_id)

        response_id = await mem.save_response(
            conversation.conversation_id,
            msg_id,
            text,
            confidence,
            "fallback" if composed_by_fallback else reply.source,
            escalated=escalated,
            needs_human_review=needs_review,
            sent=sent,
            draft_id=draft_id,
            order_data=json.dumps([asdict(o) for o in orders]) if orders else None,
            evidence=json.dumps([asdict(e) for e in evidence]) if evidence else None,
            prompt_used=reply.prompt_used,
        )

        await mem.update_conversation(
            conversation.conversation_id,
            status="ESCALATED" if escalated else "ACTIVE",
            priority=determine_priority(analysis.intent, message.body),
        )
        await mem.mark_email_processed(msg_id)

        if sent:
            action = "sent"
        elif draft_id is not None:
            action = "drafted"
        else:
            action = "undelivered"

        log.info("msg_id=%s → %s response=%d", msg_id, action, response_id)
        return PipelineResult(
            action=action,
            escalated=escalated,
            confidence=confidence,
            response_id=response_id,
            details=text[:80],
        )

    def _lookup_orders(self, email: str, order_number: str | None) -> list[OrderSnapshot]:
        try:
            if order_number:
                # a named order that is not on file is not swapped for another one
                order = self._cfg.orders.find_by_number(order_number)
                return [order] if order is not None else []
            return self._cfg.orders.find_by_email(email)
        except Exception as exc:
            log.warning("order lookup failed for %s: %s", email, exc)
            return []

    def _search_evidence(self, text: str) -> list[EvidenceResponse]:
        try:
            return self._cfg.evidence.search(text, k=self._cfg.evidence_results)
        except Exception as exc:
            log.warning("evidence search failed: %s", exc)
            return []
