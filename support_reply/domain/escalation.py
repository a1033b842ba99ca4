"""
Escalation policy: should a human look at this reply, and may it go out now?

decide() only combines signals; the confidence threshold has already been
applied by the responder when it set the reply's escalate flag.

plan_delivery() keeps the audit flag (escalated) apart from the delivery
decision: a composer-written reply may be sent even though it is flagged,
when auto_send_fallback allows it.
"""

from dataclasses import dataclass
from typing import Literal

from support_reply.domain.intent import Intent
from support_reply.domain.validation import ValidationResult

MIN_VALIDATION_SCORE = 0.6

Priority = Literal["LOW", "NORMAL", "HIGH", "URGENT"]

_URGENT_KEYWORDS = ("urgent", "asap", "immediately", "broken", "damaged", "wrong", "missing")
_HIGH_KEYWORDS = ("return", "refund", "complaint", "problem", "issue")


@dataclass(frozen=True)
class DeliveryDecision:
    escalated: bool            # audit: the reply was flagged for quality
    needs_human_review: bool   # hold as a draft until someone approves it
    auto_send: bool            # send to the customer right away


def decide(
    confidence: float, validation: ValidationResult, should_escalate: bool
) -> bool:
    """True when the reply must be escalated."""
    return (
        should_escalate
        or not validation.is_valid
        or validation.score < MIN_VALIDATION_SCORE
    )


def plan_delivery(
    escalated: bool,
    composed_by_fallback: bool,
    *,
    auto_send_fallback: bool = True,
    auto_reply_enabled: bool = True,
) -> DeliveryDecision:
    if not auto_reply_enabled:
        return DeliveryDecision(escalated=escalated, needs_human_review=True, auto_send=False)
    if not escalated:
        return DeliveryDecision(escalated=False, needs_human_review=False, auto_send=True)
    if composed_by_fallback and auto_send_fallback:
        return DeliveryDecision(escalated=True, needs_human_review=False, auto_send=True)
    return DeliveryDecision(escalated=True, needs_human_review=True, auto_send=False)


def determine_priority(intent: Intent, text: str) -> Priority:
    lower = text.lower()
    if any(k in lower for k in _URGENT_KEYWORDS):
        return "URGENT"
    if intent in (Intent.RETURN_REFUND, Intent.COMPLAINT_ISSUE):
        return "HIGH"
    if any(k in lower for k in _HIGH_KEYWORDS):
        return "HIGH"
    return "NORMAL"
