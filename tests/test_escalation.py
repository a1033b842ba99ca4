"""Escalation policy, delivery planning, and conversation priority."""

import pytest

from support_reply.domain.escalation import (
    DeliveryDecision,
    decide,
    determine_priority,
    plan_delivery,
)
from support_reply.domain.intent import Intent
from support_reply.domain.validation import ValidationResult

VALID = ValidationResult(is_valid=True, score=1.0)


def test_clean_reply_not_escalated():
    assert decide(0.9, VALID, should_escalate=False) is False


def test_reply_flag_escalates():
    assert decide(0.9, VALID, should_escalate=True) is True


def test_invalid_reply_escalates():
    invalid = ValidationResult(is_valid=False, issues=["Response is too short"], score=0.7)
    assert decide(0.9, invalid, should_escalate=False) is True


def test_low_validation_score_escalates():
    weak = ValidationResult(is_valid=True, warnings=["a", "b", "c", "d", "e"], score=0.5)
    assert decide(0.9, weak, should_escalate=False) is True


# ---------------------------------------------------------------------------
# Delivery
# ---------------------------------------------------------------------------


def test_not_escalated_is_sent():
    assert plan_delivery(False, False) == DeliveryDecision(
        escalated=False, needs_human_review=False, auto_send=True
    )


def test_escalated_composer_text_is_sent_but_flagged():
    assert plan_delivery(True, True) == DeliveryDecision(
        escalated=True, needs_human_review=False, auto_send=True
    )


def test_escalated_composer_text_held_when_auto_send_fallback_off():
    decision = plan_delivery(True, True, auto_send_fallback=False)
    assert decision.needs_human_review is True
    assert decision.auto_send is False


def test_escalated_generated_text_is_held():
    decision = plan_delivery(True, False)
    assert decision.needs_human_review is True
    assert decision.auto_send is False


@pytest.mark.parametrize("escalated", [True, False])
def test_auto_reply_disabled_holds_everything(escalated):
    decision = plan_delivery(escalated, True, auto_reply_enabled=False)
    assert decision.escalated is escalated
    assert decision.needs_human_review is True
    assert decision.auto_send is False


# ---------------------------------------------------------------------------
# Priority
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "intent, text, expected",
    [
        (Intent.ORDER_STATUS, "Where is my order? I need it ASAP", "URGENT"),
        (Intent.COMPLAINT_ISSUE, "My frames arrived broken", "URGENT"),
        (Intent.RETURN_REFUND, "I want to send these back", "HIGH"),
        (Intent.COMPLAINT_ISSUE, "Very disappointed", "HIGH"),
        (Intent.GENERAL_INQUIRY, "There is an issue with the website", "HIGH"),
        (Intent.ORDER_STATUS, "Where is my order?", "NORMAL"),
    ],
)
def test_priority(intent, text, expected):
    assert determine_priority(intent, text) == expected
