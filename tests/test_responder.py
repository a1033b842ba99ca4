"""
ResponseGenerator tests using the simulator provider.

No network, no credentials, no LLM API calls.
"""

import asyncio

import pytest

from support_reply.adapters.simulator_generator import SimulatorTextGenerator
from support_reply.domain.evidence import EvidenceResponse
from support_reply.domain.generation import GenerationFailure, InboundQuery
from support_reply.domain.intent import Intent
from support_reply.domain.orders import Fulfillment, LineItem, OrderSnapshot
from support_reply.responder import ResponseGenerator, build_prompt


def _query(text: str, name: str | None = "Anna", category: Intent | None = None) -> InboundQuery:
    return InboundQuery(
        text=text,
        customer_email="anna@example.com",
        customer_name=name,
        category=category,
        context_note="Subject: Question",
    )


def _fedex_order() -> OrderSnapshot:
    return OrderSnapshot(
        order_number="1001",
        fulfillment_status="FULFILLED",
        financial_status="PAID",
        total_price="129.00 USD",
        items=[LineItem(quantity=1, title="Blue Light Classic")],
        fulfillments=[Fulfillment(tracking_company="FedEx", tracking_numbers=["123"])],
        processed_at="2026-03-01T09:00:00Z",
    )


def _evidence(similarity: float, n: int = 1) -> list[EvidenceResponse]:
    return [
        EvidenceResponse(f"past query {i}", f"past response {i}", similarity, "ORDER_STATUS")
        for i in range(n)
    ]


# ---------------------------------------------------------------------------
# Generative path
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_successful_generation_is_scored():
    gen = SimulatorTextGenerator(
        text="Thank you Anna! Your order #1001 has shipped with FedEx, tracking number 123.",
        tokens_used=321,
    )
    responder = ResponseGenerator(gen)

    reply = await responder.generate(_query("Where is my order?"), [_fedex_order()])

    assert reply.source == "generative"
    assert reply.confidence == pytest.approx(0.9)
    assert reply.escalate is False
    assert reply.tokens_used == 321
    assert reply.model_used == "simulator"
    assert reply.failure is None
    assert "Found 1 order(s) for customer" in reply.reasoning


@pytest.mark.asyncio
async def test_provider_called_once_with_fixed_parameters():
    gen = SimulatorTextGenerator()
    await ResponseGenerator(gen).generate(_query("Where is my order?"))

    assert len(gen.calls) == 1
    call = gen.calls[0]
    assert call.max_tokens == 500
    assert call.temperature == 0.7
    assert "premium eyewear" in call.system_prompt


@pytest.mark.asyncio
async def test_low_confidence_generation_escalates():
    gen = SimulatorTextGenerator(text="Ok.")
    reply = await ResponseGenerator(gen).generate(_query("hello"))
    assert reply.source == "generative"
    assert reply.confidence == pytest.approx(0.3)
    assert reply.escalate is True


@pytest.mark.asyncio
async def test_threshold_is_configurable():
    text = "Thank you for reaching out to us, we are looking into your question now."
    strict = await ResponseGenerator(SimulatorTextGenerator(text=text)).generate(_query("hi"))
    lenient = await ResponseGenerator(
        SimulatorTextGenerator(text=text), escalation_threshold=0.4
    ).generate(_query("hi"))
    assert strict.escalate is True
    assert lenient.escalate is False


@pytest.mark.asyncio
async def test_weak_evidence_is_ignored():
    text = "Thank you for reaching out to us, we are looking into your question now."
    gen = SimulatorTextGenerator(text=text)
    reply = await ResponseGenerator(gen).generate(
        _query("hello"), evidence=_evidence(0.5) + _evidence(0.3)
    )
    assert reply.confidence == pytest.approx(0.5)
    assert "Similar Past Responses" not in gen.calls[0].user_prompt


# ---------------------------------------------------------------------------
# Prompt
# ---------------------------------------------------------------------------


def test_prompt_caps_orders_and_evidence():
    orders = [_fedex_order() for _ in range(5)]
    prompt = build_prompt(
        _query("Where is my order?", category=Intent.ORDER_STATUS),
        orders,
        _evidence(0.9, n=5),
    )
    assert "Order 3:" in prompt
    assert "Order 4:" not in prompt
    assert "Reference 3 (Similarity: 90.0%)" in prompt
    assert "Reference 4" not in prompt
    assert "Query Category: order_status" in prompt
    assert "Subject: Question" in prompt
    assert "FedEx (Tracking: 123)" in prompt


def test_prompt_without_orders_says_so():
    prompt = build_prompt(_query("hello"), [], [])
    assert "No order information found for this customer." in prompt
    assert "Query Category: unknown" in prompt


# ---------------------------------------------------------------------------
# Fallback path
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.parametrize("failure", list(GenerationFailure))
async def test_every_failure_class_falls_back(failure):
    gen = SimulatorTextGenerator(failure=failure)
    reply = await ResponseGenerator(gen).generate(_query("Where is my order?"))

    assert reply.source == "fallback"
    assert reply.failure == failure
    assert reply.tokens_used == 0
    assert reply.model_used == "intelligent_fallback"
    assert reply.text
    assert failure.value in reply.reasoning


@pytest.mark.asyncio
@pytest.mark.parametrize("failure", list(GenerationFailure))
@pytest.mark.parametrize(
    "text, intent",
    [
        ("I want a refund for these glasses", Intent.RETURN_REFUND),
        ("This is terrible service, I'm very unhappy", Intent.COMPLAINT_ISSUE),
    ],
)
async def test_escalating_intents_always_escalate(failure, text, intent):
    gen = SimulatorTextGenerator(failure=failure)
    reply = await ResponseGenerator(gen).generate(_query(text))
    assert reply.intent == intent
    assert reply.escalate is True


@pytest.mark.asyncio
async def test_tracking_fallback_uses_order_data():
    gen = SimulatorTextGenerator(failure=GenerationFailure.RATE_LIMITED)
    reply = await ResponseGenerator(gen).generate(
        _query("Can you give me the tracking number for my order?"), [_fedex_order()]
    )

    assert reply.source == "fallback"
    assert reply.intent == Intent.SHIPPING_TRACKING
    assert "FedEx" in reply.text
    assert "123" in reply.text
    assert reply.confidence >= 0.75
    assert reply.escalate is False


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "exc, expected",
    [
        (ConnectionRefusedError("refused"), GenerationFailure.NETWORK_UNREACHABLE),
        (asyncio.TimeoutError(), GenerationFailure.NETWORK_UNREACHABLE),
        (RuntimeError("unexpected"), GenerationFailure.UNKNOWN),
    ],
)
async def test_raw_exceptions_are_classified(exc, expected):
    reply = await ResponseGenerator(SimulatorTextGenerator(failure=exc)).generate(
        _query("Where is my order?")
    )
    assert reply.source == "fallback"
    assert reply.failure == expected


@pytest.mark.asyncio
async def test_general_fallback_below_threshold_escalates():
    gen = SimulatorTextGenerator(failure=GenerationFailure.SERVICE_UNAVAILABLE)
    reply = await ResponseGenerator(gen).generate(_query("Hello there!"))
    assert reply.intent == Intent.GENERAL_INQUIRY
    assert reply.confidence == pytest.approx(0.60)
    assert reply.escalate is True


def test_fallback_without_failure_is_an_escalation_rewrite():
    responder = ResponseGenerator(SimulatorTextGenerator())
    reply = responder.fallback(_query("Which frame size fits me?"))
    assert reply.intent == Intent.PRODUCT_INQUIRY
    assert reply.failure is None
    assert "(escalation)" in reply.reasoning
    assert reply.confidence == pytest.approx(0.65)
