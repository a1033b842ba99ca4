"""
ResponseGenerator: the reply generation core.

One call to the text-generation provider per message.  On success the text
is scored; on any failure the failure is classified once and the
intent-specific composer writes the reply instead.  generate() never raises:
the caller always gets a GeneratedReply.

Flow:
  1. build prompt (query, category, ≤3 orders, ≤3 similar responses)
  2. provider call
  3a. success → score → escalate if below threshold
  3b. failure → classify failure → classify intent → compose → base confidence
"""

import logging

from support_reply.domain.composer import compose
from support_reply.domain.evidence import EvidenceResponse, relevant_evidence
from support_reply.domain.generation import (
    GeneratedReply,
    GenerationFailure,
    InboundQuery,
    TextGenerator,
)
from support_reply.domain.intent import Intent, classify
from support_reply.domain.orders import OrderSnapshot
from support_reply.domain.scoring import explain_score, score_confidence
from support_reply.prompts import load_prompt

log = logging.getLogger(__name__)

ESCALATION_THRESHOLD = 0.7
MAX_TOKENS = 500
TEMPERATURE = 0.7
MAX_PROMPT_ORDERS = 3
MAX_PROMPT_EVIDENCE = 3

FALLBACK_CONFIDENCE = {
    Intent.ORDER_STATUS: 0.75,
    Intent.SHIPPING_TRACKING: 0.75,
    Intent.RETURN_REFUND: 0.70,
    Intent.PRODUCT_INQUIRY: 0.65,
    Intent.COMPLAINT_ISSUE: 0.80,   # high: a person takes it from here anyway
    Intent.GENERAL_INQUIRY: 0.60,
}

_INSTRUCTIONS = """
Instructions:
1. Write a helpful, polite, and professional response to the customer
2. Use the order information to provide specific details when relevant
3. Reference similar past responses for tone and style, but personalize for this specific situation
4. If order information is available, include specific tracking details, delivery estimates, etc.
5. If no order information is found but the customer mentions an order, acknowledge this and offer to help find their order
6. Keep the response concise but complete (2-4 sentences typically)
7. End with a helpful next step or offer of additional assistance
8. Use a warm, human-like tone that reflects our premium eyewear brand

Generate only the response text (no additional formatting or explanations):""".strip()


def _format_order(index: int, order: OrderSnapshot) -> str:
    items = ", ".join(f"{i.quantity}x {i.title}" for i in order.items)
    lines = [
        f"Order {index}:",
        f"- Order Number: {order.order_number}",
        f"- Status: {order.fulfillment_status}",
        f"- Financial Status: {order.financial_status}",
    ]
    if order.processed_at:
        lines.append(f"- Order Date: {order.processed_at[:10]}")
    lines += [f"- Total: {order.total_price}", f"- Items: {items or 'none listed'}"]
    if order.shipping_address:
        a = order.shipping_address
        lines.append(f"- Shipping Address: {a.city}, {a.province}, {a.country}")
    if order.fulfillments:
        f = order.fulfillments[0]
        shipping = f"- Shipping: {f.tracking_company or 'Standard Shipping'}"
        if f.tracking_numbers:
            shipping += f" (Tracking: {f.tracking_numbers[0]})"
        if f.estimated_delivery_at:
            shipping += f" - ETA: {f.estimated_delivery_at[:10]}"
        lines.append(shipping)
    return "\n".join(lines)


def build_prompt(
    query: InboundQuery,
    orders: list[OrderSnapshot],
    evidence: list[EvidenceResponse],
) -> str:
    """User prompt for the provider call."""
    category = query.category.value if query.category else "unknown"
    parts = [
        "Customer Support Query Analysis:\n\n"
        f"Customer: {query.customer_name or query.customer_email}\n"
        f"Email: {query.customer_email}\n"
        f"Query Category: {category}\n\n"
        f'Customer Message:\n"{query.text}"'
    ]

    if query.context_note:
        parts.append(f"Additional Context:\n{query.context_note}")

    if orders:
        formatted = [
            _format_order(i, o) for i, o in enumerate(orders[:MAX_PROMPT_ORDERS], start=1)
        ]
        parts.append("Customer Order Information:\n\n" + "\n\n".join(formatted))
    else:
        parts.append("No order information found for this customer.")

    if evidence:
        refs = [
            f"Reference {i} (Similarity: {r.similarity * 100:.1f}%):\n"
            f'Query: "{r.query}"\n'
            f'Response: "{r.response}"'
            for i, r in enumerate(evidence[:MAX_PROMPT_EVIDENCE], start=1)
        ]
        parts.append("Similar Past Responses (for reference):\n\n" + "\n\n".join(refs))

    parts.append(_INSTRUCTIONS)
    return "\n\n".join(parts)


class ResponseGenerator:
    """
    Stateless: one instance can serve concurrent messages.

    The provider is injected so tests can substitute SimulatorTextGenerator.
    """

    def __init__(
        self,
        generator: TextGenerator,
        escalation_threshold: float = ESCALATION_THRESHOLD,
    ):
        self._generator = generator
        self._threshold = escalation_threshold

    async def generate(
        self,
        query: InboundQuery,
        orders: list[OrderSnapshot] | None = None,
        evidence: list[EvidenceResponse] | None = None,
    ) -> GeneratedReply:
        orders = list(orders or [])
        evidence = relevant_evidence(list(evidence or []))
        prompt = build_prompt(query, orders, evidence)

        try:
            completion = await self._generator.complete(
                load_prompt("support_system"),
                prompt,
                max_tokens=MAX_TOKENS,
                temperature=TEMPERATURE,
            )
        except Exception as exc:
            failure = self._generator.classify_failure(exc)
            log.warning(
                "generation failed (%s: %s) for %s, using fallback",
                failure.value, exc, query.customer_email,
            )
            return self.fallback(query, orders, failure)

        text = completion.text.strip()
        confidence = score_confidence(text, bool(orders), evidence)
        log.info(
            "generated reply for %s conf=%.2f tokens=%d",
            query.customer_email, confidence, completion.tokens_used,
        )
        return GeneratedReply(
            text=text,
            confidence=confidence,
            escalate=confidence < self._threshold,
            reasoning=explain_score(text, orders, evidence),
            source="generative",
            tokens_used=completion.tokens_used,
            prompt_used=prompt,
            model_used=self._generator.model_name,
        )

    def fallback(
        self,
        query: InboundQuery,
        orders: list[OrderSnapshot] | None = None,
        failure: GenerationFailure | None = None,
    ) -> GeneratedReply:
        """Intent-specific composer reply. Also used to re-derive text on escalation."""
        orders = list(orders or [])
        analysis = classify(query.text)
        text = compose(analysis.intent, query.text, orders, query.customer_name)
        confidence = FALLBACK_CONFIDENCE[analysis.intent]

        cause = failure.value if failure else "escalation"
        reasoning = (
            f"Intelligent fallback response ({cause}) - detected intent: "
            f"{analysis.intent.value}, keywords: {', '.join(analysis.keywords)}"
        )
        if orders:
            reasoning += " with order data"

        return GeneratedReply(
            text=text,
            confidence=confidence,
            escalate=analysis.requires_escalation or confidence < self._threshold,
            reasoning=reasoning,
            source="fallback",
            tokens_used=0,
            prompt_used=f"Smart fallback analysis - Intent: {analysis.intent.value}",
            model_used="intelligent_fallback",
            intent=analysis.intent,
            failure=failure,
        )
