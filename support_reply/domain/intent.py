"""
Intent classification: works out what the customer is asking for.

Deterministic keyword matching, no LLM call.  The lexicons are tested in a
fixed order and later matches override earlier ones, so a message that
mentions both a shipment and a complaint ends up as a complaint.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Literal


class Intent(str, Enum):
    ORDER_STATUS = "order_status"
    SHIPPING_TRACKING = "shipping_tracking"
    RETURN_REFUND = "return_refund"
    PRODUCT_INQUIRY = "product_inquiry"
    COMPLAINT_ISSUE = "complaint_issue"
    GENERAL_INQUIRY = "general_inquiry"


Urgency = Literal["low", "medium", "high"]


@dataclass
class QueryAnalysis:
    """Structured output of intent classification; no raw text, only data."""
    intent: Intent
    keywords: list[str] = field(default_factory=list)
    order_number: str | None = None
    urgency: Urgency = "medium"
    requires_escalation: bool = False


_STATUS = re.compile(
    r"\b(status|where|when|delivered|arrive|shipped|shipping|delivery|tracking|track)\b"
)
_TRACKING = re.compile(r"\b(track|tracking|number)\b")
_RETURN = re.compile(
    r"\b(return|refund|exchange|cancel|defective|wrong|broken|damaged)\b"
)
_PRODUCT = re.compile(
    r"\b(blue light|prescription|lens|frame|size|fit|color|style|recommend)\b"
)
_COMPLAINT = re.compile(
    r"\b(problem|issue|complaint|disappointed|unhappy|terrible|awful|angry|frustrated)\b"
)
_URGENCY = re.compile(r"\b(urgent|asap|immediately|emergency|help)\b")

# "#BLG-2024-001" wins over "order 1001"; the bare form needs a digit so
# "order status" does not yield "status".
_HASH_NUMBER = re.compile(r"#\s*([A-Z0-9][A-Z0-9-]*)", re.IGNORECASE)
_ORDER_WORD_NUMBER = re.compile(
    r"\border\s*(?:number|no\.?|num)?\s*[:#]?\s*([A-Z0-9-]*\d[A-Z0-9-]*)",
    re.IGNORECASE,
)


def extract_order_number(text: str) -> str | None:
    """Return the first order reference in the text, or None."""
    m = _HASH_NUMBER.search(text) or _ORDER_WORD_NUMBER.search(text)
    return m.group(1) if m else None


def classify(text: str) -> QueryAnalysis:
    """Classify a customer message. Pure; unmatched text yields defaults."""
    lower = text.lower()
    analysis = QueryAnalysis(
        intent=Intent.GENERAL_INQUIRY,
        order_number=extract_order_number(text),
    )

    if _STATUS.search(lower):
        analysis.keywords += ["status", "shipping"]
        analysis.intent = (
            Intent.SHIPPING_TRACKING if _TRACKING.search(lower) else Intent.ORDER_STATUS
        )

    if _RETURN.search(lower):
        analysis.keywords += ["return", "refund"]
        analysis.intent = Intent.RETURN_REFUND
        analysis.requires_escalation = True

    if _PRODUCT.search(lower):
        analysis.keywords.append("product")
        analysis.intent = Intent.PRODUCT_INQUIRY

    if _COMPLAINT.search(lower):
        analysis.keywords.append("complaint")
        analysis.intent = Intent.COMPLAINT_ISSUE
        analysis.urgency = "high"
        analysis.requires_escalation = True

    # Urgency is independent of the intent
    if _URGENCY.search(lower):
        analysis.urgency = "high"
        analysis.requires_escalation = True

    return analysis
