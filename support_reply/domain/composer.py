"""
Template-based replies, one strategy per intent.

Used as the fallback when the text-generation provider fails, and by the
pipeline whenever an escalated message needs a reply it can trust.
Deterministic, no I/O, always returns non-empty text.
"""

from datetime import datetime
from typing import Callable

from support_reply.domain.intent import Intent, extract_order_number
from support_reply.domain.orders import OrderSnapshot

_STATUS_DETAILS = {
    "shipped": "Your order has been shipped and is on its way to you!",
    "fulfilled": "Your order has been shipped and is on its way to you!",
    "in_transit": "Your order has been shipped and is on its way to you!",
    "delivered": "Your order has been delivered.",
    "pending": "Your order is being prepared and will ship soon.",
    "unfulfilled": "Your order is being prepared and will ship soon.",
    "processing": "Your order is currently being processed.",
}
_DEFAULT_STATUS_DETAIL = "Your order is being handled by our team."


def _greeting(customer_name: str | None) -> str:
    return f"Hi {customer_name}" if customer_name else "Hi"


def _status_detail(order: OrderSnapshot) -> str:
    key = (order.fulfillment_status or "").strip().lower().replace(" ", "_")
    return _STATUS_DETAILS.get(key, _DEFAULT_STATUS_DETAIL)


def _format_date(iso: str) -> str:
    try:
        dt = datetime.fromisoformat(iso.replace("Z", "+00:00"))
    except ValueError:
        return iso
    return f"{dt:%B} {dt.day}, {dt.year}"


def _join(*sentences: str) -> str:
    return " ".join(s for s in sentences if s)


def _order_status(
    query: str, orders: list[OrderSnapshot], customer_name: str | None
) -> str:
    hi = _greeting(customer_name)
    if orders:
        order = orders[0]
        return _join(
            f"{hi}, thank you for your inquiry about your order.",
            f"I can see you have order #{order.order_number} with a "
            f"{order.fulfillment_status} status.",
            _status_detail(order),
            "Our team will provide you with any additional updates you need.",
            "If you have any other questions, please let us know!",
        )

    order_number = extract_order_number(query)
    if order_number:
        return _join(
            f"{hi}, thank you for asking about order #{order_number}.",
            "I'm looking up the details for this order and will get back to you "
            "within 30 minutes with a complete status update.",
            "If this is urgent, please call our customer service line at your convenience.",
        )

    return _join(
        f"{hi}, thank you for your order status inquiry.",
        "To provide you with accurate information, I'll need to look up your order details.",
        "Could you please provide your order number?",
        "Alternatively, our customer service team can help you immediately by phone.",
    )


def _shipping_tracking(
    query: str, orders: list[OrderSnapshot], customer_name: str | None
) -> str:
    hi = _greeting(customer_name)
    if not orders:
        return _join(
            f"{hi}, I'd be happy to help you track your order!",
            "Could you please provide your order number so I can give you the most "
            "up-to-date tracking information?",
            "Our customer service team is also available to assist you immediately.",
        )

    order = orders[0]
    if not order.fulfillments:
        return _join(
            f"{hi}, your order #{order.order_number} is currently being prepared for shipment.",
            "You'll receive tracking information as soon as it ships, typically "
            "within 1-2 business days.",
            "Thank you for your patience!",
        )

    fulfillment = order.fulfillments[0]
    tracking = fulfillment.tracking_numbers[0] if fulfillment.tracking_numbers else None
    if tracking:
        carrier = fulfillment.tracking_company or "our shipping partner"
        tracking_sentence = f"Your tracking number is {tracking} with {carrier}."
    else:
        tracking_sentence = "You should receive tracking information shortly."
    eta_sentence = (
        f"Expected delivery: {_format_date(fulfillment.estimated_delivery_at)}."
        if fulfillment.estimated_delivery_at
        else ""
    )
    return _join(
        f"{hi}, your order #{order.order_number} has shipped!",
        tracking_sentence,
        eta_sentence,
        "You can track your package directly on the carrier's website.",
    )


def _return_refund(
    query: str, orders: list[OrderSnapshot], customer_name: str | None
) -> str:
    return _join(
        f"{_greeting(customer_name)}, I understand you'd like to discuss a return or refund.",
        "We offer a 30-day return policy and want to make this process as easy as "
        "possible for you.",
        "Our customer service team will review your specific situation and provide you "
        "with return instructions and a prepaid shipping label if needed.",
        "You'll hear back from us within 2 hours, or feel free to call our customer "
        "service line for immediate assistance.",
    )


def _product_inquiry(
    query: str, orders: list[OrderSnapshot], customer_name: str | None
) -> str:
    lower = query.lower()
    product_specific = ""
    if "blue light" in lower:
        product_specific = (
            "Our blue light glasses filter 90% of harmful blue light and can "
            "significantly reduce eye strain from digital screens."
        )
    elif "prescription" in lower:
        product_specific = (
            "We work with licensed opticians to ensure your prescription is "
            "perfectly crafted for your new frames."
        )
    return _join(
        f"{_greeting(customer_name)}, thank you for your interest in our eyewear products!",
        product_specific,
        "Our customer service team will provide you with detailed information to help "
        "you make the best choice for your needs.",
        "You'll receive a comprehensive response within 2-4 hours, or call us for "
        "immediate assistance with product selection.",
    )


def _complaint_issue(
    query: str, orders: list[OrderSnapshot], customer_name: str | None
) -> str:
    # Never cites order data: a senior rep owns the conversation from here.
    return _join(
        f"{_greeting(customer_name)}, I sincerely apologize for any inconvenience "
        "you've experienced.",
        "Your concern is very important to us, and I want to make sure we resolve this properly.",
        "A senior customer service representative will personally review your case and "
        "contact you within 1 hour to discuss how we can make this right.",
        "If you prefer immediate assistance, please call our customer service line and "
        "mention this is a priority case.",
    )


_GENERAL_TOPICS: list[tuple[tuple[str, ...], str]] = [
    (
        ("hours", "open", "when"),
        "thank you for your inquiry! Our customer service team is available "
        "Monday-Friday 9 AM to 6 PM EST. You can also reach us anytime through this "
        "email system, and we typically respond within a few hours during business "
        "days. How can we help you today?",
    ),
    (
        ("policy", "return", "warranty"),
        "thank you for asking about our policies! We offer a 30-day return policy for "
        "all our eyewear products. If you're not completely satisfied, you can return "
        "items in original condition for a full refund or exchange. Our customer "
        "service team can provide detailed policy information and help with any "
        "returns. What specific information do you need?",
    ),
    (
        ("prescription", "glasses", "lens"),
        "thank you for your interest in our eyewear! We offer both prescription and "
        "non-prescription glasses, including blue light blocking lenses. Our team can "
        "help you with frame selection, lens options, and prescription requirements. "
        "What specific questions do you have about our products?",
    ),
    (
        ("shipping", "delivery", "cost"),
        "thank you for your shipping inquiry! We offer free standard shipping on "
        "orders over $50, with delivery typically taking 5-7 business days. Expedited "
        "shipping options are also available. Our team can provide specific shipping "
        "details and costs for your location. What would you like to know?",
    ),
]


def _general_inquiry(
    query: str, orders: list[OrderSnapshot], customer_name: str | None
) -> str:
    hi = _greeting(customer_name)
    lower = query.lower()
    for words, paragraph in _GENERAL_TOPICS:
        if any(w in lower for w in words):
            return f"{hi}, {paragraph}"

    quoted = query if len(query) <= 50 else query[:50] + "..."
    return _join(
        f"{hi}, thank you for reaching out!",
        f'I\'ve received your message regarding "{quoted}" and I want to make sure we '
        "provide you with the most helpful response.",
        "Our customer service team is reviewing your specific question and will get "
        "back to you shortly with detailed information.",
        "Is there anything urgent I can help you with right now?",
    )


Strategy = Callable[[str, list[OrderSnapshot], str | None], str]

_STRATEGIES: dict[Intent, Strategy] = {
    Intent.ORDER_STATUS: _order_status,
    Intent.SHIPPING_TRACKING: _shipping_tracking,
    Intent.RETURN_REFUND: _return_refund,
    Intent.PRODUCT_INQUIRY: _product_inquiry,
    Intent.COMPLAINT_ISSUE: _complaint_issue,
    Intent.GENERAL_INQUIRY: _general_inquiry,
}


def compose(
    intent: Intent,
    query: str,
    orders: list[OrderSnapshot] | None = None,
    customer_name: str | None = None,
) -> str:
    """Compose a personalised reply for the given intent."""
    return _STRATEGIES[intent](query, list(orders or []), customer_name)


def compose_escalation_message(customer_name: str | None = None) -> str:
    """Neutral holding reply for when no strategy text can be sent as-is."""
    thanks = f"Thank you {customer_name}" if customer_name else "Thank you"
    return _join(
        f"{thanks} for reaching out to us.",
        "I want to make sure we provide you with the most accurate and helpful "
        "information possible.",
        "I'm looking into your inquiry and will get back to you within 2-4 hours with "
        "a detailed response.",
        "If this is urgent, please don't hesitate to call our customer service line.",
        "We appreciate your patience and are committed to resolving your question promptly.",
    )
