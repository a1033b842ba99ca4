"""Heuristic confidence for a candidate reply. Not a calibrated probability."""

import re

from support_reply.domain.evidence import EvidenceResponse
from support_reply.domain.orders import OrderSnapshot

_SPECIFIC_DETAIL = re.compile(r"tracking|order.*#\d+|delivery|shipping", re.IGNORECASE)


def _has_placeholder(text: str) -> bool:
    return "[" in text or "{{" in text or "PLACEHOLDER" in text


def _mean_similarity(evidence: list[EvidenceResponse]) -> float:
    return sum(r.similarity for r in evidence) / len(evidence)


def score_confidence(
    text: str, has_order_data: bool, evidence: list[EvidenceResponse]
) -> float:
    """Score a reply in [0, 1] from its text and the supporting evidence."""
    confidence = 0.5

    if has_order_data:
        confidence += 0.3
    if evidence:
        confidence += _mean_similarity(evidence) * 0.2

    if len(text) < 50:
        confidence -= 0.2
    if _has_placeholder(text):
        confidence -= 0.3
    if _SPECIFIC_DETAIL.search(text):
        confidence += 0.1

    return max(0.0, min(1.0, confidence))


def explain_score(
    text: str, orders: list[OrderSnapshot], evidence: list[EvidenceResponse]
) -> str:
    """Human-readable reasons behind a generated reply's score."""
    reasons = []

    if orders:
        reasons.append(f"Found {len(orders)} order(s) for customer")
    else:
        reasons.append("No order data available")

    if evidence:
        reasons.append(
            f"{len(evidence)} similar responses found "
            f"(avg similarity: {_mean_similarity(evidence) * 100:.1f}%)"
        )

    if len(text) < 50:
        reasons.append("Response may be too brief")
    if "[" in text or "{{" in text:
        reasons.append("Response contains placeholders")

    return "; ".join(reasons)
