"""
EvidenceStore port: previously sent responses similar to the current query.

Only sufficiently similar records are useful as generation context, so every
store filters through relevant_evidence() before returning.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

MIN_SIMILARITY = 0.5


@dataclass
class EvidenceResponse:
    """A past query/response pair judged similar to the current query."""
    query: str
    response: str
    similarity: float   # 0.0–1.0
    category: str
    id: str = ""


@dataclass
class HistoricalResponse:
    """A query/response pair as it is added to the store."""
    id: str
    query: str
    response: str
    category: str


def relevant_evidence(records: list[EvidenceResponse]) -> list[EvidenceResponse]:
    """Drop records at or below the similarity floor."""
    return [r for r in records if r.similarity > MIN_SIMILARITY]


class EvidenceStore(ABC):
    """Port: similarity search over historical responses."""

    @abstractmethod
    def search(self, query_text: str, k: int = 3) -> list[EvidenceResponse]:
        """Return up to k records with similarity > 0.5, most similar first."""
        ...

    @abstractmethod
    def add(self, records: list[HistoricalResponse]) -> None:
        """Insert or replace records, keyed by id."""
        ...

    @abstractmethod
    def count(self) -> int:
        """Number of stored records."""
        ...


SAMPLE_HISTORICAL_RESPONSES = [
    HistoricalResponse(
        id="sample-1",
        query="Where is my order? I ordered glasses last week.",
        response=(
            "Thank you for contacting us! I can help you track your order. Your glasses "
            "order is currently being processed and will be shipped within 2-3 business "
            "days. You will receive a tracking email once your order ships. If you have "
            "any other questions, please feel free to reach out!"
        ),
        category="ORDER_STATUS",
    ),
    HistoricalResponse(
        id="sample-2",
        query="My glasses arrived broken. What should I do?",
        response=(
            "I'm so sorry to hear that your glasses arrived damaged! We want to make this "
            "right immediately. Please send us photos of the damage to our support email, "
            "and we'll send you a replacement pair right away at no cost. We'll also "
            "include a prepaid return label for the damaged glasses."
        ),
        category="PRODUCT_ISSUE",
    ),
    HistoricalResponse(
        id="sample-3",
        query="How can I return my glasses? They don't fit properly.",
        response=(
            "We offer a 30-day return policy for all our eyewear. Since the fit isn't "
            "right, we can either help you exchange for a different size or provide a "
            "full refund. I'll email you a prepaid return label and detailed "
            "instructions. Would you prefer an exchange or refund?"
        ),
        category="RETURN_REFUND",
    ),
    HistoricalResponse(
        id="sample-4",
        query="Can you give me the tracking number for my order?",
        response=(
            "I'd be happy to provide your tracking information! Once your order ships "
            "you will receive an email with the carrier name and tracking number, and "
            "you can follow the package directly on the carrier's website."
        ),
        category="TRACKING",
    ),
    HistoricalResponse(
        id="sample-5",
        query="I love my new glasses! Thank you so much!",
        response=(
            "Thank you so much for the wonderful feedback! We're thrilled that you love "
            "your new glasses. Your satisfaction is our top priority, and it means the "
            "world to us to hear that we've exceeded your expectations. Enjoy your new "
            "eyewear!"
        ),
        category="GENERAL",
    ),
]
