"""
Structural quality checks on a reply, independent of how it was produced.

Issues make a reply invalid; warnings only lower its score.
"""

import re
from dataclasses import dataclass, field

MIN_LENGTH = 30
MAX_LENGTH = 1000

_PLACEHOLDER = re.compile(r"\[.*\]|\{\{.*\}\}|PLACEHOLDER|TODO|XXX", re.IGNORECASE)
_ORDER_DETAIL = re.compile(r"#\d+|order.*\d+", re.IGNORECASE)
_COURTESY_WORDS = ("thank you", "appreciate", "help", "assist", "sorry", "apologize")


@dataclass
class ValidationResult:
    is_valid: bool
    issues: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    score: float = 1.0


def validate(text: str) -> ValidationResult:
    issues: list[str] = []
    warnings: list[str] = []

    if len(text) < MIN_LENGTH:
        issues.append("Response is too short")
    if len(text) > MAX_LENGTH:
        warnings.append("Response is quite long")

    if _PLACEHOLDER.search(text):
        issues.append("Response contains placeholders or incomplete information")

    lower = text.lower()
    if not any(word in lower for word in _COURTESY_WORDS):
        warnings.append("Response may lack professional courtesy words")

    if "your order" in text and not _ORDER_DETAIL.search(text):
        warnings.append("Response mentions order but lacks specific order details")

    return ValidationResult(
        is_valid=not issues,
        issues=issues,
        warnings=warnings,
        score=max(0.0, 1 - len(issues) * 0.3 - len(warnings) * 0.1),
    )
