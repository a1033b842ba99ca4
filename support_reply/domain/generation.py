"""
TextGenerator port and the types flowing through reply generation.

TextGenerator: one completion call against an external language model.
Failures are reduced to a closed, provider-neutral set (GenerationFailure)
so the responder can fall back the same way whatever the provider.
"""

import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Literal

from support_reply.domain.intent import Intent


class GenerationFailure(str, Enum):
    RATE_LIMITED = "rate_limit"
    AUTH_FAILED = "auth_error"
    SERVICE_UNAVAILABLE = "service_unavailable"
    INVALID_REQUEST = "invalid_request"
    CONTEXT_TOO_LONG = "context_too_long"
    NETWORK_UNREACHABLE = "network_error"
    UNKNOWN = "unknown_error"


class GenerationError(Exception):
    """Provider-neutral failure an adapter may raise directly."""

    def __init__(self, kind: GenerationFailure, message: str = ""):
        super().__init__(message or kind.value)
        self.kind = kind


def classify_failure(exc: BaseException) -> GenerationFailure:
    """Map an exception to a failure class without provider knowledge."""
    if isinstance(exc, GenerationError):
        return exc.kind
    # A caller-imposed asyncio.wait_for timeout counts as unreachable
    if isinstance(exc, (OSError, asyncio.TimeoutError)):
        return GenerationFailure.NETWORK_UNREACHABLE
    return GenerationFailure.UNKNOWN


@dataclass(frozen=True)
class InboundQuery:
    """Everything the responder needs to know about one customer message."""
    text: str
    customer_email: str
    customer_name: str | None = None
    category: Intent | None = None
    context_note: str | None = None   # e.g. "Subject: Where is my order?"


@dataclass(frozen=True)
class Completion:
    text: str
    tokens_used: int = 0


@dataclass(frozen=True)
class GeneratedReply:
    """A reply ready for validation and delivery. Created once, never mutated."""
    text: str
    confidence: float                 # 0.0–1.0
    escalate: bool
    reasoning: str
    source: Literal["generative", "fallback"]
    tokens_used: int = 0
    prompt_used: str = ""
    model_used: str = ""
    intent: Intent | None = None      # set on the fallback path
    failure: GenerationFailure | None = None


class TextGenerator(ABC):
    """
    Port: generate reply text from a system and a user prompt.

    Implementations may call Claude (ClaudeTextGenerator) or return scripted
    text / failures (SimulatorTextGenerator).
    """

    model_name: str = "unknown"

    @abstractmethod
    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        max_tokens: int,
        temperature: float,
    ) -> Completion:
        """Run one completion. Raises on any provider failure."""
        ...

    def classify_failure(self, exc: BaseException) -> GenerationFailure:
        """Reduce a failure raised by complete() to a GenerationFailure."""
        return classify_failure(exc)
