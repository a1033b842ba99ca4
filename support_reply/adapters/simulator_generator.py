"""
Simulator TextGenerator.

Returns scripted text, or raises a scripted failure.  No LLM calls.
Every call is recorded so tests can assert what was asked.
"""

from dataclasses import dataclass

from support_reply.domain.generation import (
    Completion,
    GenerationError,
    GenerationFailure,
    TextGenerator,
)

DEFAULT_REPLY = (
    "Thank you for reaching out! Your order is on its way and you will receive a "
    "shipping confirmation with tracking details shortly. Let us know if there is "
    "anything else we can help with."
)


@dataclass
class GeneratorCall:
    system_prompt: str
    user_prompt: str
    max_tokens: int
    temperature: float


class SimulatorTextGenerator(TextGenerator):
    """
    text: what every call returns.
    failure: a GenerationFailure to raise as GenerationError, or any exception
             instance to raise as-is.  Takes precedence over text.
    """

    model_name = "simulator"

    def __init__(
        self,
        text: str = DEFAULT_REPLY,
        failure: GenerationFailure | BaseException | None = None,
        tokens_used: int = 120,
    ):
        self.text = text
        self.failure = failure
        self.tokens_used = tokens_used
        self.calls: list[GeneratorCall] = []

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        max_tokens: int,
        temperature: float,
    ) -> Completion:
        self.calls.append(GeneratorCall(system_prompt, user_prompt, max_tokens, temperature))
        if isinstance(self.failure, GenerationFailure):
            raise GenerationError(self.failure)
        if self.failure is not None:
            raise self.failure
        return Completion(text=self.text, tokens_used=self.tokens_used)
