"""
Claude-powered TextGenerator.

Anthropic SDK exceptions are mapped onto GenerationFailure here so the
responder never sees provider types.
"""

import os

import anthropic

from support_reply.domain.generation import (
    Completion,
    GenerationFailure,
    TextGenerator,
    classify_failure,
)

DEFAULT_MODEL = "claude-haiku-4-5-20251001"


def _is_context_error(exc: anthropic.APIStatusError) -> bool:
    message = str(exc).lower()
    return "prompt is too long" in message or "context" in message


class ClaudeTextGenerator(TextGenerator):

    def __init__(self, api_key: str | None = None, model: str = DEFAULT_MODEL):
        self._client = anthropic.AsyncAnthropic(
            api_key=api_key or os.environ["ANTHROPIC_API_KEY"]
        )
        self.model_name = model

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        max_tokens: int,
        temperature: float,
    ) -> Completion:
        response = await self._client.messages.create(
            model=self.model_name,
            max_tokens=max_tokens,
            temperature=temperature,
            system=system_prompt,
            messages=[{"role": "user", "content": user_prompt}],
        )

        text = "".join(
            block.text for block in response.content if getattr(block, "type", "") == "text"
        )
        usage = response.usage
        return Completion(
            text=text.strip(),
            tokens_used=usage.input_tokens + usage.output_tokens,
        )

    def classify_failure(self, exc: BaseException) -> GenerationFailure:
        # Connection errors subclass APIError but not APIStatusError
        if isinstance(exc, (anthropic.APIConnectionError, anthropic.APITimeoutError)):
            return GenerationFailure.NETWORK_UNREACHABLE
        if isinstance(exc, anthropic.RateLimitError):
            return GenerationFailure.RATE_LIMITED
        if isinstance(exc, (anthropic.AuthenticationError, anthropic.PermissionDeniedError)):
            return GenerationFailure.AUTH_FAILED
        if isinstance(exc, anthropic.BadRequestError):
            if _is_context_error(exc):
                return GenerationFailure.CONTEXT_TOO_LONG
            return GenerationFailure.INVALID_REQUEST
        if isinstance(exc, anthropic.InternalServerError):
            return GenerationFailure.SERVICE_UNAVAILABLE
        if isinstance(exc, anthropic.APIStatusError):
            if exc.status_code == 413:
                return GenerationFailure.CONTEXT_TOO_LONG
            if exc.status_code == 529 or exc.status_code >= 500:
                return GenerationFailure.SERVICE_UNAVAILABLE
            return GenerationFailure.UNKNOWN
        return classify_failure(exc)
