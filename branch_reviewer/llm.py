import logging
import os
from dataclasses import dataclass

import openai
from openai import OpenAI
from openai.types import CompletionUsage
from pydantic import ValidationError

from branch_reviewer.errors import MalformedResponse, TransportError
from branch_reviewer.output import Review
from branch_reviewer.prompt import build_system_prompt

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "o3"

# USD per million tokens: (prompt, completion)
PRICING = {
    "o3": (2.00, 8.00),
    "o3-mini": (1.10, 4.40),
    "o4-mini": (1.10, 4.40),
    "gpt-4o": (2.50, 10.00),
    "gpt-4o-mini": (0.15, 0.60),
    "gpt-4.1": (2.00, 8.00),
    "gpt-4.1-mini": (0.40, 1.60),
}


def _get_model() -> str:
    return os.environ.get("BRANCH_REVIEWER_MODEL", DEFAULT_MODEL)


def _get_base_url() -> str | None:
    return os.environ.get("BRANCH_REVIEWER_BASE_URL")


@dataclass
class Usage:
    prompt_tokens: int = 0
    completion_tokens: int = 0

    def add(self, prompt_tokens: int, completion_tokens: int) -> None:
        self.prompt_tokens += prompt_tokens
        self.completion_tokens += completion_tokens


def compute_cost(usage: Usage, rates: tuple[float, float]) -> float:
    prompt_rate, completion_rate = rates
    return (
        usage.prompt_tokens * prompt_rate + usage.completion_tokens * completion_rate
    ) / 1_000_000


class Reviewer:
    """Sends a diff to the chat endpoint and tracks token usage across calls."""

    def __init__(self, model: str | None = None, client: OpenAI | None = None) -> None:
        self.model = model or _get_model()
        self._client = client
        self.usage: Usage | None = None

    @property
    def client(self) -> OpenAI:
        if self._client is None:
            self._client = OpenAI(base_url=_get_base_url())
        return self._client

    def request_review(self, changes: str, instructions: str) -> Review:
        try:
            response = self.client.chat.completions.parse(
                model=self.model,
                messages=[
                    {"role": "system", "content": instructions},
                    {"role": "user", "content": changes},
                ],
                response_format=Review,
            )
        except (openai.LengthFinishReasonError, openai.ContentFilterFinishReasonError) as exc:
            raise MalformedResponse(f"Review response was cut off: {exc}") from exc
        except ValidationError as exc:
            raise MalformedResponse(f"Review response did not match the schema: {exc}") from exc
        except openai.APIError as exc:
            raise TransportError(f"Review request failed: {exc}") from exc
        except openai.OpenAIError as exc:
            raise TransportError(f"Review client could not be used: {exc}") from exc
        except OSError as exc:
            raise TransportError(f"Review request failed: {exc}") from exc

        self._record_usage(response.usage)

        if not response.choices:
            raise MalformedResponse("Review response contained no choices")
        message = response.choices[0].message
        if message.refusal:
            raise MalformedResponse(f"Model refused to review: {message.refusal}")
        if message.parsed is None:
            raise MalformedResponse("Review response could not be parsed")
        return message.parsed

    def _record_usage(self, usage: CompletionUsage | None) -> None:
        if usage is None:
            return
        if self.usage is None:
            self.usage = Usage()
        self.usage.add(usage.prompt_tokens, usage.completion_tokens)
        logger.debug(
            "usage: %d prompt, %d completion tokens",
            usage.prompt_tokens,
            usage.completion_tokens,
        )

    def cost(self) -> float | None:
        rates = PRICING.get(self.model)
        if self.usage is None or rates is None:
            return None
        return compute_cost(self.usage, rates)


def review(
    changes: str,
    prompt: str | None = None,
    reviewer: Reviewer | None = None,
) -> tuple[Review, float | None]:
    reviewer = reviewer or Reviewer()
    result = reviewer.request_review(changes, build_system_prompt(prompt))
    return result, reviewer.cost()
