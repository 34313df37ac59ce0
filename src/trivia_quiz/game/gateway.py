"""Question generation through a chat-completion model.

The gateway turns a :class:`SessionConfig` into a natural-language
instruction, sends it to a :class:`CompletionClient`, and accepts the reply
only when it is a single JSON object whose ``questions`` array holds exactly
the requested number of well-formed entries. Every failure on that path
(transport, timeout, parse, shape) is raised as :class:`GenerationError`.
"""

from __future__ import annotations

import asyncio
import json
import logging
import re
from collections.abc import Mapping
from typing import Any, Protocol

from .errors import GenerationError
from .models import OPTION_COUNT, Question, SessionConfig

__all__ = [
    "CompletionClient",
    "OpenAICompletionClient",
    "QuestionGateway",
    "build_generation_prompt",
    "parse_questions_payload",
]

logger = logging.getLogger(__name__)

_SYSTEM_PROMPT = (
    "You write accurate, unambiguous multiple-choice trivia questions and "
    "reply with a single JSON object only."
)

_EXAMPLE_PAYLOAD = """{
  "questions": [
    {
      "question": "What is the chemical symbol for gold?",
      "options": ["Au", "Ag", "Go", "Gd"],
      "correctAnswer": 0,
      "category": "Science"
    }
  ]
}"""

_FENCE_RE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)


class CompletionClient(Protocol):
    """Anything that can turn a prompt into response text."""

    def complete(self, prompt: str) -> str:
        """Return the model's reply to ``prompt``."""


class OpenAICompletionClient:
    """Adapter for OpenAI chat completions."""

    def __init__(
        self,
        *,
        model: str,
        temperature: float,
        max_output_tokens: int,
        request_timeout: int,
        client: Any,
    ) -> None:
        self._model = model
        self._temperature = temperature
        self._max_output_tokens = max_output_tokens
        self._timeout = request_timeout
        self._client = client

    def complete(self, prompt: str) -> str:
        response = self._client.chat.completions.create(
            model=self._model,
            messages=[
                {"role": "system", "content": _SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            temperature=self._temperature,
            max_tokens=self._max_output_tokens,
            timeout=self._timeout,
        )
        content = response.choices[0].message.content or ""
        return content.strip()


def build_generation_prompt(config: SessionConfig) -> str:
    categories = ", ".join(config.categories)
    return (
        f"Generate exactly {config.question_count} trivia questions with the "
        "following requirements:\n"
        f"- Categories: {categories}\n"
        f"- Difficulty: {config.difficulty.value}\n"
        f"- Format: Multiple choice with {OPTION_COUNT} options\n\n"
        "Respond ONLY with a valid JSON object in this exact format:\n"
        f"{_EXAMPLE_PAYLOAD}\n\n"
        f"Make sure each question has exactly {OPTION_COUNT} plausible options "
        "and the correctAnswer is the index "
        f"(0-{OPTION_COUNT - 1}) of the correct option.\n"
        "DO NOT OUTPUT ANYTHING OTHER THAN VALID JSON. Your entire response "
        "must be a single, valid JSON object."
    )


def parse_questions_payload(
    content: str, *, expected_count: int
) -> tuple[Question, ...]:
    """Validate a model reply and build the question tuple.

    A single surrounding Markdown code fence is tolerated. Any malformed
    entry rejects the whole batch.
    """

    text = (content or "").strip()
    fenced = _FENCE_RE.match(text)
    if fenced:
        text = fenced.group(1)
    if not text:
        raise GenerationError("The question service returned an empty reply.")
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise GenerationError(
            f"The question service reply is not valid JSON: {exc.msg}."
        ) from exc

    if not isinstance(data, Mapping):
        raise GenerationError("Expected a JSON object at the top level.")
    entries = data.get("questions")
    if not isinstance(entries, list):
        raise GenerationError("The reply has no 'questions' array.")
    if len(entries) != expected_count:
        raise GenerationError(
            f"Expected {expected_count} questions but received "
            f"{len(entries)}."
        )
    return tuple(
        _build_question(entry, position)
        for position, entry in enumerate(entries)
    )


def _build_question(entry: Any, position: int) -> Question:
    where = f"questions[{position}]"
    if not isinstance(entry, Mapping):
        raise GenerationError(f"{where} is not an object.")

    prompt = entry.get("question")
    if not isinstance(prompt, str) or not prompt.strip():
        raise GenerationError(f"{where}.question must be non-empty text.")

    options = entry.get("options")
    if not isinstance(options, list) or len(options) != OPTION_COUNT:
        raise GenerationError(
            f"{where}.options must list exactly {OPTION_COUNT} choices."
        )
    if not all(isinstance(opt, str) and opt.strip() for opt in options):
        raise GenerationError(f"{where}.options must be non-empty text.")

    answer = entry.get("correctAnswer")
    # bool is an int subclass; ``true`` is not a valid index.
    if (
        not isinstance(answer, int)
        or isinstance(answer, bool)
        or not 0 <= answer < OPTION_COUNT
    ):
        raise GenerationError(
            f"{where}.correctAnswer must be an integer from 0 to "
            f"{OPTION_COUNT - 1}."
        )

    category = entry.get("category")
    if not isinstance(category, str) or not category.strip():
        raise GenerationError(f"{where}.category must be non-empty text.")

    return Question(
        prompt=prompt.strip(),
        options=tuple(opt.strip() for opt in options),
        correct_index=answer,
        category=category.strip(),
    )


class QuestionGateway:
    """Awaitable front for a blocking :class:`CompletionClient`."""

    def __init__(
        self,
        client: CompletionClient,
        *,
        timeout: float | None = None,
    ) -> None:
        self._client = client
        self._timeout = timeout

    async def generate(self, config: SessionConfig) -> tuple[Question, ...]:
        if not config.categories:
            raise GenerationError("At least one category is required.")
        if config.question_count <= 0:
            raise GenerationError("Question count must be positive.")

        prompt = build_generation_prompt(config)
        logger.info(
            "Requesting trivia questions",
            extra={
                "categories": list(config.categories),
                "difficulty": config.difficulty.value,
                "question_count": config.question_count,
            },
        )
        try:
            content = await asyncio.wait_for(
                asyncio.to_thread(self._client.complete, prompt),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError as exc:
            logger.warning(
                "Question request timed out",
                extra={"timeout_seconds": self._timeout},
            )
            raise GenerationError(
                "The question service did not answer in time."
            ) from exc
        except Exception as exc:
            logger.warning(
                "Question request failed",
                extra={"error": repr(exc)},
            )
            raise GenerationError(
                f"The question service request failed: {exc}"
            ) from exc

        try:
            questions = parse_questions_payload(
                content, expected_count=config.question_count
            )
        except GenerationError as exc:
            logger.warning(
                "Rejected question service reply",
                extra={"reason": str(exc), "reply_chars": len(content or "")},
            )
            raise
        logger.info(
            "Received trivia questions", extra={"question_count": len(questions)}
        )
        return questions
