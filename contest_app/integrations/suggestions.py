"""Question suggestions for the contest editor.

The suggester is an external, fallible collaborator: every implementation
returns either a suggestion or ``None``. Callers decide what to do with a
failure; nothing here raises for a bad or missing response.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
import logging
from typing import Protocol, Union

from google import genai
from google.genai import types
from pydantic import BaseModel, ConfigDict, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from contest_app.constants.suggestion_constants import (
    OFFLINE_SUGGESTION_DELAY_SECONDS,
    SUGGESTED_MCQ_OPTION_COUNT,
    SUGGESTION_MODEL,
)
from contest_app.core.models import TrialType

logger = logging.getLogger(__name__)


class _SuggestionModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MCQSuggestion(_SuggestionModel):
    question_text: str
    options: list[str]
    correct_answer_index: int

    @field_validator("question_text")
    @classmethod
    def _question_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("question text must not be empty")
        return value

    @field_validator("options")
    @classmethod
    def _exactly_four_options(cls, value: list[str]) -> list[str]:
        if len(value) != SUGGESTED_MCQ_OPTION_COUNT:
            raise ValueError(f"expected {SUGGESTED_MCQ_OPTION_COUNT} options, got {len(value)}")
        return [option.strip() for option in value]

    @model_validator(mode="after")
    def _correct_index_in_range(self) -> "MCQSuggestion":
        if not 0 <= self.correct_answer_index < len(self.options):
            raise ValueError("correct answer index is out of range")
        return self


class PromptSuggestion(_SuggestionModel):
    prompt: str

    @field_validator("prompt")
    @classmethod
    def _prompt_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("prompt must not be empty")
        return value


TrialSuggestion = Union[MCQSuggestion, PromptSuggestion]


class QuestionSuggester(Protocol):
    async def suggest(
        self,
        trial_type: TrialType,
        job_title: str,
        existing_prompts: Sequence[str],
    ) -> TrialSuggestion | None:
        ...


def build_prompt(trial_type: TrialType, job_title: str, existing_prompts: Sequence[str]) -> str:
    avoided = ", ".join(existing_prompts)
    if trial_type is TrialType.MCQ:
        return (
            f'Based on the job title "{job_title}", generate a single, relevant multiple-choice '
            "question to assess a candidate's basic knowledge.\n"
            "Avoid questions that are too generic or too specific to a single company's technology "
            "stack unless the title is very specific.\n"
            f"Do not repeat questions on these topics: {avoided}.\n"
            f"Provide {SUGGESTED_MCQ_OPTION_COUNT} distinct options. Designate the correct answer."
        )
    if trial_type is TrialType.TEXT_RESPONSE:
        return (
            f'Based on the job title "{job_title}", generate a single, insightful, open-ended question '
            "or prompt for a text response. This should assess a candidate's experience, "
            "problem-solving skills, or understanding of the role.\n"
            f"Do not repeat prompts on these topics: {avoided}."
        )
    if trial_type is TrialType.CODING_EXERCISE:
        return (
            f'Based on the job title "{job_title}", generate a prompt for a short, practical coding '
            "exercise. It should be solvable in a text editor and assess a fundamental skill for the role.\n"
            f"Do not repeat prompts on these topics: {avoided}."
        )
    if trial_type is TrialType.DELIVERABLE:
        return (
            f'Based on the job title "{job_title}", generate a prompt for a task where a candidate needs '
            "to create and upload a deliverable (e.g., a document, a design, a plan). The task should be "
            "something a candidate can reasonably complete and demonstrate their skills.\n"
            f"Do not repeat prompts on these topics: {avoided}."
        )
    raise ValueError(f"Unknown trial type: {trial_type!r}")


def _response_schema(trial_type: TrialType) -> types.Schema:
    if trial_type is TrialType.MCQ:
        return types.Schema(
            type=types.Type.OBJECT,
            properties={
                "questionText": types.Schema(
                    type=types.Type.STRING,
                    description="The text of the multiple-choice question.",
                ),
                "options": types.Schema(
                    type=types.Type.ARRAY,
                    description=f"An array of {SUGGESTED_MCQ_OPTION_COUNT} string options for the question.",
                    items=types.Schema(type=types.Type.STRING),
                ),
                "correctAnswerIndex": types.Schema(
                    type=types.Type.INTEGER,
                    description="The 0-based index of the correct answer in the 'options' array.",
                ),
            },
            required=["questionText", "options", "correctAnswerIndex"],
        )
    return types.Schema(
        type=types.Type.OBJECT,
        properties={
            "prompt": types.Schema(
                type=types.Type.STRING,
                description="The text of the prompt shown to the candidate.",
            ),
        },
        required=["prompt"],
    )


def parse_suggestion(trial_type: TrialType, payload: str) -> TrialSuggestion:
    """Validate a JSON payload. Raises pydantic's ValidationError when it is unusable."""
    if trial_type is TrialType.MCQ:
        return MCQSuggestion.model_validate_json(payload)
    return PromptSuggestion.model_validate_json(payload)


class GeminiQuestionSuggester:
    """Asks a Gemini model for a trial suggestion using a JSON response schema."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str = SUGGESTION_MODEL,
        client: genai.Client | None = None,
    ) -> None:
        if client is None and not api_key:
            raise ValueError("An API key or a configured client is required.")
        self._api_key = api_key
        self._model = model
        self._client = client

    def _get_client(self) -> genai.Client:
        if self._client is None:
            self._client = genai.Client(api_key=self._api_key)
        return self._client

    async def suggest(
        self,
        trial_type: TrialType,
        job_title: str,
        existing_prompts: Sequence[str],
    ) -> TrialSuggestion | None:
        try:
            client = self._get_client()
            response = await client.aio.models.generate_content(
                model=self._model,
                contents=build_prompt(trial_type, job_title, existing_prompts),
                config=types.GenerateContentConfig(
                    response_mime_type="application/json",
                    response_schema=_response_schema(trial_type),
                ),
            )
            payload = response.text
        except Exception:
            logger.exception("Suggestion request for %s failed", trial_type.value)
            return None

        if not payload:
            logger.warning("Suggestion response for %s was empty", trial_type.value)
            return None
        try:
            return parse_suggestion(trial_type, payload)
        except PydanticValidationError as exc:
            logger.warning("Rejected %s suggestion: %s", trial_type.value, exc)
            return None


class OfflineQuestionSuggester:
    """Deterministic canned suggestions for offline and test environments."""

    def __init__(self, delay_seconds: float = OFFLINE_SUGGESTION_DELAY_SECONDS) -> None:
        self._delay = delay_seconds

    async def suggest(
        self,
        trial_type: TrialType,
        job_title: str,
        existing_prompts: Sequence[str],
    ) -> TrialSuggestion | None:
        if self._delay > 0:
            await asyncio.sleep(self._delay)
        if trial_type is TrialType.MCQ:
            return MCQSuggestion(
                question_text=f"What is a key skill for a {job_title}?",
                options=["Communication", "Problem Solving", "Teamwork", "All of the above"],
                correct_answer_index=3,
            )
        if trial_type is TrialType.TEXT_RESPONSE:
            return PromptSuggestion(
                prompt=f"Describe a challenging situation you faced as a {job_title} and how you resolved it."
            )
        if trial_type is TrialType.CODING_EXERCISE:
            return PromptSuggestion(prompt="Write a function in any language to reverse a string.")
        if trial_type is TrialType.DELIVERABLE:
            return PromptSuggestion(
                prompt=f"Create a one-page PDF document outlining a 30-60-90 day plan for a new {job_title}."
            )
        return None


def create_suggester(api_key: str | None) -> QuestionSuggester:
    """Pick the suggester for this process. Without a key the offline suggester is used."""
    if api_key:
        return GeminiQuestionSuggester(api_key=api_key)
    logger.warning("No suggestion API key configured; using offline suggestions.")
    return OfflineQuestionSuggester()
