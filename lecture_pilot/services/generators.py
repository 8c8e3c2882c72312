from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable

from lecture_pilot.core.errors import GenerationError
from lecture_pilot.schemas import (
    Chapter,
    ExamStrategy,
    ExamType,
    Flashcard,
    Formula,
    QuizQuestion,
    TimeFrame,
)
from lecture_pilot.services.llm import prompts
from lecture_pilot.services.llm.client import LLMClient

logger = logging.getLogger(__name__)

QUIZ_QUESTION_COUNT = 10
FLASHCARD_COUNT = 6


class ErrorPolicy(str, Enum):
    PROPAGATE = "propagate"
    DEFAULT_TO_EMPTY = "default_to_empty"


@dataclass(frozen=True)
class GenerationRequest:
    transcript: str
    exam_type: ExamType = ExamType.UNIVERSITY
    time_frame: TimeFrame = TimeFrame.ONE_WEEK


Produce = Callable[[LLMClient, str, GenerationRequest], Awaitable[Any]]


@dataclass(frozen=True)
class Generator:
    """One study artifact: how to ask for it and what to do when asking fails."""

    name: str
    max_chars: int
    policy: ErrorPolicy
    produce: Produce
    fallback: Callable[[], Any] | None = None


def truncate(transcript: str, max_chars: int) -> str:
    return (transcript or "")[:max_chars]


def _items(payload: Any) -> list[Any]:
    """
    Structured payloads arrive as {"items": [...]}; tolerate a bare list too.
    """
    if isinstance(payload, dict):
        payload = payload.get("items")
    if not isinstance(payload, list):
        raise ValueError(f"expected a list of items, got {type(payload).__name__}")
    return payload


def _unique_ids(items: list[Any], kind: str) -> list[Any]:
    ids = [it.id for it in items]
    if len(ids) != len(set(ids)):
        raise ValueError(f"duplicate {kind} ids: {ids}")
    return items


# ----------------------------
# Free-text generators
# ----------------------------

async def _summary(llm: LLMClient, text: str, req: GenerationRequest) -> str:
    return await llm.generate_text(prompts.SUMMARY_TEMPLATE.format(transcript=text))


async def _cheat_sheet(llm: LLMClient, text: str, req: GenerationRequest) -> str:
    return await llm.generate_text(prompts.CHEAT_SHEET_TEMPLATE.format(transcript=text))


# ----------------------------
# Structured-list generators
# ----------------------------

async def _chapters(llm: LLMClient, text: str, req: GenerationRequest) -> list[Chapter]:
    payload = await llm.generate_json(
        prompts.CHAPTERS_TEMPLATE.format(transcript=text),
        prompts.CHAPTERS_SCHEMA,
        name="chapters",
    )
    return [Chapter.model_validate(it) for it in _items(payload)]


async def _formulas(llm: LLMClient, text: str, req: GenerationRequest) -> list[Formula]:
    payload = await llm.generate_json(
        prompts.FORMULAS_TEMPLATE.format(transcript=text),
        prompts.FORMULAS_SCHEMA,
        name="formulas",
    )
    return [Formula.model_validate(it) for it in _items(payload)]


async def _strategy(llm: LLMClient, text: str, req: GenerationRequest) -> ExamStrategy:
    payload = await llm.generate_json(
        prompts.STRATEGY_TEMPLATE.format(
            exam_type=req.exam_type.value,
            time_frame=req.time_frame.value,
            transcript=text,
        ),
        prompts.STRATEGY_SCHEMA,
        name="exam_strategy",
    )
    return ExamStrategy.model_validate(payload)


async def _quiz(llm: LLMClient, text: str, req: GenerationRequest) -> list[QuizQuestion]:
    payload = await llm.generate_json(
        prompts.QUIZ_TEMPLATE.format(count=QUIZ_QUESTION_COUNT, transcript=text),
        prompts.QUIZ_SCHEMA,
        name="quiz",
    )
    # one malformed question discards the whole quiz
    questions = [QuizQuestion.model_validate(it) for it in _items(payload)]
    return _unique_ids(questions, "question")


async def _flashcards(llm: LLMClient, text: str, req: GenerationRequest) -> list[Flashcard]:
    payload = await llm.generate_json(
        prompts.FLASHCARDS_TEMPLATE.format(count=FLASHCARD_COUNT, transcript=text),
        prompts.FLASHCARDS_SCHEMA,
        name="flashcards",
    )
    cards = [Flashcard.model_validate(it) for it in _items(payload)]
    return _unique_ids(cards, "flashcard")


def default_strategy() -> ExamStrategy:
    return ExamStrategy(
        priority_topics=["Core Concepts"],
        skip_topics=["Detailed derivations"],
        focus_advice="Focus on the main summary points.",
    )


SUMMARY = Generator("summary", 30_000, ErrorPolicy.PROPAGATE, _summary)
CHAPTERS = Generator("chapters", 30_000, ErrorPolicy.DEFAULT_TO_EMPTY, _chapters, list)
FORMULAS = Generator("formulas", 30_000, ErrorPolicy.DEFAULT_TO_EMPTY, _formulas, list)
STRATEGY = Generator("strategy", 20_000, ErrorPolicy.DEFAULT_TO_EMPTY, _strategy, default_strategy)
QUIZ = Generator("quiz", 20_000, ErrorPolicy.DEFAULT_TO_EMPTY, _quiz, list)
FLASHCARDS = Generator("flashcards", 20_000, ErrorPolicy.DEFAULT_TO_EMPTY, _flashcards, list)
CHEAT_SHEET = Generator("cheat_sheet", 30_000, ErrorPolicy.PROPAGATE, _cheat_sheet)

GENERATORS: tuple[Generator, ...] = (
    SUMMARY,
    CHAPTERS,
    FORMULAS,
    STRATEGY,
    QUIZ,
    FLASHCARDS,
    CHEAT_SHEET,
)


async def run_generator(gen: Generator, llm: LLMClient, req: GenerationRequest) -> Any:
    text = truncate(req.transcript, gen.max_chars)
    try:
        return await gen.produce(llm, text, req)
    except (GenerationError, ValueError, TypeError, KeyError) as e:
        if gen.policy is ErrorPolicy.PROPAGATE or gen.fallback is None:
            raise GenerationError(f"{gen.name} generation failed: {e}") from e
        logger.warning("%s generation failed, using default: %s", gen.name, e)
        return gen.fallback()
