from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from lecture_pilot.core.errors import InvalidInputError
from lecture_pilot.schemas import Flashcard, QuizQuestion


@dataclass(frozen=True)
class PerformanceBand:
    title: str
    message: str


OUTSTANDING = PerformanceBand(
    "Outstanding Mastery!", "You have a solid grasp of the core concepts. You are ready!"
)
GREAT_PROGRESS = PerformanceBand(
    "Great Progress",
    "Good understanding. Review the incorrect answers to refine your knowledge.",
)
GOOD_START = PerformanceBand(
    "Good Start",
    "You understand the basics, but there are gaps. Check the summary again.",
)
NEEDS_REVIEW = PerformanceBand(
    "Needs Review",
    "It seems like you struggled. I recommend re-watching the key segments.",
)


def performance_band(percentage: float) -> PerformanceBand:
    # lower bounds are inclusive
    if percentage >= 90:
        return OUTSTANDING
    if percentage >= 70:
        return GREAT_PROGRESS
    if percentage >= 50:
        return GOOD_START
    return NEEDS_REVIEW


class FlashcardDeck:
    def __init__(self, cards: list[Flashcard]) -> None:
        self.cards = list(cards)
        self.index = 0
        self.revealed = False

    @property
    def current(self) -> Flashcard | None:
        return self.cards[self.index] if self.cards else None

    def flip(self) -> None:
        if self.cards:
            self.revealed = not self.revealed

    def _move(self, step: int) -> None:
        if not self.cards:
            return
        # hide the answer before the next card shows
        self.revealed = False
        self.index = (self.index + step) % len(self.cards)

    def next(self) -> None:
        self._move(1)

    def previous(self) -> None:
        self._move(-1)

    def snapshot(self) -> dict[str, Any]:
        return {
            "index": self.index,
            "total": len(self.cards),
            "revealed": self.revealed,
            "card": self.current.model_dump() if self.current else None,
        }


class QuizRunner:
    def __init__(self, questions: list[QuizQuestion]) -> None:
        self.questions = list(questions)
        self._by_id = {q.id: q for q in self.questions}
        self.answers: dict[int, int] = {}
        self.show_results = False

    def select(self, question_id: int, option_index: int) -> None:
        if self.show_results:
            return
        q = self._by_id.get(question_id)
        if q is None:
            raise InvalidInputError(f"Unknown question id: {question_id}")
        if not 0 <= option_index < len(q.options):
            raise InvalidInputError(f"option_index out of range (0..{len(q.options) - 1})")
        self.answers[question_id] = option_index

    @property
    def can_submit(self) -> bool:
        return bool(self.questions) and all(q.id in self.answers for q in self.questions)

    def submit(self) -> None:
        if not self.can_submit:
            answered = sum(1 for q in self.questions if q.id in self.answers)
            raise InvalidInputError(
                f"Answer every question before submitting ({answered}/{len(self.questions)})"
            )
        self.show_results = True

    def retake(self) -> None:
        self.answers = {}
        self.show_results = False

    @property
    def score(self) -> int:
        return sum(1 for q in self.questions if self.answers.get(q.id) == q.correct_answer_index)

    @property
    def percentage(self) -> float:
        if not self.questions:
            return 0.0
        return self.score * 100 / len(self.questions)

    def band(self) -> PerformanceBand:
        return performance_band(self.percentage)

    def snapshot(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "total": len(self.questions),
            "answered": len(self.answers),
            "answers": dict(self.answers),
            "can_submit": self.can_submit,
            "show_results": self.show_results,
        }
        if self.show_results:
            band = self.band()
            out.update(
                score=self.score,
                percentage=round(self.percentage),
                band={"title": band.title, "message": band.message},
            )
        return out
