from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


def _now() -> datetime:
    return datetime.now(timezone.utc)


class ViewState(str, Enum):
    AUTH = "AUTH"
    UPLOAD = "UPLOAD"
    PROCESSING = "PROCESSING"
    DASHBOARD = "DASHBOARD"


class ExamType(str, Enum):
    UNIVERSITY = "University Final"
    COMPETITIVE = "Competitive Exam (MCQ)"
    SCHOOL = "School Test"
    GENERAL = "General Knowledge"


class TimeFrame(str, Enum):
    ONE_DAY = "1 Day"
    ONE_WEEK = "1 Week"
    ONE_MONTH = "1 Month"


class _Artifact(BaseModel):
    # LLM payloads arrive camelCased; Python side stays snake_case
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class User(BaseModel):
    id: str
    email: str
    name: str | None = None


class Lecture(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    transcript: str
    video_id: str | None = None
    video_url: str | None = None


class Chapter(_Artifact):
    timestamp: str  # e.g. "05:30"
    title: str
    summary: str


class Formula(_Artifact):
    expression: str
    description: str


class ExamStrategy(_Artifact):
    priority_topics: list[str] = Field(default_factory=list)
    skip_topics: list[str] = Field(default_factory=list)
    focus_advice: str = ""


class QuizQuestion(_Artifact):
    id: int
    question: str
    options: list[str]
    correct_answer_index: int
    explanation: str = ""

    @field_validator("options")
    @classmethod
    def _four_options(cls, v: list[str]) -> list[str]:
        if len(v) != 4:
            raise ValueError(f"expected exactly 4 options, got {len(v)}")
        return v

    @model_validator(mode="after")
    def _index_in_range(self) -> "QuizQuestion":
        if not 0 <= self.correct_answer_index < 4:
            raise ValueError(f"correct_answer_index out of range: {self.correct_answer_index}")
        return self


class Flashcard(_Artifact):
    id: int
    front: str
    back: str


class StudyBundle(BaseModel):
    model_config = ConfigDict(frozen=True)

    summary: str
    chapters: list[Chapter]
    formulas: list[Formula]
    strategy: ExamStrategy
    quiz: list[QuizQuestion]
    flashcards: list[Flashcard]
    cheat_sheet: str


class ChatMessage(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    sender: Literal["user", "assistant"]
    text: str
    created_at: datetime = Field(default_factory=_now)


class EmailResult(BaseModel):
    success: bool
    subject: str
    body: str
    simulated: bool
