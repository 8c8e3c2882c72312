import asyncio

import pytest

from lecture_pilot.core.errors import GenerationError
from lecture_pilot.schemas import ExamType, TimeFrame
from lecture_pilot.services.generators import default_strategy
from lecture_pilot.services.orchestrator import generate_study_bundle

from conftest import FakeLLM, LECTURE_TEXT


def _bundle(llm):
    return asyncio.run(generate_study_bundle(llm, LECTURE_TEXT, ExamType.SCHOOL, TimeFrame.ONE_DAY))


def test_bundle_has_every_artifact():
    llm = FakeLLM()
    bundle = _bundle(llm)

    assert bundle.summary == "Overview of thermodynamics."
    assert bundle.cheat_sheet == "| Law | Statement |"
    assert [c.timestamp for c in bundle.chapters] == ["00:00", "05:00"]
    assert bundle.formulas[0].expression == "dU = Q - W"
    assert bundle.strategy.focus_advice.startswith("Drill")
    assert len(bundle.quiz) == 10
    assert len(bundle.flashcards) == 3
    assert sorted(llm.calls) == sorted(
        ["summary", "chapters", "formulas", "exam_strategy", "quiz", "flashcards", "cheat_sheet"]
    )


def test_requests_run_concurrently():
    llm = FakeLLM()
    _bundle(llm)
    assert llm.max_in_flight == 7


@pytest.mark.parametrize("kind", ["summary", "cheat_sheet"])
def test_free_text_failure_fails_the_bundle(kind):
    with pytest.raises(GenerationError):
        _bundle(FakeLLM(fail={kind}))


def test_structured_failures_do_not_fail_the_bundle():
    llm = FakeLLM(fail={"chapters", "formulas", "exam_strategy", "quiz", "flashcards"})
    bundle = _bundle(llm)

    assert bundle.summary
    assert bundle.cheat_sheet
    assert bundle.chapters == []
    assert bundle.formulas == []
    assert bundle.quiz == []
    assert bundle.flashcards == []
    assert bundle.strategy == default_strategy()
